"""Post-build hook composition.

The framework calls a single post-build hook. When the site already
defines one, the compiler's hook is chained after it: the site's hook
runs to completion first, then the compiler runs.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import structlog

from buildport_core.compiler.orchestrator import BuildOrchestrator, BuildResult
from buildport_core.errors import HookError
from buildport_core.schemas.output_config import OutputConfig

logger = structlog.get_logger(__name__)

Hook = Callable[..., Any]


async def _call(hook: Hook, *args: Any, **kwargs: Any) -> Any:
    result = hook(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


def _hook_name(hook: Hook) -> str:
    return getattr(hook, "__qualname__", None) or getattr(hook, "__name__", None) or repr(hook)


def chain_hooks(original: Hook | None, added: Hook) -> Callable[..., Awaitable[Any]]:
    """Compose two post-build hooks into one coroutine function.

    Args:
        original: The site's own hook, or None if it defines none.
        added: Hook to run after ``original``.

    Returns:
        Async callable forwarding its arguments to both hooks, in order.
        It returns what ``added`` returned.

    Raises:
        HookError: When ``added`` fails (raised from the chained call).
            Failures of ``original`` propagate unchanged and ``added``
            does not run.

    Example:
        >>> hook = chain_hooks(site_on_post_build, on_post_build)
        >>> await hook(store_state)
    """
    added_name = _hook_name(added)

    async def chained(*args: Any, **kwargs: Any) -> Any:
        if original is not None:
            await _call(original, *args, **kwargs)
        try:
            return await _call(added, *args, **kwargs)
        except HookError:
            raise
        except Exception as e:
            logger.error("hook_failed", hook=added_name, error=str(e))
            raise HookError(added_name, internal_details=repr(e)) from e

    chained.__name__ = f"chained_{getattr(added, '__name__', 'hook')}"
    return chained


async def on_post_build(
    store_state: Mapping[str, Any],
    config: OutputConfig | None = None,
) -> BuildResult:
    """Generate build output from the framework's final store state."""
    return await BuildOrchestrator(config).run(store_state)

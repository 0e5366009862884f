"""Serverless function bundle materialization.

One bundle is written per SSR/DSG page and per API declaration, under
``<output_dir>/functions``:

    <prefix>/<page path>/index.html.func/     page function
    <prefix>/api/<function route>.func/       API function

Each bundle holds:
- ``.vc-config.json``: entry descriptor for the platform runtime
- ``index.js``: entry file requiring the page renderer, or the API
  handler next to it
- ``handler.js``: the compiled API function, copied in (API only)
- ``route.json``: path pattern and HTTP methods served

Deferred (DSG) pages also get ``index.html.prerender-config.json`` next
to their bundle so the platform caches the first render.

When a sub-protocol has nothing to materialize no directory is created at
all; an empty functions directory changes platform routing.
"""

from __future__ import annotations

import asyncio
import posixpath
import shutil
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from jinja2.sandbox import SandboxedEnvironment

from buildport_core.errors import MaterializationError
from buildport_core.schemas.build_state import PageMode
from buildport_core.schemas.functions import (
    API_METHODS,
    PAGE_METHODS,
    FunctionBundle,
    FunctionConfig,
    FunctionDescriptor,
    FunctionKind,
    PrerenderConfig,
    RouteMetadata,
)

if TYPE_CHECKING:
    from buildport_core.schemas.build_state import ApiFunction, Page
    from buildport_core.schemas.output_config import OutputConfig

logger = structlog.get_logger(__name__)

BUNDLE_SUFFIX = ".func"
ENTRY_FILE = "index.js"
FUNCTION_CONFIG_FILE = ".vc-config.json"
ROUTE_METADATA_FILE = "route.json"
API_HANDLER_FILE = "handler.js"
PRERENDER_SUFFIX = ".prerender-config.json"

_PAGE_ENTRY_TEMPLATE = """\
// Generated by buildport. Do not edit.
const { createHandler } = require({{ entry_module | tojson }});

module.exports = createHandler({{ route | tojson }}, {
  pathPrefix: {{ path_prefix | tojson }},
  deferred: {{ deferred | tojson }},
});
"""

_API_ENTRY_TEMPLATE = """\
// Generated by buildport. Do not edit.
const mod = require({{ entry_module | tojson }});

module.exports = (mod && mod.default) || mod;
"""

_env = SandboxedEnvironment(trim_blocks=True, lstrip_blocks=True, keep_trailing_newline=True)


def _prefixed_route(prefix: str, path: str) -> str:
    if not path.startswith("/"):
        path = "/" + path
    return f"/{prefix}{path}" if prefix else path


def build_page_descriptors(
    pages: Sequence[Page],
    prefix: str,
    handler_module: str,
) -> list[FunctionDescriptor]:
    """Describe one page function per SSR/DSG page.

    Static pages are skipped. Order follows the page table.

    Args:
        pages: Pages from the build state.
        prefix: Path prefix without surrounding slashes.
        handler_module: Module exporting ``createHandler``.
    """
    descriptors = []
    for page in pages:
        if not page.requires_function:
            continue
        descriptors.append(
            FunctionDescriptor(
                kind=FunctionKind.PAGE_FUNCTION,
                source_path=page.path,
                path_prefix=prefix,
                route=_prefixed_route(prefix, page.path),
                bundle_name=posixpath.join(prefix, page.path.strip("/"), "index.html"),
                methods=PAGE_METHODS,
                deferred=page.mode is PageMode.DEFERRED_STATIC_GENERATION,
                entry_module=handler_module,
            )
        )
    return descriptors


def build_api_descriptors(
    functions: Sequence[ApiFunction],
    prefix: str,
    functions_cache_dir: Path,
) -> list[FunctionDescriptor]:
    """Describe one API function per declaration.

    The public route is the framework's ``matchPath`` when present,
    otherwise ``/api/<function route>``; the prefix is applied either way.
    The compiled file is copied into the bundle as ``handler.js``, so the
    entry requires it relatively.

    Args:
        functions: API declarations from the build state.
        prefix: Path prefix without surrounding slashes.
        functions_cache_dir: Where the framework compiled the functions.
    """
    descriptors = []
    for fn in functions:
        function_route = fn.function_route.strip("/")
        if fn.absolute_compiled_file_path:
            compiled = Path(fn.absolute_compiled_file_path)
        elif fn.relative_compiled_file_path:
            compiled = functions_cache_dir / fn.relative_compiled_file_path
        else:
            compiled = functions_cache_dir / f"{function_route}.js"
        descriptors.append(
            FunctionDescriptor(
                kind=FunctionKind.API_FUNCTION,
                source_path=fn.function_route,
                path_prefix=prefix,
                route=_prefixed_route(prefix, fn.match_path or f"/api/{function_route}"),
                bundle_name=posixpath.join(prefix, "api", function_route),
                methods=API_METHODS,
                entry_module=f"./{API_HANDLER_FILE}",
                source_file=compiled,
            )
        )
    return descriptors


class FunctionMaterializer:
    """Writes function bundles for a build.

    Bundles are written concurrently, one worker thread per descriptor.
    Writing is idempotent: the same descriptor always produces the same
    bytes, and existing files are overwritten.

    Args:
        config: Output configuration (functions directory, runtime).

    Example:
        >>> materializer = FunctionMaterializer(config)
        >>> bundles = await materializer.materialize_pages(state.dynamic_pages(), "")
    """

    def __init__(self, config: OutputConfig) -> None:
        self.config = config
        self._log = logger.bind(component="function_materializer")

    async def materialize_pages(self, pages: Sequence[Page], prefix: str) -> list[FunctionBundle]:
        """Write page functions for every SSR/DSG page."""
        descriptors = build_page_descriptors(pages, prefix, self.config.page_handler_module)
        return await self.materialize(descriptors)

    async def materialize_api(
        self, functions: Sequence[ApiFunction], prefix: str
    ) -> list[FunctionBundle]:
        """Write API functions for every declaration."""
        descriptors = build_api_descriptors(functions, prefix, self.config.functions_cache_dir)
        return await self.materialize(descriptors)

    async def materialize(self, descriptors: Sequence[FunctionDescriptor]) -> list[FunctionBundle]:
        """Write all descriptors concurrently.

        Every write is allowed to settle; the first failure (in descriptor
        order) is then raised, so a partial set is never reported as done.

        Returns:
            Written bundles, in descriptor order. Empty (and nothing
            written) when ``descriptors`` is empty.

        Raises:
            MaterializationError: If any bundle could not be written.
        """
        if not descriptors:
            return []

        results = await asyncio.gather(
            *(asyncio.to_thread(self.write_bundle, d) for d in descriptors),
            return_exceptions=True,
        )
        bundles: list[FunctionBundle] = []
        for descriptor, result in zip(descriptors, results, strict=True):
            if isinstance(result, MaterializationError):
                raise result
            if isinstance(result, BaseException):
                raise MaterializationError(
                    f"Failed to write function for '{descriptor.route}'",
                    target=descriptor.route,
                    internal_details=repr(result),
                ) from result
            bundles.append(result)

        self._log.info(
            "functions_materialized",
            kind=descriptors[0].kind.value,
            count=len(bundles),
        )
        return bundles

    def bundle_dir(self, descriptor: FunctionDescriptor) -> Path:
        """Resolve a descriptor's bundle directory inside the functions dir.

        Raises:
            MaterializationError: If the path escapes the functions directory.
        """
        root = self.config.functions_dir.resolve()
        target = (root / f"{descriptor.bundle_name}{BUNDLE_SUFFIX}").resolve()
        if not target.is_relative_to(root):
            raise MaterializationError(
                f"Function path for '{descriptor.source_path}' escapes the output directory",
                target=descriptor.source_path,
            )
        return target

    def write_bundle(self, descriptor: FunctionDescriptor) -> FunctionBundle:
        """Write one bundle synchronously (runs in a worker thread).

        Raises:
            MaterializationError: If an API function's compiled file is missing.
        """
        bundle_dir = self.bundle_dir(descriptor)
        source_file = descriptor.source_file
        if source_file is not None and not source_file.is_file():
            raise MaterializationError(
                f"Compiled function for '{descriptor.source_path}' not found",
                target=descriptor.route,
                internal_details=str(source_file),
            )
        bundle_dir.mkdir(parents=True, exist_ok=True)
        if source_file is not None:
            shutil.copy2(source_file, bundle_dir / API_HANDLER_FILE)

        function_config = FunctionConfig(runtime=self.config.function_runtime, handler=ENTRY_FILE)
        (bundle_dir / FUNCTION_CONFIG_FILE).write_text(
            function_config.model_dump_json(by_alias=True, indent=2) + "\n"
        )

        metadata = RouteMetadata(
            kind=descriptor.kind,
            path=descriptor.route,
            methods=descriptor.methods,
            deferred=descriptor.deferred,
        )
        (bundle_dir / ROUTE_METADATA_FILE).write_text(metadata.model_dump_json(indent=2) + "\n")

        (bundle_dir / ENTRY_FILE).write_text(self.render_entry(descriptor))

        if descriptor.deferred:
            prerender_path = bundle_dir.with_name(
                bundle_dir.name.removesuffix(BUNDLE_SUFFIX) + PRERENDER_SUFFIX
            )
            prerender_path.write_text(PrerenderConfig().model_dump_json(indent=2) + "\n")

        return FunctionBundle(kind=descriptor.kind, route=descriptor.route, bundle_dir=bundle_dir)

    @staticmethod
    def render_entry(descriptor: FunctionDescriptor) -> str:
        """Render the entry file for a descriptor."""
        if descriptor.kind is FunctionKind.PAGE_FUNCTION:
            template = _env.from_string(_PAGE_ENTRY_TEMPLATE)
        else:
            template = _env.from_string(_API_ENTRY_TEMPLATE)
        return template.render(
            entry_module=descriptor.entry_module,
            route=descriptor.route,
            path_prefix=f"/{descriptor.path_prefix}" if descriptor.path_prefix else "",
            deferred=descriptor.deferred,
        )

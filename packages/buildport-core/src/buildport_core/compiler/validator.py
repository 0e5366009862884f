"""Build-state validation.

Checks the projected store state against :class:`BuildState` before any
output is touched. A failure is an expected, user-recoverable condition
(usually an unsupported framework version), reported as
:class:`~buildport_core.errors.ValidationError`.
"""

from __future__ import annotations

from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from buildport_core.errors import ValidationError
from buildport_core.schemas.build_state import BuildState

logger = structlog.get_logger(__name__)


def format_validation_errors(err: PydanticValidationError) -> str:
    """Render pydantic errors as ``loc: message`` lines."""
    lines = []
    for e in err.errors():
        loc = ".".join(str(x) for x in e["loc"]) or "<root>"
        lines.append(f"{loc}: {e['msg']}")
    return "; ".join(lines)


def validate_build_state(payload: Any) -> BuildState:
    """Validate a projected store state.

    Args:
        payload: Output of
            :func:`buildport_core.compiler.state_adapter.project_store_state`.

    Returns:
        Immutable BuildState.

    Raises:
        ValidationError: If the payload does not match the schema.
    """
    try:
        state = BuildState.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(internal_details=format_validation_errors(e)) from e

    logger.debug(
        "build_state_validated",
        pages=len(state.pages),
        redirects=len(state.redirects),
        functions=len(state.functions),
    )
    return state


def is_valid(payload: Any) -> bool:
    """Return whether a payload matches the build-state schema."""
    try:
        BuildState.model_validate(payload)
    except PydanticValidationError:
        return False
    return True

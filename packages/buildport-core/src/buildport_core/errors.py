"""Custom exception hierarchy for buildport-core.

This module defines the exception classes raised while compiling build
state into deployment output:
- BuildportError: Base exception for all buildport errors
- ValidationError: Build-state payload does not match the expected schema
- TransformError: A redirect cannot be normalized into a route
- MaterializationError: A function bundle or static file could not be written
- ManifestWriteError: The deployment manifest could not be persisted

User-facing messages are safe to display. Technical details (pydantic
error locations, OS error strings, file paths) are logged internally via
structlog and never folded into the user message.
"""

from __future__ import annotations

from typing import Any

import structlog

logger = structlog.get_logger(__name__)

# Where users are sent when the framework's state shape is not recognised
SUPPORT_URL = "https://vercel.com/help#issues"


class BuildportError(Exception):
    """Base exception for buildport.

    Args:
        user_message: Safe message to display to the user.
        internal_details: Optional technical details. Logged internally,
            never exposed to the user.

    Attributes:
        phase: Build phase that was running when the error surfaced. Set
            by the orchestrator; None when raised outside a build.

    Example:
        >>> raise BuildportError(
        ...     "Build output generation failed",
        ...     internal_details="EACCES on .vercel/output/functions",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize BuildportError with user message and optional details.

        Args:
            user_message: Safe message to display to the user.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(user_message)
        self.user_message = user_message
        self.internal_details = internal_details
        self.phase: str | None = None

        if internal_details:
            logger.error(
                "buildport_error",
                error_type=self.__class__.__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class ValidationError(BuildportError):
    """Raised when the build-state payload fails schema validation.

    A mismatch almost always means the installed framework version writes
    a state shape this compiler does not understand, so the default
    message points the user at the support channel.

    Example:
        >>> raise ValidationError(
        ...     internal_details="pages.0.1.mode: Field required",
        ... )
    """

    def __init__(
        self,
        user_message: str | None = None,
        *,
        internal_details: str | None = None,
    ) -> None:
        if user_message is None:
            user_message = (
                "Build state validation error. The installed framework version may "
                f"not be supported. Please file an issue at {SUPPORT_URL}"
            )
        super().__init__(user_message, internal_details=internal_details)


class TransformError(BuildportError):
    """Raised when a redirect cannot be turned into a route rule.

    Attributes:
        redirect: The offending redirect as a plain mapping (if known).
    """

    def __init__(
        self,
        user_message: str,
        *,
        redirect: dict[str, Any] | None = None,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(user_message, internal_details=internal_details)
        self.redirect = redirect


class MaterializationError(BuildportError):
    """Raised when a function bundle or static tree cannot be written.

    Attributes:
        target: Output path or logical route that failed (if known).
    """

    def __init__(
        self,
        user_message: str,
        *,
        target: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(user_message, internal_details=internal_details)
        self.target = target


class ManifestWriteError(MaterializationError):
    """Raised when the deployment manifest cannot be persisted."""

    pass


class ConfigurationError(BuildportError):
    """Raised when an output configuration file cannot be loaded.

    Attributes:
        file_path: Path to the configuration file (if known).
        field_path: Dot-separated path to the invalid field (if known).

    Example:
        >>> raise ConfigurationError(
        ...     "Invalid route format",
        ...     file_path="buildport.yaml",
        ...     field_path="route_format",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        file_path: str | None = None,
        field_path: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        context_parts: list[str] = []
        if file_path:
            context_parts.append(f"in {file_path}")
        if field_path:
            context_parts.append(f"field '{field_path}'")

        if context_parts:
            full_message = f"{user_message} ({', '.join(context_parts)})"
        else:
            full_message = user_message

        super().__init__(full_message, internal_details=internal_details)

        self.file_path = file_path
        self.field_path = field_path


class InjectionError(BuildportError):
    """Raised when a framework config or hook file cannot be rewritten.

    Attributes:
        file_path: The file that was being rewritten.
    """

    def __init__(
        self,
        user_message: str,
        *,
        file_path: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(user_message, internal_details=internal_details)
        self.file_path = file_path


class HookError(BuildportError):
    """Raised when a chained post-build hook fails.

    Attributes:
        hook_name: Name of the hook that failed.
    """

    def __init__(
        self,
        hook_name: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(
            f"Post-build hook '{hook_name}' failed",
            internal_details=internal_details,
        )
        self.hook_name = hook_name

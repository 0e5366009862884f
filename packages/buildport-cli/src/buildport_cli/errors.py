"""Error reporting and exit codes for buildport-cli.

buildport-core raises :class:`~buildport_core.errors.BuildportError`
subclasses; the helpers here print their safe message and map them onto
the CLI's exit codes:

- 0: success
- 1: user error (invalid state, malformed redirect, bad config or input)
- 2: system error (missing file, output cannot be written)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import click

from buildport_cli.output import error, info

if TYPE_CHECKING:
    from buildport_core.errors import BuildportError

EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1
EXIT_SYSTEM_ERROR = 2


class CLIError(click.ClickException):
    """Command failure reported through the rich console.

    Attributes:
        exit_code: Process exit code (``EXIT_USER_ERROR`` by default).
    """

    def __init__(self, message: str, exit_code: int = EXIT_USER_ERROR) -> None:
        super().__init__(message)
        self.exit_code = exit_code

    def show(self, file: object = None) -> None:
        """Print the message; ``file`` is accepted for click compatibility."""
        error(self.format_message())


def exit_code_for(err: BuildportError) -> int:
    """Map a buildport-core error onto a CLI exit code.

    Problems in the input (state, redirects, config, site files) are user
    errors; failures writing output are system errors.
    """
    from buildport_core.errors import HookError, MaterializationError

    if isinstance(err, (MaterializationError, HookError)):
        return EXIT_SYSTEM_ERROR
    return EXIT_USER_ERROR


def handle_buildport_error(err: BuildportError) -> NoReturn:
    """Report a buildport-core error and exit.

    Raises:
        SystemExit: Always, with the mapped exit code.
    """
    error(err.user_message)
    if err.phase:
        info(f"  phase: {err.phase}")
    raise SystemExit(exit_code_for(err))


def handle_yaml_error(err: Exception, file_path: str) -> NoReturn:
    """Raise a CLIError naming the line and column of a YAML syntax error.

    Raises:
        CLIError: Always (exit 1).
    """
    detail = str(err)
    mark = getattr(err, "problem_mark", None)
    if mark is not None:
        detail = f"line {mark.line + 1}, column {mark.column + 1}: {getattr(err, 'problem', err)}"
    raise CLIError(f"Invalid YAML in {file_path}: {detail}")


def handle_file_not_found(file_path: str) -> NoReturn:
    """Raise a CLIError for a missing input file.

    Raises:
        CLIError: Always (exit 2).
    """
    raise CLIError(
        f"File not found: {file_path}\n\n"
        "Dump the framework store state to JSON or YAML and pass it with --state.",
        exit_code=EXIT_SYSTEM_ERROR,
    )


def handle_permission_error(path: str, operation: str = "access") -> NoReturn:
    """Raise a CLIError for a path the process may not touch.

    Raises:
        CLIError: Always (exit 2).
    """
    raise CLIError(f"Permission denied: Cannot {operation} {path}", exit_code=EXIT_SYSTEM_ERROR)

"""Unit tests for buildport_cli.errors module."""

from __future__ import annotations

import pytest
import yaml

from buildport_cli.errors import (
    EXIT_SYSTEM_ERROR,
    EXIT_USER_ERROR,
    CLIError,
    exit_code_for,
    handle_buildport_error,
    handle_file_not_found,
    handle_permission_error,
    handle_yaml_error,
)
from buildport_core.errors import (
    ConfigurationError,
    HookError,
    InjectionError,
    ManifestWriteError,
    MaterializationError,
    TransformError,
    ValidationError,
)


class TestCLIError:
    """Tests for CLIError exception."""

    def test_default_exit_code(self) -> None:
        """CLIError defaults to a user error."""
        assert CLIError("bad").exit_code == EXIT_USER_ERROR

    def test_custom_exit_code(self) -> None:
        """CLIError keeps an explicit exit code."""
        assert CLIError("bad", exit_code=EXIT_SYSTEM_ERROR).exit_code == 2


class TestExitCodeFor:
    """Tests for exit_code_for."""

    @pytest.mark.parametrize(
        "err",
        [
            ValidationError(),
            TransformError("bad redirect"),
            ConfigurationError("bad config"),
            InjectionError("bad plugin"),
        ],
    )
    def test_user_errors(self, err: Exception) -> None:
        """Input problems exit 1."""
        assert exit_code_for(err) == EXIT_USER_ERROR  # type: ignore[arg-type]

    @pytest.mark.parametrize(
        "err",
        [
            MaterializationError("disk full"),
            ManifestWriteError("read-only"),
            HookError("on_post_build"),
        ],
    )
    def test_system_errors(self, err: Exception) -> None:
        """Output failures exit 2."""
        assert exit_code_for(err) == EXIT_SYSTEM_ERROR  # type: ignore[arg-type]


class TestHandlers:
    """Tests for the error handlers."""

    def test_buildport_error_prints_phase(self, capsys: pytest.CaptureFixture[str]) -> None:
        """The failing phase is reported with the message."""
        err = TransformError("Failed to parse redirect")
        err.phase = "transforming_routes"
        with pytest.raises(SystemExit) as exc_info:
            handle_buildport_error(err)
        assert exc_info.value.code == EXIT_USER_ERROR
        out = capsys.readouterr().out
        assert "Failed to parse redirect" in out
        assert "phase: transforming_routes" in out

    def test_yaml_error_has_position(self) -> None:
        """YAML errors carry line and column."""
        try:
            yaml.safe_load("a: [1, 2\nb: 3")
        except yaml.YAMLError as e:
            with pytest.raises(CLIError) as exc_info:
                handle_yaml_error(e, "state.yaml")
        assert "state.yaml" in exc_info.value.message
        assert "line" in exc_info.value.message

    def test_file_not_found(self) -> None:
        """Missing files are system errors."""
        with pytest.raises(CLIError) as exc_info:
            handle_file_not_found("state.json")
        assert exc_info.value.exit_code == EXIT_SYSTEM_ERROR
        assert "File not found: state.json" in exc_info.value.message

    def test_permission_error(self) -> None:
        """Permission problems are system errors."""
        with pytest.raises(CLIError) as exc_info:
            handle_permission_error("/out", "write")
        assert exc_info.value.exit_code == EXIT_SYSTEM_ERROR
        assert exc_info.value.message == "Permission denied: Cannot write /out"

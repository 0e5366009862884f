"""Tests for buildport validate command."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

from click.testing import CliRunner

from buildport_cli.commands.validate import validate


class TestValidateCommand:
    """Tests for validate command."""

    def test_valid_state(self, cli_runner: CliRunner, state_file: Path) -> None:
        """A valid dump is reported with its counts."""
        result = cli_runner.invoke(validate, ["--state", str(state_file)])
        assert result.exit_code == 0
        assert "Build state valid" in result.output
        assert "pages: 2 (1 dynamic)" in result.output

    def test_invalid_state(
        self,
        cli_runner: CliRunner,
        create_state_file: Callable[..., Path],
        store_state: dict[str, Any],
    ) -> None:
        """Schema violations exit 1."""
        store_state["pages"]["/dash"]["mode"] = "ISR"
        result = cli_runner.invoke(validate, ["--state", str(create_state_file(store_state))])
        assert result.exit_code == 1
        assert "Build state valid" not in result.output

    def test_missing_pages(
        self, cli_runner: CliRunner, create_state_file: Callable[..., Path]
    ) -> None:
        """A dump without a page table is invalid."""
        result = cli_runner.invoke(
            validate, ["--state", str(create_state_file({"redirects": []}))]
        )
        assert result.exit_code == 1

    def test_non_mapping_dump(
        self, cli_runner: CliRunner, create_state_file: Callable[..., Path]
    ) -> None:
        """A top-level list is rejected before validation."""
        result = cli_runner.invoke(validate, ["--state", str(create_state_file("[]"))])
        assert result.exit_code == 1
        assert "must be a mapping" in result.output

    def test_missing_file(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        """A missing dump exits 2."""
        result = cli_runner.invoke(validate, ["--state", str(tmp_path / "missing.json")])
        assert result.exit_code == 2

    def test_writes_nothing(
        self, isolated_runner: CliRunner, store_state: dict[str, Any]
    ) -> None:
        """Validation leaves the working directory untouched."""
        Path("state.json").write_text(json.dumps(store_state))
        result = isolated_runner.invoke(validate, ["--state", "state.json"])
        assert result.exit_code == 0
        assert sorted(p.name for p in Path().iterdir()) == ["state.json"]

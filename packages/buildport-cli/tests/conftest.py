"""Shared test fixtures for buildport-cli tests.

Provides CliRunner fixtures, a site directory with a rendered public
tree, and store-state dump files.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
import structlog
from click.testing import CliRunner

STATE_FILENAME = "state.json"


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Undo the logging setup done by the root command.

    The root command attaches a stderr handler bound to the runner's
    stream; later tests must not write to that closed stream.
    """
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner.

    Returns:
        CliRunner instance for testing CLI commands.
    """
    return CliRunner()


@pytest.fixture
def isolated_runner(cli_runner: CliRunner) -> Generator[CliRunner, None, None]:
    """Create a Click test runner with an isolated filesystem.

    Yields:
        CliRunner instance with isolated filesystem.
    """
    with cli_runner.isolated_filesystem():
        yield cli_runner


@pytest.fixture
def store_state() -> dict[str, Any]:
    """Return a store state with one static page, one SSR page and one redirect."""
    return {
        "pages": {
            "/": {"path": "/", "mode": "SSG"},
            "/dash": {"path": "/dash", "mode": "SSR"},
        },
        "redirects": [{"fromPath": "/old", "toPath": "/new", "isPermanent": True}],
        "functions": [],
        "config": {"trailingSlash": "always", "pathPrefix": ""},
    }


@pytest.fixture
def site_dir(tmp_path: Path) -> Path:
    """Create a site root with a rendered public tree."""
    site = tmp_path / "site"
    (site / "public").mkdir(parents=True)
    (site / "public" / "index.html").write_text("<html>home</html>")
    return site


@pytest.fixture
def create_state_file(tmp_path: Path) -> Callable[..., Path]:
    """Factory fixture writing a store-state dump.

    Returns:
        Function taking the state (or raw text) and an optional file name.
    """

    def _create(state: dict[str, Any] | str, filename: str = STATE_FILENAME) -> Path:
        path = tmp_path / filename
        path.write_text(state if isinstance(state, str) else json.dumps(state))
        return path

    return _create


@pytest.fixture
def state_file(create_state_file: Callable[..., Path], store_state: dict[str, Any]) -> Path:
    """Return a JSON dump of ``store_state``."""
    return create_state_file(store_state)

"""Shared pytest fixtures for buildport-core tests.

This module provides common fixtures used across unit and integration
tests: store-state payloads and a site directory with a public tree.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest
import structlog

from buildport_core.schemas import OutputConfig


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture.

    Ensures structlog writes to stdout so that capsys can capture the
    output, whatever configuration an earlier test left behind.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


@pytest.fixture
def sample_store_state() -> dict[str, Any]:
    """Return a store state with one static and one SSR page.

    One permanent redirect, no API functions, trailing slash ``always``.
    """
    return {
        "pages": {
            "/": {"path": "/", "mode": "SSG", "componentChunkName": "component---src-pages-index"},
            "/dash": {"path": "/dash", "mode": "SSR", "context": {}},
        },
        "redirects": [
            {"fromPath": "/old", "toPath": "/new", "isPermanent": True},
        ],
        "functions": [],
        "config": {"trailingSlash": "always", "pathPrefix": ""},
    }


@pytest.fixture
def empty_store_state() -> dict[str, Any]:
    """Return a store state with nothing but static output."""
    return {"pages": {}, "redirects": [], "functions": [], "config": {}}


@pytest.fixture
def full_store_state() -> dict[str, Any]:
    """Return a store state exercising every page mode and an API function."""
    return {
        "pages": {
            "/": {"path": "/", "mode": "SSG"},
            "/dash/": {"path": "/dash/", "mode": "SSR"},
            "/blog/deferred": {"path": "/blog/deferred", "mode": "DSG"},
        },
        "redirects": [
            {"fromPath": "/blog/:slug", "toPath": "/news/:slug", "isPermanent": True},
            {"fromPath": "/temp", "toPath": "https://example.com/", "isPermanent": False},
        ],
        "functions": [
            {
                "functionRoute": "users/[id]",
                "matchPath": "/api/users/:id",
                "originalAbsoluteFilePath": "/site/src/api/users/[id].js",
                "relativeCompiledFilePath": "users/[id].js",
                "pluginName": "default-site-plugin",
            },
        ],
        "config": {"trailingSlash": "never", "pathPrefix": None},
    }


@pytest.fixture
def site_dir(tmp_path: Path) -> Path:
    """Create a site root with a rendered public tree and one compiled API function."""
    public = tmp_path / "public"
    (public / "dash").mkdir(parents=True)
    (public / "index.html").write_text("<html>home</html>")
    (public / "app.js").write_text("console.log('app');")
    compiled = tmp_path / ".cache" / "functions" / "users"
    compiled.mkdir(parents=True)
    (compiled / "[id].js").write_text("module.exports = (req, res) => res.send(req.query.id);")
    return tmp_path


@pytest.fixture
def output_config(site_dir: Path) -> OutputConfig:
    """Return an OutputConfig rooted at ``site_dir`` that copies static files."""
    return OutputConfig(project_root=site_dir, static_strategy="copy")

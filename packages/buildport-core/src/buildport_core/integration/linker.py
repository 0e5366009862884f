"""Plugin linking into a site's ``node_modules``.

Injected plugins are not listed in the site's dependencies, so the
framework can only resolve them when they are linked into
``node_modules`` by package name.
"""

from __future__ import annotations

import shutil
from collections.abc import Mapping
from pathlib import Path

import structlog

from buildport_core.errors import InjectionError

logger = structlog.get_logger(__name__)


def _remove(path: Path) -> None:
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.exists():
        shutil.rmtree(path)


def link_plugins(project_dir: Path, plugin_paths: Mapping[str, Path]) -> list[Path]:
    """Symlink each plugin directory to ``node_modules/<name>``.

    Anything already at a link location (stale link, installed copy) is
    removed first, so running twice yields the same links.

    Args:
        project_dir: Site root.
        plugin_paths: Package name (optionally scoped) to plugin directory.

    Returns:
        Created link paths, in mapping order.

    Raises:
        InjectionError: If a name escapes ``node_modules`` or a link
            cannot be created.

    Example:
        >>> link_plugins(site, {"@vercel/gatsby-plugin-vercel-builder": plugin_dir})
        [PosixPath('/site/node_modules/@vercel/gatsby-plugin-vercel-builder')]
    """
    node_modules = (project_dir / "node_modules").resolve()
    links: list[Path] = []

    for name, target in plugin_paths.items():
        link = node_modules / name
        if not name or Path(name).is_absolute() or ".." in Path(name).parts:
            raise InjectionError(f"Invalid plugin name '{name}'", file_path=str(link))
        try:
            link.parent.mkdir(parents=True, exist_ok=True)
            _remove(link)
            link.symlink_to(Path(target).resolve(), target_is_directory=True)
        except OSError as e:
            raise InjectionError(
                f"Failed to link plugin '{name}'",
                file_path=str(link),
                internal_details=repr(e),
            ) from e
        links.append(link)

    logger.info("plugins_linked", project_dir=str(project_dir), plugins=list(plugin_paths))
    return links

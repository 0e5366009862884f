"""Framework integration injection.

Registers the platform plugins with a site before the framework build
runs, without asking the user to edit anything:

- The analytics plugin is appended to ``gatsby-config`` (deduplicated
  against plugins the site already lists).
- The builder plugin's post-build hook is chained after the site's own
  ``onPostBuild`` in ``gatsby-node``.

The first existing file of ``.ts``, ``.mjs``, ``.js`` is used. It is
moved to ``<file>.__vercel_builder_backup__.<ext>`` once and replaced by a
wrapper importing that backup; a later run keeps the first backup. When
no file exists a plain ``.js`` file is created.
"""

from __future__ import annotations

import json
import re
from collections.abc import Sequence
from enum import Enum
from pathlib import Path

import structlog
from jinja2.sandbox import SandboxedEnvironment
from pydantic import BaseModel, ConfigDict, Field

from buildport_core.errors import InjectionError

logger = structlog.get_logger(__name__)

CONFIG_FILE_STEM = "gatsby-config"
NODE_FILE_STEM = "gatsby-node"
SCRIPT_EXTENSIONS = ("ts", "mjs", "js")
BACKUP_MARKER = "__vercel_builder_backup__"

# First framework version shipping the post-build state the builder reads
BUILDER_MIN_VERSION = (4, 0, 0)

BUILDER_NODE_MODULE = "@vercel/gatsby-plugin-vercel-builder/gatsby-node.js"

_VERSION_RE = re.compile(r"(\d+)(?:\.(\d+))?(?:\.(\d+))?")


class Integration(str, Enum):
    """Platform plugins that can be injected into a site."""

    ANALYTICS = "@vercel/gatsby-plugin-vercel-analytics"
    BUILDER = "@vercel/gatsby-plugin-vercel-builder"


class IntegrationOptions(BaseModel):
    """Switches deciding which integrations apply.

    Attributes:
        builder_plugin: Enable the builder plugin (framework >= 4.0.0 only).
        analytics_id: Analytics identifier; enables the analytics plugin.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    builder_plugin: bool = Field(default=False, description="Inject the builder plugin")
    analytics_id: str | None = Field(default=None, description="Analytics identifier")


_CONFIG_TEMPLATES = {
    "ts": """\
import userConfig from "./{{ backup }}";
import type { PluginRef } from "gatsby";

const preferDefault = (m: any) => (m && m.default) || m;

const vercelConfig = Object.assign(
  {},
  preferDefault(userConfig)
);

if (!vercelConfig.plugins) {
  vercelConfig.plugins = [];
}

for (const plugin of {{ plugins | tojson }}) {
  const hasPlugin = vercelConfig.plugins.find(
    (p: PluginRef) =>
      p && (p === plugin || p.resolve === plugin)
  );

  if (!hasPlugin) {
    vercelConfig.plugins = vercelConfig.plugins.slice();
    vercelConfig.plugins.push(plugin);
  }
}

export default vercelConfig;
""",
    "mjs": """\
import userConfig from "./{{ backup }}";

const preferDefault = (m) => (m && m.default) || m;

const vercelConfig = Object.assign(
  {},
  preferDefault(userConfig)
);

if (!vercelConfig.plugins) {
  vercelConfig.plugins = [];
}

for (const plugin of {{ plugins | tojson }}) {
  const hasPlugin = vercelConfig.plugins.find(
    (p) => p && (p === plugin || p.resolve === plugin)
  );

  if (!hasPlugin) {
    vercelConfig.plugins = vercelConfig.plugins.slice();
    vercelConfig.plugins.push(plugin);
  }
}

export default vercelConfig;
""",
    "js": """\
const userConfig = require("./{{ backup }}");

const preferDefault = m => (m && m.default) || m;

const vercelConfig = Object.assign(
  {},
  preferDefault(userConfig)
);

if (!vercelConfig.plugins) {
  vercelConfig.plugins = [];
}

for (const plugin of {{ plugins | tojson }}) {
  const hasPlugin = vercelConfig.plugins.find(
    (p) => p && (p === plugin || p.resolve === plugin)
  );

  if (!hasPlugin) {
    vercelConfig.plugins = vercelConfig.plugins.slice();
    vercelConfig.plugins.push(plugin);
  }
}
module.exports = vercelConfig;
""",
}

_NODE_TEMPLATES = {
    "ts": """\
import type { GatsbyNode } from 'gatsby';
import * as vercelBuilder from '{{ builder_module }}';
import * as gatsbyNode from './{{ backup }}';

export * from './{{ backup }}';

export const onPostBuild: GatsbyNode['onPostBuild'] = async (args, options) => {
  if (typeof (gatsbyNode as any).onPostBuild === 'function') {
    await (gatsbyNode as any).onPostBuild(args, options);
  }
  await vercelBuilder.onPostBuild(args, options);
};
""",
    "mjs": """\
import * as vercelBuilder from '{{ builder_module }}';
import * as gatsbyNode from './{{ backup }}';

export * from './{{ backup }}';

export const onPostBuild = async (args, options) => {
  if (typeof gatsbyNode.onPostBuild === 'function') {
    await gatsbyNode.onPostBuild(args, options);
  }
  await vercelBuilder.onPostBuild(args, options);
};
""",
    "js": """\
const vercelBuilder = require('{{ builder_module }}');
const gatsbyNode = require('./{{ backup }}');

const origOnPostBuild = gatsbyNode.onPostBuild;

gatsbyNode.onPostBuild = async (args, options) => {
  if (typeof origOnPostBuild === 'function') {
    await origOnPostBuild(args, options);
  }
  await vercelBuilder.onPostBuild(args, options);
};

module.exports = gatsbyNode;
""",
}

_env = SandboxedEnvironment(keep_trailing_newline=True)


def coerce_version(value: str | None) -> tuple[int, int, int] | None:
    """Coerce a loose version string to ``(major, minor, patch)``.

    The first run of digits wins; missing parts default to 0, so
    ``"^4.2"`` becomes ``(4, 2, 0)`` and ``"v5"`` becomes ``(5, 0, 0)``.

    Returns:
        The version tuple, or None when ``value`` holds no digits.
    """
    if not value:
        return None
    match = _VERSION_RE.search(value)
    if match is None:
        return None
    major, minor, patch = (int(part) if part else 0 for part in match.groups())
    return major, minor, patch


def select_integrations(
    detected_version: str | None,
    options: IntegrationOptions,
) -> set[Integration]:
    """Decide which integrations apply to a site.

    Args:
        detected_version: Framework version found in the site (may be loose).
        options: Enabled integrations.

    Returns:
        The integrations to inject (possibly empty).
    """
    selected: set[Integration] = set()
    if options.builder_plugin:
        version = coerce_version(detected_version)
        if version is not None and version >= BUILDER_MIN_VERSION:
            selected.add(Integration.BUILDER)
        else:
            logger.info(
                "builder_plugin_skipped",
                detected_version=detected_version,
                required=".".join(str(part) for part in BUILDER_MIN_VERSION),
            )
    if options.analytics_id:
        selected.add(Integration.ANALYTICS)
    return selected


def inject_integrations(
    detected_version: str | None,
    project_dir: Path,
    options: IntegrationOptions,
) -> bool:
    """Rewrite the site's framework files to register the integrations.

    Args:
        detected_version: Framework version found in the site.
        project_dir: Site root.
        options: Enabled integrations.

    Returns:
        True when at least one integration was injected, False otherwise.

    Raises:
        InjectionError: If a file cannot be backed up or written.
    """
    integrations = select_integrations(detected_version, options)
    if not integrations:
        return False

    logger.info(
        "injecting_integrations",
        project_dir=str(project_dir),
        plugins=sorted(i.value for i in integrations),
    )

    if Integration.ANALYTICS in integrations:
        update_framework_config(project_dir, [Integration.ANALYTICS.value])
    if Integration.BUILDER in integrations:
        update_framework_node(project_dir)
    return True


def find_script(project_dir: Path, stem: str) -> Path | None:
    """Return the first existing ``<stem>.{ts,mjs,js}`` file."""
    for ext in SCRIPT_EXTENSIONS:
        candidate = project_dir / f"{stem}.{ext}"
        if candidate.is_file():
            return candidate
    return None


def backup_path(path: Path) -> Path:
    """Return where ``path`` is moved before it is wrapped."""
    ext = path.suffix.lstrip(".")
    return path.with_name(f"{path.name}.{BACKUP_MARKER}.{ext}")


def update_framework_config(project_dir: Path, plugins: Sequence[str]) -> Path:
    """Register ``plugins`` in the site's ``gatsby-config``.

    Returns:
        The written config file.
    """
    path = find_script(project_dir, CONFIG_FILE_STEM)
    if path is None:
        path = project_dir / f"{CONFIG_FILE_STEM}.js"
        content = f"module.exports = {json.dumps({'plugins': list(plugins)}, separators=(',', ':'))}"
        _write(path, content)
        logger.info("framework_file_created", path=str(path))
        return path

    backup = _backup(path)
    template = _env.from_string(_CONFIG_TEMPLATES[path.suffix.lstrip(".")])
    _write(path, template.render(backup=backup.name, plugins=list(plugins)))
    logger.info("framework_file_wrapped", path=str(path), backup=str(backup))
    return path


def update_framework_node(project_dir: Path) -> Path:
    """Chain the builder's post-build hook in the site's ``gatsby-node``.

    Returns:
        The written node file.
    """
    path = find_script(project_dir, NODE_FILE_STEM)
    if path is None:
        path = project_dir / f"{NODE_FILE_STEM}.js"
        _write(path, f"module.exports = require('{BUILDER_NODE_MODULE}');")
        logger.info("framework_file_created", path=str(path))
        return path

    backup = _backup(path)
    template = _env.from_string(_NODE_TEMPLATES[path.suffix.lstrip(".")])
    _write(path, template.render(backup=backup.name, builder_module=BUILDER_NODE_MODULE))
    logger.info("framework_file_wrapped", path=str(path), backup=str(backup))
    return path


def _backup(path: Path) -> Path:
    backup = backup_path(path)
    if backup.exists():
        return backup
    try:
        path.rename(backup)
    except OSError as e:
        raise InjectionError(
            f"Failed to back up {path.name}",
            file_path=str(path),
            internal_details=repr(e),
        ) from e
    return backup


def _write(path: Path, content: str) -> None:
    try:
        path.write_text(content)
    except OSError as e:
        raise InjectionError(
            f"Failed to write {path.name}",
            file_path=str(path),
            internal_details=repr(e),
        ) from e

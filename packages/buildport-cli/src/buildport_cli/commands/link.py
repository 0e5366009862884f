"""buildport link command - Link plugin directories into node_modules."""

from __future__ import annotations

from pathlib import Path

import click
from rich.markup import escape

from buildport_cli.errors import CLIError, handle_buildport_error
from buildport_cli.output import success


def _parse_plugin(value: str) -> tuple[str, Path]:
    name, sep, path = value.partition("=")
    if not sep or not name or not path:
        raise CLIError(f"Invalid --plugin value '{value}', expected NAME=PATH")
    return name, Path(path)


@click.command()
@click.argument(
    "project_dir",
    type=click.Path(exists=True, file_okay=False),
    default=".",
)
@click.option(
    "-p",
    "--plugin",
    "plugins",
    multiple=True,
    required=True,
    help="Plugin to link, as NAME=PATH (repeatable)",
)
def link(project_dir: str, plugins: tuple[str, ...]) -> None:
    """Link plugin directories into the site's node_modules.

    Existing entries at the link locations are replaced.

    Examples:

        buildport link . --plugin @vercel/gatsby-plugin-vercel-builder=/opt/plugins/builder
    """
    plugin_paths = dict(_parse_plugin(value) for value in plugins)

    # Import here to avoid heavy imports at CLI startup
    from buildport_core.errors import BuildportError
    from buildport_core.integration import link_plugins

    try:
        links = link_plugins(Path(project_dir), plugin_paths)
    except BuildportError as e:
        handle_buildport_error(e)

    for path in links:
        success(f"Linked {escape(str(path))}")

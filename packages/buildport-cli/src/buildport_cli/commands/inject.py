"""buildport inject command - Register platform plugins in a site."""

from __future__ import annotations

from pathlib import Path

import click

from buildport_cli.errors import handle_buildport_error
from buildport_cli.output import info, success, warning


@click.command()
@click.argument(
    "project_dir",
    type=click.Path(exists=True, file_okay=False),
    default=".",
)
@click.option(
    "--framework-version",
    "framework_version",
    type=str,
    default=None,
    help="Framework version detected in the site (e.g. ^5.3.0)",
)
@click.option(
    "--builder-plugin/--no-builder-plugin",
    "builder_plugin",
    default=False,
    envvar="VERCEL_GATSBY_BUILDER_PLUGIN",
    help="Inject the builder plugin (framework >= 4.0.0)",
)
@click.option(
    "--analytics-id",
    "analytics_id",
    type=str,
    default=None,
    envvar="VERCEL_ANALYTICS_ID",
    help="Analytics identifier; injects the analytics plugin",
)
def inject(
    project_dir: str,
    framework_version: str | None,
    builder_plugin: bool,
    analytics_id: str | None,
) -> None:
    """Register platform plugins in the site's framework files.

    Existing config and node files are backed up once and wrapped; the
    site's own post-build hook keeps running before the builder's.

    Examples:

        buildport inject . --framework-version 5.3.0 --builder-plugin

        VERCEL_ANALYTICS_ID=abc123 buildport inject site/
    """
    # Import here to avoid heavy imports at CLI startup
    from buildport_core.errors import BuildportError
    from buildport_core.integration import (
        Integration,
        IntegrationOptions,
        inject_integrations,
        select_integrations,
    )

    options = IntegrationOptions(builder_plugin=builder_plugin, analytics_id=analytics_id)
    selected = select_integrations(framework_version, options)
    if builder_plugin and Integration.BUILDER not in selected:
        warning(
            "Builder plugin skipped: it needs framework 4.0.0 or later "
            f"(detected: {framework_version or 'unknown'})"
        )

    try:
        injected = inject_integrations(framework_version, Path(project_dir), options)
    except BuildportError as e:
        handle_buildport_error(e)

    if not injected:
        info("No plugins to inject")
        return

    noun = "plugin" if len(selected) == 1 else "plugins"
    names = ", ".join(f'"{i.value}"' for i in sorted(selected, key=lambda i: i.value))
    success(f"Injected {noun} {names}")

"""CLI entry point for buildport.

This module defines the main CLI group using a LazyGroup so that
``buildport --help`` does not import the compiler and its dependencies.
"""

from __future__ import annotations

import importlib
from typing import Any

import click
import rich_click as rclick

from buildport_cli import __version__
from buildport_cli.output import set_no_color

# rich-click help rendering
rclick.rich_click.TEXT_MARKUP = "markdown"
rclick.rich_click.SHOW_ARGUMENTS = True
rclick.rich_click.GROUP_ARGUMENTS_OPTIONS = True


class LazyGroup(rclick.RichGroup):
    """Root group whose subcommands are imported on first use.

    Attributes:
        lazy_subcommands: Command name to ``"package.module.attribute"``
            import path, e.g. ``{"validate": "buildport_cli.commands.validate.validate"}``.
    """

    def __init__(
        self,
        *args: Any,
        lazy_subcommands: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.lazy_subcommands: dict[str, str] = dict(lazy_subcommands or {})

    def list_commands(self, ctx: click.Context) -> list[str]:
        """Names of registered and lazy commands, sorted."""
        return sorted({*super().list_commands(ctx), *self.lazy_subcommands})

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        """Return a registered command, importing a lazy one if needed."""
        registered = super().get_command(ctx, cmd_name)  # type: ignore[arg-type]
        if registered is not None or cmd_name not in self.lazy_subcommands:
            return registered
        return self._import_command(self.lazy_subcommands[cmd_name])

    @staticmethod
    def _import_command(import_path: str) -> click.Command:
        module_name, _, attr = import_path.rpartition(".")
        command = getattr(importlib.import_module(module_name), attr)
        if not isinstance(command, click.Command):
            raise TypeError(f"{import_path} is not a click command")
        return command


LAZY_COMMANDS = {
    "compile": "buildport_cli.commands.compile.compile_cmd",
    "validate": "buildport_cli.commands.validate.validate",
    "inject": "buildport_cli.commands.inject.inject",
    "link": "buildport_cli.commands.link.link",
    "schema": "buildport_cli.commands.schema.schema",
}


@click.command(cls=LazyGroup, lazy_subcommands=LAZY_COMMANDS)
@click.version_option(version=__version__, prog_name="buildport")
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output.",
    is_eager=True,
    expose_value=False,
    callback=lambda ctx, param, value: set_no_color(value) if value else None,
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    envvar="BUILDPORT_LOG_LEVEL",
    show_default=True,
    help="Minimum level of structured log events (written to stderr).",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Emit log events as JSON lines.",
)
def cli(log_level: str, log_json: bool) -> None:
    """buildport - Compile static-site build state into platform build output.

    Turns the framework's post-build store state into a static directory,
    serverless function bundles and a deployment manifest.

    **Getting Started:**

    - `buildport validate --state state.json` - Check a store-state dump
    - `buildport compile --state state.json` - Generate build output
    - `buildport inject . --framework-version 5.0.0 --builder-plugin` - Register plugins
    - `buildport schema export` - Export JSON Schema for the store state
    """
    from buildport_core.observability import configure_logging

    configure_logging(log_level=log_level, json_format=log_json, add_timestamp=log_json)


if __name__ == "__main__":
    cli()

"""Console output for buildport-cli.

All user-facing text goes through one module-level rich console. Colors
are dropped when ``NO_COLOR`` is set or ``--no-color`` is passed.
"""

from __future__ import annotations

import os
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table


def create_console(no_color: bool = False) -> Console:
    """Build the console used for command output.

    Args:
        no_color: Disable colors. ``NO_COLOR`` in the environment has the
            same effect.
    """
    plain = no_color or "NO_COLOR" in os.environ
    return Console(force_terminal=False if plain else None, no_color=plain)


console = create_console()


def success(message: str, **kwargs: Any) -> None:
    """Print ``message`` after a green check mark.

    Example:
        >>> success("Build output written to .vercel/output")
        ✓ Build output written to .vercel/output
    """
    console.print(f"[green]✓[/green] {message}", **kwargs)


def error(message: str, **kwargs: Any) -> None:
    """Print ``message`` after a red cross."""
    console.print(f"[red]✗[/red] {message}", **kwargs)


def warning(message: str, **kwargs: Any) -> None:
    """Print ``message`` after a yellow warning sign."""
    console.print(f"[yellow]⚠[/yellow] {message}", **kwargs)


def info(message: str, **kwargs: Any) -> None:
    """Print ``message`` as-is."""
    console.print(message, **kwargs)


def print_bundles(rows: list[tuple[str, str, str]]) -> None:
    """Print a table of written function bundles.

    Args:
        rows: ``(kind, route, bundle directory)`` triples.
    """
    table = Table(title="Functions")
    table.add_column("Kind", style="cyan")
    table.add_column("Route")
    table.add_column("Bundle", style="dim")
    for kind, route, bundle in rows:
        table.add_row(kind, escape(route), escape(bundle))
    console.print(table)


def set_no_color(no_color: bool) -> None:
    """Replace the module console, e.g. for ``--no-color``."""
    global console
    console = create_console(no_color=no_color)

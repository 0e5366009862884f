"""buildport validate command - Check a store-state dump."""

from __future__ import annotations

import click

from buildport_cli.output import error, info, success
from buildport_cli.state_file import load_state_file


@click.command()
@click.option(
    "-s",
    "--state",
    "state_path",
    type=click.Path(exists=False),
    required=True,
    help="Store-state dump (JSON or YAML)",
)
def validate(state_path: str) -> None:
    """Validate a store-state dump against the BuildState schema.

    Nothing is written. Reports every schema violation with its field
    path.

    Examples:

        buildport validate --state .cache/state.json
    """
    store_state = load_state_file(state_path)

    # Import here to avoid heavy imports at CLI startup
    from buildport_core.compiler import project_store_state, validate_build_state
    from buildport_core.errors import ValidationError

    try:
        state = validate_build_state(project_store_state(store_state))
    except ValidationError as e:
        error(e.user_message)
        if e.internal_details:
            info(e.internal_details)
        raise SystemExit(1) from None

    dynamic = len(state.dynamic_pages())
    success("Build state valid")
    info(
        f"  pages: {len(state.pages)} ({dynamic} dynamic), "
        f"redirects: {len(state.redirects)}, functions: {len(state.functions)}"
    )

"""buildport schema command - Export JSON Schema."""

from __future__ import annotations

import click

from buildport_cli.output import error, success


@click.group()
def schema() -> None:
    """Manage JSON Schema documents.

    Export JSON Schema files for the store state the compiler reads and
    the manifest it writes.

    **Commands:**

    - `buildport schema export` - Export BuildState JSON Schema
    - `buildport schema export-manifest` - Export DeploymentManifest JSON Schema
    """
    pass


@schema.command("export")
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(),
    default="./schemas/build-state.schema.json",
    help="Output path [default: ./schemas/build-state.schema.json]",
)
def export_schema(output_path: str) -> None:
    """Export BuildState JSON Schema.

    Examples:

        buildport schema export

        buildport schema export --output custom/path/schema.json
    """
    try:
        # Import here to avoid heavy imports at CLI startup
        from buildport_core.export import export_build_state_schema

        export_build_state_schema(output_path)
        success(f"Schema exported to {output_path}")

    except PermissionError:
        error(f"Cannot write to: {output_path}")
        raise SystemExit(2) from None

    except OSError as e:
        error(f"Schema export failed: {e}")
        raise SystemExit(2) from None


@schema.command("export-manifest")
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(),
    default="./schemas/deployment-manifest.schema.json",
    help="Output path [default: ./schemas/deployment-manifest.schema.json]",
)
def export_manifest(output_path: str) -> None:
    """Export DeploymentManifest JSON Schema.

    Examples:

        buildport schema export-manifest

        buildport schema export-manifest --output custom/path/manifest.schema.json
    """
    try:
        # Import here to avoid heavy imports at CLI startup
        from buildport_core.export import export_manifest_schema

        export_manifest_schema(output_path)
        success(f"Manifest schema exported to {output_path}")

    except PermissionError:
        error(f"Cannot write to: {output_path}")
        raise SystemExit(2) from None

    except OSError as e:
        error(f"Manifest schema export failed: {e}")
        raise SystemExit(2) from None

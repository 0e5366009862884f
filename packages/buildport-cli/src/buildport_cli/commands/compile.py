"""buildport compile command - Generate platform build output."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click

from buildport_cli.errors import CLIError, handle_buildport_error, handle_permission_error
from buildport_cli.output import info, print_bundles, success
from buildport_cli.state_file import load_state_file


def _load_config(
    config_path: str | None,
    root: str | None,
    overrides: dict[str, Any],
) -> Any:
    """Build OutputConfig from an explicit file, ``<root>/buildport.yaml`` or defaults."""
    from buildport_core.schemas.output_config import CONFIG_FILE_NAME, OutputConfig

    if root is not None:
        overrides = {"project_root": Path(root), **overrides}

    if config_path is not None:
        return OutputConfig.from_yaml(config_path, **overrides)

    default_file = Path(root or ".") / CONFIG_FILE_NAME
    if default_file.is_file():
        return OutputConfig.from_yaml(default_file, **overrides)

    return OutputConfig(**{k: v for k, v in overrides.items() if v is not None})


@click.command("compile")
@click.option(
    "-s",
    "--state",
    "state_path",
    type=click.Path(exists=False),
    required=True,
    help="Store-state dump (JSON or YAML)",
)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to buildport.yaml [default: <root>/buildport.yaml if present]",
)
@click.option(
    "-r",
    "--root",
    "root",
    type=click.Path(file_okay=False),
    default=None,
    help="Project root [default: current directory]",
)
@click.option(
    "-o",
    "--output",
    "output_dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Output directory [default: .vercel/output]",
)
@click.option(
    "-m",
    "--manifest",
    "manifest_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Manifest path [default: <output>/config.json]",
)
@click.option(
    "--route-format",
    type=click.Choice(["rules", "compiled"]),
    default=None,
    help="Manifest route shape [default: rules]",
)
@click.option(
    "--static-strategy",
    type=click.Choice(["symlink", "copy"]),
    default=None,
    help="How the public directory is staged [default: symlink]",
)
def compile_cmd(
    state_path: str,
    config_path: str | None,
    root: str | None,
    output_dir: str | None,
    manifest_path: str | None,
    route_format: str | None,
    static_strategy: str | None,
) -> None:
    """Generate platform build output from a store-state dump.

    Clears the output directory, stages the public directory, writes a
    function bundle per SSR/DSG page and API route, and writes the
    deployment manifest.

    Examples:

        buildport compile --state .cache/state.json

        buildport compile --state state.yaml --route-format compiled

        buildport compile --state state.json --root site/ --output build/
    """
    store_state = load_state_file(state_path)

    # Import here to avoid heavy imports at CLI startup
    from buildport_core import BuildOrchestrator, BuildportError

    try:
        config = _load_config(
            config_path,
            root,
            {
                "output_dir": output_dir,
                "manifest_path": manifest_path,
                "route_format": route_format,
                "static_strategy": static_strategy,
            },
        )
        info("▲ Creating build output")
        result = BuildOrchestrator(config).generate(store_state)

    except BuildportError as e:
        handle_buildport_error(e)

    except PermissionError as e:
        handle_permission_error(str(e.filename or output_dir or "output directory"), "write")

    except OSError as e:
        raise CLIError(f"Build output generation failed: {e}", exit_code=2) from None

    if result.bundles:
        print_bundles(
            [
                (bundle.kind.value, bundle.route, str(bundle.bundle_dir))
                for bundle in result.bundles
            ]
        )
    routes = len(result.manifest.routes or ())
    success(f"Build output written to {config.output_dir}")
    info(f"  manifest: {result.manifest_path} ({routes} routes)")

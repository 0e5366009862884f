"""JSON Schema export functions for buildport.

This module exports JSON Schema Draft 2020-12 documents from the Pydantic
models at both ends of the compiler: the build state it reads and the
deployment manifest it writes.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from buildport_core.schemas import BuildState, DeploymentManifest

JSON_SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"


def export_build_state_schema(
    output_path: Path | str | None = None,
) -> dict[str, Any]:
    """Export the BuildState JSON Schema.

    Unknown keys are tolerated in build state (the framework adds fields
    between releases), so ``additionalProperties`` is left unset.

    Args:
        output_path: Optional path to write schema file. If provided,
            creates parent directories as needed.

    Returns:
        Dictionary containing the JSON Schema.

    Example:
        >>> schema = export_build_state_schema()
        >>> schema["$schema"]
        'https://json-schema.org/draft/2020-12/schema'
    """
    schema = BuildState.model_json_schema(by_alias=True)
    schema["$schema"] = JSON_SCHEMA_DIALECT
    schema["$id"] = "https://buildport.dev/schemas/build-state.schema.json"

    if output_path is not None:
        _write_schema_file(schema, output_path)

    return schema


def export_manifest_schema(
    output_path: Path | str | None = None,
) -> dict[str, Any]:
    """Export the DeploymentManifest JSON Schema.

    Args:
        output_path: Optional path to write schema file. If provided,
            creates parent directories as needed.

    Returns:
        Dictionary containing the JSON Schema.

    Example:
        >>> schema = export_manifest_schema()
        >>> schema["title"]
        'DeploymentManifest'
    """
    schema = DeploymentManifest.model_json_schema(mode="serialization")
    schema["$schema"] = JSON_SCHEMA_DIALECT
    schema["$id"] = "https://buildport.dev/schemas/deployment-manifest.schema.json"

    if "additionalProperties" not in schema:
        schema["additionalProperties"] = False

    if output_path is not None:
        _write_schema_file(schema, output_path)

    return schema


def _write_schema_file(schema: dict[str, Any], path: Path | str) -> None:
    """Write schema to JSON file.

    Args:
        schema: Schema dictionary to write.
        path: Output file path.
    """
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(schema, indent=2) + "\n")

"""Unit tests for JSON Schema export."""

from __future__ import annotations

import json
from pathlib import Path

from buildport_core.export import export_build_state_schema, export_manifest_schema


class TestExportBuildStateSchema:
    """Tests for export_build_state_schema."""

    def test_has_metadata(self) -> None:
        """The schema declares its dialect and id."""
        schema = export_build_state_schema()
        assert schema["$schema"] == "https://json-schema.org/draft/2020-12/schema"
        assert schema["$id"].endswith("build-state.schema.json")
        assert schema["title"] == "BuildState"

    def test_uses_input_key_names(self) -> None:
        """Nested models are described with the framework's camelCase keys."""
        schema = export_build_state_schema()
        redirect = schema["$defs"]["Redirect"]["properties"]
        assert {"fromPath", "toPath", "isPermanent"} <= set(redirect)

    def test_only_pages_required(self) -> None:
        """Only pages is required at the root."""
        assert export_build_state_schema()["required"] == ["pages"]

    def test_writes_file(self, tmp_path: Path) -> None:
        """The schema is written when a path is given."""
        path = tmp_path / "schemas" / "build-state.schema.json"
        schema = export_build_state_schema(path)
        assert json.loads(path.read_text()) == schema


class TestExportManifestSchema:
    """Tests for export_manifest_schema."""

    def test_has_metadata(self) -> None:
        """The schema declares its dialect, id and closed root."""
        schema = export_manifest_schema()
        assert schema["$schema"] == "https://json-schema.org/draft/2020-12/schema"
        assert schema["title"] == "DeploymentManifest"
        assert schema["additionalProperties"] is False

    def test_version_is_constant(self) -> None:
        """The version property is fixed to 3."""
        version = export_manifest_schema()["properties"]["version"]
        assert version.get("const") == 3 or version.get("enum") == [3]

    def test_writes_file(self, tmp_path: Path) -> None:
        """The schema is written when a path is given."""
        path = tmp_path / "manifest.schema.json"
        export_manifest_schema(str(path))
        assert json.loads(path.read_text())["title"] == "DeploymentManifest"

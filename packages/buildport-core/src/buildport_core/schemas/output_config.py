"""Output configuration for buildport.

OutputConfig carries every option that influences what the compiler
writes. It is passed to the orchestrator at construction time; nothing in
buildport-core reads process environment variables.

Configuration may live in ``buildport.yaml``::

    output_dir: .vercel/output
    public_dir: public
    function_runtime: nodejs18.x
    route_format: compiled
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

from buildport_core.errors import ConfigurationError

# Default configuration file name
CONFIG_FILE_NAME = "buildport.yaml"

# Default platform output location, relative to the project root
DEFAULT_OUTPUT_DIR = Path(".vercel") / "output"

# Manifest file name inside the output directory
MANIFEST_FILE_NAME = "config.json"

DEFAULT_FUNCTION_RUNTIME = "nodejs18.x"

# Module exporting the page renderer used by page function entries
DEFAULT_PAGE_HANDLER_MODULE = "@vercel/gatsby-plugin-vercel-builder/handlers/ssr-handler.js"

RouteFormat = Literal["rules", "compiled"]
StaticStrategy = Literal["symlink", "copy"]


class OutputConfig(BaseModel):
    """Options for one build-output generation run.

    Relative paths are resolved against ``project_root`` on construction,
    so every path attribute is absolute afterwards.

    Attributes:
        project_root: Site root directory.
        output_dir: Platform output directory (cleared on every run).
        manifest_path: Manifest location (default ``<output_dir>/config.json``).
        public_dir: Already-rendered static tree.
        functions_cache_dir: Framework's compiled API functions.
        function_runtime: Runtime identifier written to each bundle.
        page_handler_module: Module required by page function entries.
        route_format: ``rules`` writes redirect rules as-is, ``compiled``
            writes platform routes (regex sources, status codes).
        static_strategy: Symlink the public dir or copy it.

    Example:
        >>> config = OutputConfig(project_root=Path("/site"))
        >>> config.output_dir
        PosixPath('/site/.vercel/output')
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    project_root: Path = Field(default_factory=Path.cwd)
    output_dir: Path = Field(default=DEFAULT_OUTPUT_DIR)
    manifest_path: Path | None = Field(default=None)
    public_dir: Path = Field(default=Path("public"))
    functions_cache_dir: Path = Field(default=Path(".cache") / "functions")
    function_runtime: str = Field(default=DEFAULT_FUNCTION_RUNTIME, min_length=1)
    page_handler_module: str = Field(default=DEFAULT_PAGE_HANDLER_MODULE, min_length=1)
    route_format: RouteFormat = Field(default="rules")
    static_strategy: StaticStrategy = Field(default="symlink")

    @model_validator(mode="before")
    @classmethod
    def resolve_paths(cls, data: Any) -> Any:
        """Anchor relative paths at the project root."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        root = Path(data.get("project_root") or Path.cwd()).resolve()
        data["project_root"] = root
        for key, default in (
            ("output_dir", DEFAULT_OUTPUT_DIR),
            ("public_dir", Path("public")),
            ("functions_cache_dir", Path(".cache") / "functions"),
        ):
            value = Path(data.get(key) or default)
            data[key] = value if value.is_absolute() else root / value
        output_dir: Path = data["output_dir"]
        manifest = data.get("manifest_path")
        if manifest is None:
            data["manifest_path"] = output_dir / MANIFEST_FILE_NAME
        else:
            manifest = Path(manifest)
            data["manifest_path"] = manifest if manifest.is_absolute() else root / manifest
        return data

    @property
    def functions_dir(self) -> Path:
        """Directory holding every function bundle."""
        return self.output_dir / "functions"

    @property
    def static_dir(self) -> Path:
        """Directory holding the static tree."""
        return self.output_dir / "static"

    @property
    def manifest_file(self) -> Path:
        """Resolved manifest path (``<output_dir>/config.json`` when unset)."""
        if self.manifest_path is None:
            return self.output_dir / MANIFEST_FILE_NAME
        return self.manifest_path

    @classmethod
    def from_yaml(cls, path: str | Path, **overrides: Any) -> OutputConfig:
        """Load OutputConfig from a YAML file, applying overrides on top.

        ``project_root`` defaults to the file's directory. Overrides whose
        value is None are ignored so CLI options can be passed through
        unconditionally.

        Args:
            path: Path to ``buildport.yaml``.
            **overrides: Values taking precedence over the file.

        Returns:
            Validated OutputConfig.

        Raises:
            ConfigurationError: If the file is missing, unparsable or invalid.
        """
        from pydantic import ValidationError as PydanticValidationError

        path = Path(path)
        if not path.is_file():
            raise ConfigurationError("Configuration file not found", file_path=str(path))

        try:
            raw = yaml.safe_load(path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                "Configuration file is not valid YAML",
                file_path=str(path),
                internal_details=str(e),
            ) from e

        if not isinstance(raw, dict):
            raise ConfigurationError(
                "Configuration file must contain a mapping",
                file_path=str(path),
            )

        data: dict[str, Any] = {"project_root": path.parent, **raw}
        data.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            first = e.errors()[0]
            field_path = ".".join(str(x) for x in first["loc"])
            raise ConfigurationError(
                "Invalid configuration value",
                file_path=str(path),
                field_path=field_path or None,
                internal_details=str(e),
            ) from e

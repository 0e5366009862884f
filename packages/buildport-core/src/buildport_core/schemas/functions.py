"""Function bundle models for buildport.

- FunctionKind / FunctionDescriptor: transient description of one bundle
- FunctionConfig: platform entry descriptor (``.vc-config.json``)
- PrerenderConfig: cache descriptor for deferred pages
- RouteMetadata: routing metadata stored inside each bundle (``route.json``)
- FunctionBundle: record of a bundle written to disk
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# Methods served by page functions
PAGE_METHODS: tuple[str, ...] = ("GET", "HEAD")

# Methods served by API functions
API_METHODS: tuple[str, ...] = ("GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS")


class FunctionKind(str, Enum):
    """What a function bundle backs."""

    PAGE_FUNCTION = "page"
    API_FUNCTION = "api"


class FunctionDescriptor(BaseModel):
    """A unit of server-executed logic, before materialization.

    Attributes:
        kind: Page or API function.
        source_path: Page path, or the API function route.
        path_prefix: Site-wide path prefix (without slashes).
        route: Public path pattern served by the bundle (prefix applied).
        bundle_name: Bundle location relative to the functions directory,
            without the ``.func`` suffix.
        methods: HTTP methods the function answers.
        deferred: True for DSG pages (cached after first render).
        entry_module: Module the generated entry file requires.
        source_file: Compiled function copied into the bundle (API only).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: FunctionKind
    source_path: str
    path_prefix: str = ""
    route: str
    bundle_name: str = Field(..., min_length=1)
    methods: tuple[str, ...] = PAGE_METHODS
    deferred: bool = False
    entry_module: str
    source_file: Path | None = None


class FunctionConfig(BaseModel):
    """Entry descriptor read by the platform's function runtime."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    runtime: str = Field(..., min_length=1)
    handler: str = Field(default="index.js")
    launcher_type: Literal["Nodejs"] = Field(default="Nodejs", alias="launcherType")
    should_add_helpers: bool = Field(default=True, alias="shouldAddHelpers")


class PrerenderConfig(BaseModel):
    """Cache settings for a deferred (DSG) page bundle."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    expiration: Literal[False] | int = False


class RouteMetadata(BaseModel):
    """Routing metadata stored alongside the entry file."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: FunctionKind
    path: str
    methods: tuple[str, ...]
    deferred: bool = False


class FunctionBundle(BaseModel):
    """A function bundle written to disk.

    Attributes:
        kind: Page or API function.
        route: Public path pattern served by the bundle.
        bundle_dir: Absolute path of the ``.func`` directory.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: FunctionKind
    route: str
    bundle_dir: Path

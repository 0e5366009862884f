"""Pydantic schemas for buildport.

- Build state (input): Page, Redirect, ApiFunction, SiteConfig, BuildState
- Function bundles: FunctionDescriptor, FunctionConfig, PrerenderConfig
- Manifest (output): RouteRule, PlatformRoute, DeploymentManifest
- Options: OutputConfig
"""

from __future__ import annotations

from buildport_core.schemas.build_state import (
    ApiFunction,
    BuildState,
    Page,
    PageMode,
    Redirect,
    SiteConfig,
    TrailingSlash,
)
from buildport_core.schemas.functions import (
    API_METHODS,
    PAGE_METHODS,
    FunctionBundle,
    FunctionConfig,
    FunctionDescriptor,
    FunctionKind,
    PrerenderConfig,
    RouteMetadata,
)
from buildport_core.schemas.manifest import (
    MANIFEST_VERSION,
    DeploymentManifest,
    PlatformRoute,
    RouteRule,
)
from buildport_core.schemas.output_config import (
    CONFIG_FILE_NAME,
    OutputConfig,
)

__all__: list[str] = [
    # Build state
    "ApiFunction",
    "BuildState",
    "Page",
    "PageMode",
    "Redirect",
    "SiteConfig",
    "TrailingSlash",
    # Functions
    "API_METHODS",
    "PAGE_METHODS",
    "FunctionBundle",
    "FunctionConfig",
    "FunctionDescriptor",
    "FunctionKind",
    "PrerenderConfig",
    "RouteMetadata",
    # Manifest
    "MANIFEST_VERSION",
    "DeploymentManifest",
    "PlatformRoute",
    "RouteRule",
    # Options
    "CONFIG_FILE_NAME",
    "OutputConfig",
]

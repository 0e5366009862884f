"""buildport-core: Compile framework build state into platform build output.

This package provides:
- BuildState: Pydantic schema for the framework's post-build store state
- DeploymentManifest: Output contract read by the deployment platform
- BuildOrchestrator: Transform BuildState -> static dir, functions, manifest
- Integration helpers: plugin injection, linking and hook chaining
- JSON Schema export utilities
"""

from __future__ import annotations

__version__ = "0.1.0"

# Compiler
from buildport_core.compiler import (
    BuildOrchestrator,
    BuildPhase,
    BuildResult,
    generate_build_output,
    transform_routes,
    validate_build_state,
)

# Error types
from buildport_core.errors import (
    BuildportError,
    ConfigurationError,
    HookError,
    InjectionError,
    ManifestWriteError,
    MaterializationError,
    TransformError,
    ValidationError,
)

# JSON Schema export functions
from buildport_core.export import (
    export_build_state_schema,
    export_manifest_schema,
)

# Logging
from buildport_core.observability import configure_logging

# Post-build hooks
from buildport_core.hooks import chain_hooks, on_post_build

# Framework integration
from buildport_core.integration import (
    Integration,
    IntegrationOptions,
    inject_integrations,
    link_plugins,
    select_integrations,
)

# Schema models
from buildport_core.schemas import (
    ApiFunction,
    BuildState,
    DeploymentManifest,
    OutputConfig,
    Page,
    PageMode,
    PlatformRoute,
    Redirect,
    RouteRule,
    SiteConfig,
    TrailingSlash,
)

__all__ = [
    "__version__",
    # Compiler
    "BuildOrchestrator",
    "BuildPhase",
    "BuildResult",
    "generate_build_output",
    "transform_routes",
    "validate_build_state",
    # Errors
    "BuildportError",
    "ValidationError",
    "TransformError",
    "MaterializationError",
    "ManifestWriteError",
    "ConfigurationError",
    "InjectionError",
    "HookError",
    # JSON Schema exports
    "export_build_state_schema",
    "export_manifest_schema",
    # Logging
    "configure_logging",
    # Hooks
    "chain_hooks",
    "on_post_build",
    # Integration
    "Integration",
    "IntegrationOptions",
    "inject_integrations",
    "link_plugins",
    "select_integrations",
    # Schema models
    "BuildState",
    "Page",
    "PageMode",
    "Redirect",
    "ApiFunction",
    "SiteConfig",
    "TrailingSlash",
    "DeploymentManifest",
    "RouteRule",
    "PlatformRoute",
    "OutputConfig",
]

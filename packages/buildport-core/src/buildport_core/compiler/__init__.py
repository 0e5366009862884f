"""Build output compiler for buildport.

This module exports the orchestrator and the individual stages it runs:
- BuildOrchestrator: Sequences validation, staging, routing and manifest write
- validate_build_state: Schema check of a projected store state
- transform_routes: Redirects and trailing-slash policy to manifest routes
- FunctionMaterializer: Page and API function bundles
- stage_static: Public tree placement
- write_manifest: Atomic manifest persistence
"""

from __future__ import annotations

from buildport_core.compiler.functions import (
    FunctionMaterializer,
    build_api_descriptors,
    build_page_descriptors,
)
from buildport_core.compiler.manifest_writer import write_manifest, write_manifest_async
from buildport_core.compiler.orchestrator import (
    BuildOrchestrator,
    BuildPhase,
    BuildResult,
    generate_build_output,
)
from buildport_core.compiler.path_pattern import PatternError, compile_source
from buildport_core.compiler.routes import (
    RouteTable,
    redirects_to_rules,
    resolve_trailing_slash,
    transform_routes,
)
from buildport_core.compiler.state_adapter import project_pages, project_store_state
from buildport_core.compiler.static import stage_static, static_target
from buildport_core.compiler.validator import is_valid, validate_build_state

__all__: list[str] = [
    # Orchestration
    "BuildOrchestrator",
    "BuildPhase",
    "BuildResult",
    "generate_build_output",
    # Input
    "project_pages",
    "project_store_state",
    "validate_build_state",
    "is_valid",
    # Routes
    "RouteTable",
    "PatternError",
    "compile_source",
    "redirects_to_rules",
    "resolve_trailing_slash",
    "transform_routes",
    # Output
    "FunctionMaterializer",
    "build_api_descriptors",
    "build_page_descriptors",
    "stage_static",
    "static_target",
    "write_manifest",
    "write_manifest_async",
]

"""Build output orchestration.

Sequences one build-output generation run:

    VALIDATING -> CLEARING_OUTPUT -> STAGING -> TRANSFORMING_ROUTES
        -> WRITING_MANIFEST -> DONE

Any failure moves the run to ABORTED and re-raises a single
:class:`~buildport_core.errors.BuildportError` tagged with the failing
phase. No manifest is written after a failure. Output written before the
failure (cleared directory, staged files, bundles) is left as-is: there
is no rollback, and the next run clears it anyway.

Static staging and both function sub-protocols run concurrently once the
previous output has been cleared; the manifest is written only after all
of them succeeded.
"""

from __future__ import annotations

import asyncio
import shutil
import time
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field

from buildport_core.compiler.functions import FunctionMaterializer
from buildport_core.compiler.manifest_writer import write_manifest_async
from buildport_core.compiler.routes import transform_routes
from buildport_core.compiler.state_adapter import project_store_state
from buildport_core.compiler.static import stage_static
from buildport_core.compiler.validator import validate_build_state
from buildport_core.errors import BuildportError, MaterializationError, ValidationError
from buildport_core.schemas.build_state import BuildState
from buildport_core.schemas.functions import FunctionBundle
from buildport_core.schemas.manifest import DeploymentManifest
from buildport_core.schemas.output_config import OutputConfig

logger = structlog.get_logger(__name__)


class BuildPhase(str, Enum):
    """States of a build-output generation run."""

    PENDING = "pending"
    VALIDATING = "validating"
    CLEARING_OUTPUT = "clearing_output"
    STAGING = "staging"
    TRANSFORMING_ROUTES = "transforming_routes"
    WRITING_MANIFEST = "writing_manifest"
    DONE = "done"
    ABORTED = "aborted"


class BuildResult(BaseModel):
    """Outcome of a successful run.

    Attributes:
        manifest: The manifest that was written.
        manifest_path: Where it was written.
        static_dir: Staged static directory.
        bundles: Function bundles written (pages first, then API).
        duration_ms: Wall-clock duration of the run.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    manifest: DeploymentManifest
    manifest_path: Path
    static_dir: Path
    bundles: list[FunctionBundle] = Field(default_factory=list)
    duration_ms: int = 0


class BuildOrchestrator:
    """Compile a framework store state into platform build output.

    Args:
        config: Output options. Defaults to :class:`OutputConfig` for the
            current directory.

    Attributes:
        phase: Current (or final) phase of the most recent run.

    Example:
        >>> orchestrator = BuildOrchestrator(OutputConfig(project_root=site))
        >>> result = orchestrator.generate(store_state)
        >>> result.manifest.version
        3
    """

    def __init__(self, config: OutputConfig | None = None) -> None:
        self.config = config or OutputConfig()
        self.phase = BuildPhase.PENDING
        self._materializer = FunctionMaterializer(self.config)
        self._log = logger.bind(component="build_orchestrator")

    def generate(self, store_state: Mapping[str, Any]) -> BuildResult:
        """Synchronous wrapper around :meth:`run`."""
        return asyncio.run(self.run(store_state))

    async def run(self, store_state: Mapping[str, Any]) -> BuildResult:
        """Run every phase against ``store_state``.

        Args:
            store_state: Mapping with ``pages`` (mapping or pair list),
                ``redirects``, ``functions`` and ``config``.

        Returns:
            BuildResult describing the written output.

        Raises:
            ValidationError: The store state does not match the schema.
            TransformError: A redirect could not be compiled.
            MaterializationError: Output could not be written.
        """
        start = time.monotonic()
        self._log.info("build_started", output_dir=str(self.config.output_dir))

        try:
            self._enter(BuildPhase.VALIDATING)
            state = self._validate(store_state)

            self._enter(BuildPhase.CLEARING_OUTPUT)
            await self._clear_output()

            self._enter(BuildPhase.STAGING)
            static_dir, bundles = await self._stage(state)

            self._enter(BuildPhase.TRANSFORMING_ROUTES)
            table = transform_routes(
                state.redirects,
                state.config.trailing_slash,
                self.config.route_format,
            )
            self._log.info(
                "routes_transformed",
                rules=len(table.rules),
                trailing_slash=table.trailing_slash,
            )

            self._enter(BuildPhase.WRITING_MANIFEST)
            manifest = DeploymentManifest(routes=table.routes)
            manifest_path = await write_manifest_async(manifest, self.config.manifest_file)
        except BuildportError as e:
            self._abort(e)
            raise

        self._enter(BuildPhase.DONE)
        duration_ms = int((time.monotonic() - start) * 1000)
        self._log.info(
            "build_completed",
            bundles=len(bundles),
            routes=len(manifest.routes or ()),
            duration_ms=duration_ms,
        )
        return BuildResult(
            manifest=manifest,
            manifest_path=manifest_path,
            static_dir=static_dir,
            bundles=bundles,
            duration_ms=duration_ms,
        )

    def _enter(self, phase: BuildPhase) -> None:
        self.phase = phase
        self._log.debug("phase_entered", phase=phase.value)

    def _abort(self, error: BuildportError) -> None:
        error.phase = self.phase.value
        self._log.error(
            "build_aborted",
            phase=self.phase.value,
            error_type=type(error).__name__,
            error=error.user_message,
        )
        self.phase = BuildPhase.ABORTED

    def _validate(self, store_state: Mapping[str, Any]) -> BuildState:
        if not isinstance(store_state, Mapping):
            raise ValidationError(
                internal_details=f"store state must be a mapping, got {type(store_state).__name__}"
            )
        return validate_build_state(project_store_state(store_state))

    async def _clear_output(self) -> None:
        output_dir = self.config.output_dir

        def _remove() -> None:
            if output_dir.is_symlink() or output_dir.is_file():
                output_dir.unlink()
            elif output_dir.exists():
                shutil.rmtree(output_dir)

        try:
            await asyncio.to_thread(_remove)
        except OSError as e:
            raise MaterializationError(
                "Failed to clear previous build output",
                target=str(output_dir),
                internal_details=repr(e),
            ) from e
        self._log.info("output_cleared", output_dir=str(output_dir))

    async def _stage(self, state: BuildState) -> tuple[Path, list[FunctionBundle]]:
        """Stage static files and materialize functions concurrently."""
        prefix = state.config.prefix
        results = await asyncio.gather(
            stage_static(self.config, prefix),
            self._materializer.materialize_pages(state.dynamic_pages(), prefix),
            self._materializer.materialize_api(state.functions, prefix),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                if isinstance(result, BuildportError):
                    raise result
                raise MaterializationError(
                    "Failed to stage build output",
                    internal_details=repr(result),
                ) from result

        static_dir, page_bundles, api_bundles = results
        return static_dir, [*page_bundles, *api_bundles]


def generate_build_output(
    store_state: Mapping[str, Any],
    config: OutputConfig | None = None,
) -> BuildResult:
    """Compile ``store_state`` into build output in one call.

    Example:
        >>> generate_build_output({"pages": {}, "redirects": [], "functions": [], "config": {}})
    """
    return BuildOrchestrator(config).generate(store_state)

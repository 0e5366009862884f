"""Deployment manifest persistence.

The manifest is written through a temporary file in the destination
directory and moved into place with ``os.replace``, so readers see either
the previous manifest or the complete new one.
"""

from __future__ import annotations

import asyncio
import os
import tempfile
from pathlib import Path

import structlog

from buildport_core.errors import ManifestWriteError
from buildport_core.schemas.manifest import DeploymentManifest

logger = structlog.get_logger(__name__)


def _write_atomic(path: Path, data: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(data)
        # mkstemp creates 0600 files
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def write_manifest(manifest: DeploymentManifest, path: Path) -> Path:
    """Serialize ``manifest`` to ``path``, replacing any existing file.

    Args:
        manifest: Manifest to persist.
        path: Destination file.

    Returns:
        The written path.

    Raises:
        ManifestWriteError: If the file cannot be written.
    """
    try:
        _write_atomic(path, manifest.to_json())
    except OSError as e:
        raise ManifestWriteError(
            "Failed to write deployment manifest",
            target=str(path),
            internal_details=repr(e),
        ) from e

    logger.info(
        "manifest_written",
        path=str(path),
        routes=len(manifest.routes or ()),
    )
    return path


async def write_manifest_async(manifest: DeploymentManifest, path: Path) -> Path:
    """Run :func:`write_manifest` in a worker thread."""
    return await asyncio.to_thread(write_manifest, manifest, path)

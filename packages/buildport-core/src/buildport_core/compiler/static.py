"""Static output staging.

Places the already-rendered public tree at the platform's static output
location, nested under the path prefix when one is set:

    <output_dir>/static/             no prefix
    <output_dir>/static/<prefix>/    with prefix

No file content is transformed.
"""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from buildport_core.errors import MaterializationError

if TYPE_CHECKING:
    from buildport_core.schemas.output_config import OutputConfig

logger = structlog.get_logger(__name__)


def static_target(config: OutputConfig, prefix: str) -> Path:
    """Return where the public tree lands for a given prefix."""
    return config.static_dir / prefix if prefix else config.static_dir


def _stage(config: OutputConfig, prefix: str) -> Path:
    target = static_target(config, prefix)
    public_dir = config.public_dir
    target.parent.mkdir(parents=True, exist_ok=True)

    if target.is_symlink() or target.is_file():
        target.unlink()
    elif target.exists():
        shutil.rmtree(target)

    if not public_dir.is_dir():
        logger.warning("public_dir_missing", public_dir=str(public_dir))
        target.mkdir(parents=True)
        return target

    if config.static_strategy == "symlink":
        try:
            target.symlink_to(public_dir.resolve(), target_is_directory=True)
            return target
        except OSError as e:
            # Some file systems refuse symlinks; fall back to a copy.
            logger.warning("static_symlink_failed", error=str(e), fallback="copy")

    shutil.copytree(public_dir, target, symlinks=True)
    return target


async def stage_static(config: OutputConfig, prefix: str) -> Path:
    """Stage the public tree into the static output directory.

    Args:
        config: Output configuration (public dir, output dir, strategy).
        prefix: Path prefix without surrounding slashes.

    Returns:
        The staged static directory (possibly a symlink).

    Raises:
        MaterializationError: If the tree cannot be staged.
    """
    try:
        target = await asyncio.to_thread(_stage, config, prefix)
    except OSError as e:
        raise MaterializationError(
            "Failed to stage static files",
            target=str(static_target(config, prefix)),
            internal_details=repr(e),
        ) from e

    logger.info(
        "static_staged",
        target=str(target),
        strategy=config.static_strategy,
        linked=target.is_symlink(),
    )
    return target

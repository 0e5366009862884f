"""Deployment manifest models for buildport.

The manifest (``config.json``) is the only artifact that outlives a build.
It carries a fixed schema version and an ordered route table, evaluated
first-match-wins by the platform.

Two route shapes are supported:
- RouteRule: ``{source, destination, permanent}``, one per redirect
- PlatformRoute: compiled ``{src, headers, status}`` platform routes
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# Build output schema version understood by the platform
MANIFEST_VERSION = 3


class RouteRule(BaseModel):
    """A redirect expressed as a generic route rule.

    Attributes:
        source: Source path pattern.
        destination: Destination path or URL.
        permanent: Permanent (308) or temporary (307).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    source: str = Field(..., description="Source path pattern")
    destination: str = Field(..., description="Destination path or URL")
    permanent: bool = Field(..., description="Permanent redirect")


class PlatformRoute(BaseModel):
    """A compiled platform route.

    Routes with only ``src`` stop evaluation for matching paths without
    redirecting (used to pass ``/.well-known`` through untouched).

    Attributes:
        src: Anchored regular expression matched against the request path.
        headers: Response headers (``Location`` for redirects).
        status: Response status code.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    src: str = Field(..., description="Anchored path regex")
    headers: dict[str, str] | None = Field(default=None, description="Response headers")
    status: int | None = Field(default=None, description="Response status code")


class DeploymentManifest(BaseModel):
    """The build output manifest.

    Attributes:
        version: Fixed schema version (3).
        routes: Ordered route table, or None when no route resolved.

    Example:
        >>> manifest = DeploymentManifest(
        ...     routes=[RouteRule(source="/old", destination="/new", permanent=True)]
        ... )
        >>> manifest.to_json()
        '{"version":3,"routes":[{"source":"/old","destination":"/new","permanent":true}]}\\n'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: Literal[3] = Field(
        default=MANIFEST_VERSION,
        description="Build output schema version",
    )
    routes: list[RouteRule] | list[PlatformRoute] | None = Field(
        default=None,
        description="Ordered route table (first match wins)",
    )

    def to_json(self) -> str:
        """Serialize compactly, omitting unset fields, with a final newline."""
        return self.model_dump_json(exclude_none=True) + "\n"

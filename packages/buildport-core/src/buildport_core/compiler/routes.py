"""Redirect-to-route transformation.

Produces the manifest's route table from the site's redirects and its
trailing-slash policy. Declaration order is preserved exactly: the
platform evaluates routes first-match-wins, so reordering would change
which redirect applies.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from buildport_core.compiler.path_pattern import PatternError, compile_source
from buildport_core.compiler.routing import resolve_routes
from buildport_core.errors import TransformError
from buildport_core.schemas.build_state import Redirect, TrailingSlash
from buildport_core.schemas.manifest import PlatformRoute, RouteRule
from buildport_core.schemas.output_config import RouteFormat

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class RouteTable:
    """Result of route transformation.

    Attributes:
        rules: One rule per redirect, in declaration order.
        trailing_slash: Resolved flag handed to route resolution.
        routes: Routes to write into the manifest, or None when empty.
    """

    rules: tuple[RouteRule, ...]
    trailing_slash: bool | None
    routes: list[RouteRule] | list[PlatformRoute] | None


def resolve_trailing_slash(policy: TrailingSlash | str | None) -> bool | None:
    """Map the tri-state site policy onto an explicit flag.

    ``always`` -> True, ``never`` -> False, anything else -> None (the
    platform applies its own default).
    """
    if isinstance(policy, str) and not isinstance(policy, TrailingSlash):
        policy = TrailingSlash(policy.lower())
    if policy is TrailingSlash.always:
        return True
    if policy is TrailingSlash.never:
        return False
    return None


def redirects_to_rules(redirects: Sequence[Redirect]) -> list[RouteRule]:
    """Translate redirects into generic route rules, keeping their order."""
    return [
        RouteRule(
            source=redirect.from_path,
            destination=redirect.to_path,
            permanent=redirect.is_permanent,
        )
        for redirect in redirects
    ]


def transform_routes(
    redirects: Sequence[Redirect],
    trailing_slash: TrailingSlash | str | None,
    route_format: RouteFormat = "rules",
) -> RouteTable:
    """Build the route table.

    Every redirect source is compiled, whatever the output format, so a
    malformed pattern always fails the build instead of being dropped.

    Args:
        redirects: Redirects in declaration order.
        trailing_slash: Site trailing-slash policy.
        route_format: ``rules`` or ``compiled`` manifest routes.

    Returns:
        RouteTable with the rules, the resolved flag and manifest routes.

    Raises:
        TransformError: If any redirect cannot be compiled.
    """
    flag = resolve_trailing_slash(trailing_slash)
    rules = redirects_to_rules(redirects)

    try:
        if route_format == "compiled":
            routes: list[RouteRule] | list[PlatformRoute] = resolve_routes(rules, flag)
        else:
            for rule in rules:
                compile_source(rule.source)
            routes = rules
    except PatternError as e:
        offending = next(
            (rule for rule in rules if rule.source == e.source),
            None,
        )
        raise TransformError(
            f"Failed to parse redirect from '{e.source}'",
            redirect=offending.model_dump() if offending else None,
            internal_details=str(e),
        ) from e

    logger.debug(
        "routes_resolved",
        rules=len(rules),
        trailing_slash=flag,
        route_format=route_format,
    )
    return RouteTable(
        rules=tuple(rules),
        trailing_slash=flag,
        routes=routes or None,
    )

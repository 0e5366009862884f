"""Platform route resolution.

Turns generic route rules plus a trailing-slash flag into compiled
platform routes:

- trailing slash ``True``: pass ``/.well-known`` through, add a slash to
  extensionless paths, strip it from file paths
- trailing slash ``False``: strip any trailing slash
- trailing slash ``None``: no normalization routes (platform default)
- each redirect: ``{src, headers: {Location}, status}`` with 308 for
  permanent and 307 for temporary redirects, in declaration order
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from buildport_core.compiler.path_pattern import compile_source
from buildport_core.schemas.manifest import PlatformRoute, RouteRule

PERMANENT_STATUS = 308
TEMPORARY_STATUS = 307

# ":name" references in a destination, with an optional modifier
_DEST_PARAM_RE = re.compile(r":([A-Za-z0-9_]+)[?*+]?")


def trailing_slash_routes(enable: bool | None) -> list[PlatformRoute]:
    """Return the normalization routes for a trailing-slash flag."""
    if enable is None:
        return []
    if enable:
        return [
            PlatformRoute(src="^/\\.well-known(?:/.*)?$"),
            PlatformRoute(
                src="^/((?:[^/]+/)*[^/\\.]+)$",
                headers={"Location": "/$1/"},
                status=PERMANENT_STATUS,
            ),
            PlatformRoute(
                src="^/((?:[^/]+/)*[^/]+\\.\\w+)/$",
                headers={"Location": "/$1"},
                status=PERMANENT_STATUS,
            ),
        ]
    return [
        PlatformRoute(
            src="^/(.*)\\/$",
            headers={"Location": "/$1"},
            status=PERMANENT_STATUS,
        )
    ]


def replace_segments(segments: Sequence[str | int], destination: str) -> str:
    """Rewrite ``:name`` references in a destination to ``$N`` captures.

    Named captures the destination does not reference are appended as
    query parameters (``?name=$N``) so their values still reach the
    target. References to names the source does not capture are left
    untouched.

    Example:
        >>> replace_segments(["slug"], "/news")
        '/news?slug=$1'
    """
    indexes = {
        name: f"${position}"
        for position, name in enumerate(segments, start=1)
        if isinstance(name, str)
    }
    if not indexes:
        return destination

    used: set[str] = set()

    def _substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in indexes:
            return match.group(0)
        used.add(name)
        return indexes[name]

    location = _DEST_PARAM_RE.sub(_substitute, destination)
    unused = [f"{name}={index}" for name, index in indexes.items() if name not in used]
    if not unused:
        return location
    separator = "&" if "?" in location else "?"
    return location + separator + "&".join(unused)


def compile_redirect(rule: RouteRule) -> PlatformRoute:
    """Compile one redirect rule into a platform route.

    Raises:
        PatternError: If the rule's source pattern is malformed.
    """
    src, segments = compile_source(rule.source)
    location = replace_segments(segments, rule.destination)
    return PlatformRoute(
        src=src,
        headers={"Location": location},
        status=PERMANENT_STATUS if rule.permanent else TEMPORARY_STATUS,
    )


def resolve_routes(
    rules: Sequence[RouteRule],
    trailing_slash: bool | None,
) -> list[PlatformRoute]:
    """Compile rules into the ordered platform route table.

    Normalization routes come first, then redirects in declaration order.

    Raises:
        PatternError: If any rule's source pattern is malformed.
    """
    routes = trailing_slash_routes(trailing_slash)
    routes.extend(compile_redirect(rule) for rule in rules)
    return routes

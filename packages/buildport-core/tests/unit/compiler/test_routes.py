"""Unit tests for redirect-to-route transformation."""

from __future__ import annotations

import pytest

from buildport_core.compiler.routes import (
    redirects_to_rules,
    resolve_trailing_slash,
    transform_routes,
)
from buildport_core.errors import TransformError
from buildport_core.schemas import PlatformRoute, Redirect, RouteRule, TrailingSlash


def _redirect(source: str, destination: str, permanent: bool = False) -> Redirect:
    return Redirect(from_path=source, to_path=destination, is_permanent=permanent)


class TestResolveTrailingSlash:
    """Tests for the tri-state trailing-slash mapping."""

    @pytest.mark.parametrize(
        ("policy", "expected"),
        [
            (TrailingSlash.always, True),
            (TrailingSlash.never, False),
            (TrailingSlash.ignore, None),
            (TrailingSlash.legacy, None),
            (None, None),
            ("always", True),
            ("NEVER", False),
        ],
    )
    def test_mapping(self, policy: TrailingSlash | str | None, expected: bool | None) -> None:
        """always -> True, never -> False, everything else -> None."""
        assert resolve_trailing_slash(policy) is expected


class TestRedirectsToRules:
    """Tests for redirects_to_rules."""

    def test_fields_mapped_in_order(self) -> None:
        """Each redirect maps to one rule, order preserved."""
        rules = redirects_to_rules(
            [_redirect("/b", "/c"), _redirect("/a", "/b", permanent=True)]
        )
        assert rules == [
            RouteRule(source="/b", destination="/c", permanent=False),
            RouteRule(source="/a", destination="/b", permanent=True),
        ]


class TestTransformRoutes:
    """Tests for transform_routes."""

    def test_rules_format(self) -> None:
        """Rules format writes the rules themselves as routes."""
        table = transform_routes([_redirect("/old", "/new", True)], "always")
        assert table.trailing_slash is True
        assert table.routes == [RouteRule(source="/old", destination="/new", permanent=True)]
        assert table.rules == tuple(table.routes)

    def test_no_redirects_no_routes(self) -> None:
        """Without redirects the route table is absent."""
        table = transform_routes([], "always")
        assert table.rules == ()
        assert table.routes is None

    def test_order_preserved_for_many_redirects(self) -> None:
        """Route order equals redirect order one-to-one."""
        redirects = [_redirect(f"/from-{i}", f"/to-{i}", i % 2 == 0) for i in range(25)]
        table = transform_routes(redirects, None)
        assert table.routes is not None
        assert [route.source for route in table.routes] == [  # type: ignore[union-attr]
            f"/from-{i}" for i in range(25)
        ]

    def test_compiled_format(self) -> None:
        """Compiled format writes platform routes after normalization routes."""
        table = transform_routes([_redirect("/old", "/new", True)], "never", "compiled")
        assert table.routes is not None
        assert len(table.routes) == 2
        last = table.routes[-1]
        assert isinstance(last, PlatformRoute)
        assert last.headers == {"Location": "/new"}
        assert last.status == 308

    def test_compiled_format_policy_only(self) -> None:
        """A trailing-slash policy alone still yields compiled routes."""
        table = transform_routes([], "always", "compiled")
        assert table.routes is not None
        assert len(table.routes) == 3

    @pytest.mark.parametrize("route_format", ["rules", "compiled"])
    def test_malformed_source_fails(self, route_format: str) -> None:
        """A malformed source aborts transformation in either format."""
        redirects = [_redirect("/ok", "/fine"), _redirect("/((", "/x", True)]
        with pytest.raises(TransformError) as exc_info:
            transform_routes(redirects, None, route_format)  # type: ignore[arg-type]
        assert "/((" in exc_info.value.user_message
        assert exc_info.value.redirect == {
            "source": "/((",
            "destination": "/x",
            "permanent": True,
        }

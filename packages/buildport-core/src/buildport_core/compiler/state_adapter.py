"""Projection of the framework store state into a validatable payload.

The framework keeps its page table in an insertion-ordered mapping keyed
by path. Validation operates on plain sequences, so the mapping is
projected once, here, into an ordered list of ``(path, page)`` pairs:

- insertion order is preserved
- mapping-key uniqueness becomes list uniqueness
- page values are passed through untouched (no copy, no mutation)
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any


def project_pages(pages: Any) -> list[Any]:
    """Project a page table into an ordered list of ``(path, page)`` pairs.

    Accepts a mapping (the live store) or an iterable of pairs (a dumped
    store, where the mapping was already serialized as entries). Anything
    else is returned unchanged so the validator can report it.

    Args:
        pages: Page table from the store state.

    Returns:
        List of ``(path, page)`` tuples in insertion order.

    Example:
        >>> project_pages({"/": {"mode": "SSG"}, "/dash": {"mode": "SSR"}})
        [('/', {'mode': 'SSG'}), ('/dash', {'mode': 'SSR'})]
    """
    if isinstance(pages, Mapping):
        return list(pages.items())
    if isinstance(pages, Iterable) and not isinstance(pages, (str, bytes)):
        return [tuple(entry) if isinstance(entry, list) else entry for entry in pages]
    return pages


def project_store_state(store_state: Mapping[str, Any]) -> dict[str, Any]:
    """Build the validation payload from a store state.

    Only the four keys the compiler reads are carried over.

    Args:
        store_state: Mapping with ``pages``, ``redirects``, ``functions``
            and ``config`` entries (missing ones are left out).

    Returns:
        Payload for :func:`buildport_core.compiler.validator.validate_build_state`.
    """
    payload: dict[str, Any] = {}
    if "pages" in store_state:
        payload["pages"] = project_pages(store_state["pages"])
    for key in ("redirects", "functions", "config"):
        if key in store_state:
            payload[key] = store_state[key]
    return payload

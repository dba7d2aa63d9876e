"""Narrow a query by dropping fields the simulated identity cannot read."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from authz_simulator._types import WILDCARD
from authz_simulator.query._model import Query

__all__ = ["StripResult", "strip_forbidden_fields"]


@dataclass(frozen=True, slots=True)
class StripResult:
    """Outcome of :func:`strip_forbidden_fields`.

    Attributes:
        query: The narrowed query, or the original one when nothing changed.
        removed_fields: Forbidden fields that were dropped, in the order given.
        removed_wildcard: Whether ``"*"`` was dropped.
    """

    query: Query
    removed_fields: tuple[str, ...] = ()
    removed_wildcard: bool = False

    @property
    def changed(self) -> bool:
        return self.removed_wildcard or bool(self.removed_fields)


def strip_forbidden_fields(query: Query, forbidden: Iterable[str]) -> StripResult:
    """Remove forbidden fields (and the wildcard) from ``query.fields``.

    Nothing changes when the query selects no explicit field list, when
    ``forbidden`` is empty, when ``"*"`` is the only requested field, or
    when every remaining field would be removed.
    Only ``fields`` is ever touched; every other option is kept.

    Args:
        query: The query that failed.
        forbidden: Field names the executor denied.

    Returns:
        A ``StripResult``; check ``changed`` before retrying.

    Example::

        result = strip_forbidden_fields(
            Query(fields=("title", "secret_note")), ["secret_note"]
        )
        assert result.query.fields == ("title",)
    """
    forbidden = tuple(forbidden)
    unchanged = StripResult(query=query)
    if query.fields is None or not forbidden:
        return unchanged

    next_fields = list(query.fields)
    removed_wildcard = False
    if WILDCARD in next_fields:
        explicit = [f for f in next_fields if f != WILDCARD]
        if not explicit:
            return unchanged
        next_fields = explicit
        removed_wildcard = True

    removed: list[str] = []
    for name in forbidden:
        if name in next_fields:
            next_fields = [f for f in next_fields if f != name]
            removed.append(name)

    if not removed_wildcard and not removed:
        return unchanged
    # Narrowing to nothing would request no fields at all.
    if not next_fields:
        return unchanged
    return StripResult(
        query=query.with_fields(next_fields),
        removed_fields=tuple(removed),
        removed_wildcard=removed_wildcard,
    )

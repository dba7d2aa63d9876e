"""Query — item query with one well-known key (``fields``) and opaque options."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from authz_simulator.exceptions import InvalidQueryError

__all__ = ["Query"]


def _empty_options() -> Mapping[str, Any]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class Query:
    """An item query as sent by the caller.

    Only ``fields`` is interpreted by the simulator. Every other key
    (``limit``, ``filter``, ``sort``, ...) is carried verbatim in
    ``options`` and handed to the executor untouched.

    Attributes:
        fields: Requested field names (may contain ``"*"``), or ``None``
            when the query does not select fields explicitly.
        options: Remaining query keys, preserved as given.

    Example::

        query = Query.parse('{"fields": ["*"], "limit": 1}')
        assert query.fields == ("*",)
        assert query.options["limit"] == 1
    """

    fields: tuple[str, ...] | None = None
    options: Mapping[str, Any] = field(default_factory=_empty_options)

    @classmethod
    def parse(cls, value: object) -> Query:
        """Build a query from ``None``, a mapping, or JSON text.

        Blank text and ``None`` give an empty query. A ``fields`` value
        that is not a list of strings (or a comma-separated string) is
        kept opaque in ``options``.

        Raises:
            InvalidQueryError: If the text is not valid JSON or the value
                is not an object.
        """
        if isinstance(value, Query):
            return value
        if isinstance(value, str):
            text = value.strip()
            if not text:
                return cls()
            try:
                value = json.loads(text)
            except json.JSONDecodeError as exc:
                raise InvalidQueryError(f"Query is not valid JSON: {exc.msg}") from exc
        if value is None:
            return cls()
        if not isinstance(value, Mapping):
            raise InvalidQueryError(
                f"Query must be a JSON object, got {type(value).__name__}"
            )

        options = dict(value)
        raw_fields = options.pop("fields", None)
        fields: tuple[str, ...] | None = None
        if isinstance(raw_fields, str):
            fields = tuple(f.strip() for f in raw_fields.split(",") if f.strip())
        elif isinstance(raw_fields, Sequence) and all(isinstance(f, str) for f in raw_fields):
            fields = tuple(raw_fields)
        elif raw_fields is not None:
            options["fields"] = raw_fields
        return cls(fields=fields, options=MappingProxyType(options))

    def with_fields(self, fields: Sequence[str]) -> Query:
        """Return a copy with only ``fields`` replaced."""
        return Query(fields=tuple(fields), options=self.options)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dictionary in the caller's shape."""
        out: dict[str, Any] = {}
        if self.fields is not None:
            out["fields"] = list(self.fields)
        out.update(self.options)
        return out

"""Field-level hints from comparing a baseline row with a simulated row."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from authz_simulator._types import HintKind

__all__ = ["Hint", "diff_rows", "first_row"]

_NO_ROW_NOTE = (
    "Field not returned for simulated context "
    "(may be restricted by permissions or query)."
)
_MISSING_NOTE = (
    "Missing in simulated response "
    "(often indicates field/relational access restriction)."
)
_NULL_NOTE = (
    "Returned as null in simulated response while requester sees a value "
    "(often indicates field-level restriction)."
)


@dataclass(frozen=True, slots=True)
class Hint:
    """One field that the simulated identity sees differently.

    Attributes:
        field: Field name from the baseline row.
        kind: ``"missing"`` when the field is absent, ``"null"`` when it
            came back null while the baseline has a value.
        note: Human-readable explanation.
    """

    field: str
    kind: HintKind
    note: str

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dictionary."""
        return {"field": self.field, "type": self.kind, "note": self.note}


def first_row(items: Sequence[Any] | None) -> Any:
    """Return the first item, or ``None`` for an empty or missing result."""
    if not items:
        return None
    return items[0]


def diff_rows(baseline_row: object, simulated_row: object) -> list[Hint]:
    """Compare the first baseline row with the first simulated row.

    Walks the baseline keys in order. A key absent from the simulated
    row is ``missing``; a key that is null only in the simulated row is
    ``null``. Keys present only in the simulated row are ignored.

    Example::

        diff_rows({"a": 1, "b": None, "c": "x"}, {"a": 1, "c": None})
        # [Hint(field="b", kind="missing", ...), Hint(field="c", kind="null", ...)]
    """
    if not isinstance(baseline_row, Mapping):
        return []

    if not isinstance(simulated_row, Mapping):
        return [Hint(field=str(key), kind="missing", note=_NO_ROW_NOTE) for key in baseline_row]

    hints: list[Hint] = []
    for key, value in baseline_row.items():
        if key not in simulated_row:
            hints.append(Hint(field=str(key), kind="missing", note=_MISSING_NOTE))
        elif simulated_row[key] is None and value is not None:
            hints.append(Hint(field=str(key), kind="null", note=_NULL_NOTE))
    return hints

"""SqlItemsExecutor — permission-checked item reads over SQLAlchemy Core tables."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from sqlalchemy import ColumnElement, Engine, MetaData, Table, and_, or_, select

from authz_simulator._accountability import Accountability
from authz_simulator._types import WILDCARD
from authz_simulator.config._config import SimulatorConfig, get_global_config
from authz_simulator.exceptions import (
    CollectionAccessDenied,
    FieldAccessDenied,
    InvalidQueryError,
)
from authz_simulator.executors._engine import fetch_all
from authz_simulator.executors._permissions import FieldPermissions
from authz_simulator.query._model import Query

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

__all__ = ["SqlItemsExecutor"]

_Operator = Callable[[Any, Any], ColumnElement[bool]]

_OPERATORS: dict[str, _Operator] = {
    "_eq": lambda col, value: col == value,
    "_neq": lambda col, value: col != value,
    "_null": lambda col, value: col.is_(None) if value else col.is_not(None),
    "_nnull": lambda col, value: col.is_not(None) if value else col.is_(None),
    "_in": lambda col, value: col.in_(list(value)),
    "_nin": lambda col, value: col.not_in(list(value)),
}

_SCALAR_TYPES = (str, int, float, bool, type(None))


def _is_scalar(value: object) -> bool:
    return isinstance(value, _SCALAR_TYPES)


def _check_operand(field: str, op: str, operand: object) -> None:
    """Raise ``InvalidQueryError`` unless ``operand`` has the shape ``op`` expects."""
    if op in ("_eq", "_neq"):
        valid = _is_scalar(operand)
        expected = "a string, number, boolean or null"
    elif op in ("_null", "_nnull"):
        valid = isinstance(operand, bool)
        expected = "a boolean"
    else:
        valid = isinstance(operand, list) and all(_is_scalar(v) for v in operand)
        expected = "a list of strings, numbers, booleans or nulls"
    if not valid:
        raise InvalidQueryError(f"{op} on field {field!r} expects {expected}")


class SqlItemsExecutor:
    """Reads items from SQL tables while enforcing :class:`FieldPermissions`.

    Administrators bypass permissions. Everyone else needs a grant for
    the accountability's role (``None`` is the public role) covering the
    collection and every field the query selects, filters or sorts on;
    otherwise the read fails with :class:`CollectionAccessDenied` or
    :class:`FieldAccessDenied`.

    Supported query options: ``limit`` (``-1`` for no limit), ``offset``,
    ``page``, ``sort`` and ``filter`` (``_eq``, ``_neq``, ``_null``,
    ``_nnull``, ``_in``, ``_nin``, grouped with ``_and`` / ``_or``).

    Args:
        engine: A sync ``Engine`` or an ``AsyncEngine``.
        metadata: Table definitions; collection names are table names.
        permissions: Read grants for non-admin identities.
        config: Optional config (for ``default_limit``). Defaults to the
            global config.

    Example::

        executor = SqlItemsExecutor(engine, metadata, permissions)
        rows = await executor.execute("posts", Query(fields=("id", "title")), accountability)
    """

    def __init__(
        self,
        engine: Engine | AsyncEngine,
        metadata: MetaData,
        permissions: FieldPermissions,
        *,
        config: SimulatorConfig | None = None,
    ) -> None:
        self._engine = engine
        self._metadata = metadata
        self._permissions = permissions
        self._config = config

    async def execute(
        self,
        collection: str,
        query: Query,
        accountability: Accountability,
    ) -> list[dict[str, Any]]:
        table = self._metadata.tables.get(collection)
        if table is None:
            raise CollectionAccessDenied(collection=collection)
        if not accountability.admin and not self._permissions.has_collection(
            accountability.role, collection
        ):
            raise CollectionAccessDenied(collection=collection)

        selected = self._selected_fields(table, query)
        where, filtered = self._compile_filter(table, query.options.get("filter"))
        order_by, sorted_fields = self._compile_sort(table, query.options.get("sort"))

        self._check_fields(
            table, collection, [*selected, *filtered, *sorted_fields], accountability
        )

        stmt = select(*(table.c[name] for name in selected))
        if where is not None:
            stmt = stmt.where(where)
        if order_by:
            stmt = stmt.order_by(*order_by)
        limit, offset = self._paging(query.options)
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset:
            stmt = stmt.offset(offset)

        return await fetch_all(self._engine, stmt)

    # ------------------------------------------------------------------
    # Query pieces
    # ------------------------------------------------------------------

    def _selected_fields(self, table: Table, query: Query) -> list[str]:
        requested = query.fields if query.fields else (WILDCARD,)
        names: list[str] = []
        for name in requested:
            expanded = list(table.c.keys()) if name == WILDCARD else [name]
            for col in expanded:
                if col not in names:
                    names.append(col)
        return names

    def _check_fields(
        self,
        table: Table,
        collection: str,
        fields: Sequence[str],
        accountability: Accountability,
    ) -> None:
        denied: list[str] = []
        for name in fields:
            if name in denied:
                continue
            if name not in table.c:
                denied.append(name)
            elif not accountability.admin and not self._permissions.can_read(
                accountability.role, collection, name
            ):
                denied.append(name)
        if denied:
            raise FieldAccessDenied(collection=collection, fields=denied)

    def _compile_filter(
        self, table: Table, node: object
    ) -> tuple[ColumnElement[bool] | None, list[str]]:
        if node is None:
            return None, []
        if not isinstance(node, Mapping):
            raise InvalidQueryError("filter must be an object")

        clauses: list[ColumnElement[bool]] = []
        fields: list[str] = []
        for key, value in node.items():
            if key in ("_and", "_or"):
                if not isinstance(value, list):
                    raise InvalidQueryError(f"{key} must be a list of filters")
                parts: list[ColumnElement[bool]] = []
                for child in value:
                    clause, child_fields = self._compile_filter(table, child)
                    fields.extend(child_fields)
                    if clause is not None:
                        parts.append(clause)
                if parts:
                    clauses.append(and_(*parts) if key == "_and" else or_(*parts))
                continue

            fields.append(key)
            if not isinstance(value, Mapping):
                raise InvalidQueryError(f"filter for field {key!r} must be an object")
            if key not in table.c:
                # Reported as a denied field by _check_fields.
                continue
            for op, operand in value.items():
                fn = _OPERATORS.get(op)
                if fn is None:
                    raise InvalidQueryError(f"Unsupported filter operator {op!r}")
                _check_operand(key, op, operand)
                clauses.append(fn(table.c[key], operand))

        if not clauses:
            return None, fields
        return and_(*clauses), fields

    def _compile_sort(self, table: Table, sort: object) -> tuple[list[Any], list[str]]:
        if sort is None:
            return [], []
        if isinstance(sort, str):
            sort = [s.strip() for s in sort.split(",") if s.strip()]
        if not isinstance(sort, list) or not all(isinstance(s, str) for s in sort):
            raise InvalidQueryError("sort must be a list of field names")

        order_by: list[Any] = []
        fields: list[str] = []
        for entry in sort:
            descending = entry.startswith("-")
            name = entry[1:] if descending else entry
            fields.append(name)
            if name in table.c:
                col = table.c[name]
                order_by.append(col.desc() if descending else col.asc())
        return order_by, fields

    def _paging(self, options: Mapping[str, Any]) -> tuple[int | None, int]:
        config = self._config if self._config is not None else get_global_config()
        limit = options.get("limit", config.default_limit)
        if not isinstance(limit, int) or isinstance(limit, bool) or limit < -1:
            raise InvalidQueryError("limit must be an integer >= -1")
        effective_limit = None if limit == -1 else limit

        offset = options.get("offset", 0)
        if not isinstance(offset, int) or isinstance(offset, bool) or offset < 0:
            raise InvalidQueryError("offset must be a non-negative integer")

        page = options.get("page")
        if page is not None:
            if not isinstance(page, int) or isinstance(page, bool) or page < 1:
                raise InvalidQueryError("page must be a positive integer")
            if effective_limit is not None:
                offset = (page - 1) * effective_limit
        return effective_limit, offset

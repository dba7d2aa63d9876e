"""SqlUserDirectory — resolves a user's role and status from a users table."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Engine, Table, select

from authz_simulator._types import UserRecord
from authz_simulator.executors._engine import fetch_all

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

__all__ = ["SqlUserDirectory"]


class SqlUserDirectory:
    """User directory backed by a SQL table.

    Args:
        engine: A sync ``Engine`` or an ``AsyncEngine``.
        users: The users table.
        id_column: Primary key column name. Defaults to ``"id"``.
        role_column: Role id column name. Defaults to ``"role"``.
        status_column: Account status column name, or ``None`` when the
            table has no status. Defaults to ``"status"``.

    Example::

        directory = SqlUserDirectory(engine, users_table)
        record = await directory.lookup("u1")
    """

    def __init__(
        self,
        engine: Engine | AsyncEngine,
        users: Table,
        *,
        id_column: str = "id",
        role_column: str = "role",
        status_column: str | None = "status",
    ) -> None:
        self._engine = engine
        self._users = users
        self._id_column = id_column
        self._role_column = role_column
        self._status_column = status_column

    async def lookup(self, user_id: str) -> UserRecord | None:
        """Return the user's role and status, or ``None`` if there is no such user."""
        columns = [self._users.c[self._role_column].label("role")]
        if self._status_column is not None:
            columns.append(self._users.c[self._status_column].label("status"))
        stmt = select(*columns).where(self._users.c[self._id_column] == user_id).limit(1)

        rows = await fetch_all(self._engine, stmt)
        if not rows:
            return None
        row = rows[0]
        role = row["role"]
        return UserRecord(
            role=str(role) if role is not None else None,
            status=row.get("status"),
        )

"""Run SELECT statements on either a sync ``Engine`` or an ``AsyncEngine``."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from sqlalchemy import Engine, Select

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

__all__ = ["fetch_all"]


def _is_async_engine(engine: object) -> bool:
    """Check if an engine is an AsyncEngine without hard-importing asyncio extras."""
    try:
        from sqlalchemy.ext.asyncio import AsyncEngine

        return isinstance(engine, AsyncEngine)
    except ImportError:
        return False


def _fetch_all_sync(engine: Engine, stmt: Select[Any]) -> list[dict[str, Any]]:
    with engine.connect() as conn:
        return [dict(row._mapping) for row in conn.execute(stmt)]


async def fetch_all(engine: Engine | AsyncEngine, stmt: Select[Any]) -> list[dict[str, Any]]:
    """Execute ``stmt`` and return every row as a plain dict.

    Sync engines are driven from a worker thread so the event loop keeps
    running while the query executes.
    """
    if _is_async_engine(engine):
        async with engine.connect() as conn:  # type: ignore[union-attr]
            result = await conn.execute(stmt)
            return [dict(row._mapping) for row in result]

    return await asyncio.to_thread(_fetch_all_sync, engine, stmt)  # type: ignore[arg-type]

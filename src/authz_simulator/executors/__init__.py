"""SQLAlchemy-backed query executor and user directory."""

from __future__ import annotations

from authz_simulator.executors._directory import SqlUserDirectory
from authz_simulator.executors._items import SqlItemsExecutor
from authz_simulator.executors._permissions import PUBLIC_ROLE, FieldPermissions

__all__ = ["PUBLIC_ROLE", "FieldPermissions", "SqlItemsExecutor", "SqlUserDirectory"]

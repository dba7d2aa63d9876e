"""Shared test fixtures for authz-simulator tests."""

from __future__ import annotations

from collections.abc import Generator

import pytest
from sqlalchemy import Column, Engine, Integer, MetaData, String, Table, create_engine
from sqlalchemy.pool import StaticPool

from authz_simulator._accountability import Accountability
from authz_simulator.config._config import _reset_global_config
from authz_simulator.executors._directory import SqlUserDirectory
from authz_simulator.executors._items import SqlItemsExecutor
from authz_simulator.executors._permissions import PUBLIC_ROLE, FieldPermissions
from authz_simulator.testing._actors import make_admin

# ---------------------------------------------------------------------------
# Test tables
# ---------------------------------------------------------------------------

metadata = MetaData()

posts = Table(
    "posts",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("title", String(200)),
    Column("body", String(2000)),
    Column("status", String(20)),
    Column("secret_note", String(200), nullable=True),
    Column("date_created", String(40)),
)

users = Table(
    "users",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("role", String(36), nullable=True),
    Column("status", String(20), nullable=True),
)

POST_ROWS = [
    {
        "id": 1,
        "title": "Hello",
        "body": "First post",
        "status": "published",
        "secret_note": "launch codes",
        "date_created": "2024-01-01",
    },
    {
        "id": 2,
        "title": "Draft",
        "body": "Work in progress",
        "status": "draft",
        "secret_note": None,
        "date_created": "2024-02-01",
    },
    {
        "id": 3,
        "title": "Later",
        "body": "Another one",
        "status": "published",
        "secret_note": "internal",
        "date_created": "2024-03-01",
    },
]

USER_ROWS = [
    {"id": "u1", "role": "editor", "status": "active"},
    {"id": "u2", "role": None, "status": "active"},
    {"id": "u3", "role": "editor", "status": "suspended"},
    {"id": "u4", "role": "viewer", "status": None},
]

EDITOR_FIELDS = ["id", "title", "body", "status", "date_created"]


def build_permissions() -> FieldPermissions:
    permissions = FieldPermissions()
    permissions.grant("editor", "posts", EDITOR_FIELDS)
    permissions.grant("viewer", "posts", ["id", "title", "status"])
    permissions.grant(PUBLIC_ROLE, "posts", ["id", "title"])
    return permissions


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_config() -> Generator[None, None, None]:
    """Keep the global config from leaking between tests."""
    _reset_global_config()
    yield
    _reset_global_config()


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    """In-memory SQLite engine with seeded posts and users, shareable across threads."""
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    metadata.create_all(eng)
    with eng.begin() as conn:
        conn.execute(posts.insert(), POST_ROWS)
        conn.execute(users.insert(), USER_ROWS)
    yield eng
    eng.dispose()


@pytest.fixture()
def permissions() -> FieldPermissions:
    return build_permissions()


@pytest.fixture()
def items_executor(engine: Engine, permissions: FieldPermissions) -> SqlItemsExecutor:
    return SqlItemsExecutor(engine, metadata, permissions)


@pytest.fixture()
def directory(engine: Engine) -> SqlUserDirectory:
    return SqlUserDirectory(engine, users)


@pytest.fixture()
def admin() -> Accountability:
    return make_admin()

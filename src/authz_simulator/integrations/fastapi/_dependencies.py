"""FastAPI dependencies for the simulation endpoints."""

from __future__ import annotations

import uuid

from fastapi import Request

from authz_simulator._accountability import Accountability
from authz_simulator._types import QueryExecutor, UserDirectory

__all__ = ["get_accountability", "get_directory", "get_executor", "get_request_id"]


# ---------------------------------------------------------------------------
# Sentinel dependency functions for DI-based configuration
# ---------------------------------------------------------------------------


def get_accountability(request: Request) -> Accountability:
    """Sentinel dependency — override via ``app.dependency_overrides[get_accountability]``.

    Must return the caller's own accountability as established by the
    host application's authentication layer.

    Example::

        from authz_simulator.integrations.fastapi import get_accountability

        app.dependency_overrides[get_accountability] = my_current_accountability
    """
    raise NotImplementedError(
        "Override get_accountability via app.dependency_overrides[get_accountability]."
    )


def get_executor(request: Request) -> QueryExecutor:
    """Sentinel dependency — override via ``app.dependency_overrides[get_executor]``.

    Example::

        app.dependency_overrides[get_executor] = lambda: SqlItemsExecutor(engine, md, perms)
    """
    raise NotImplementedError("Override get_executor via app.dependency_overrides[get_executor].")


def get_directory(request: Request) -> UserDirectory | None:
    """Optional dependency providing the user directory.

    Returns ``None`` unless overridden, in which case ``mode="user"``
    requests must carry an explicit ``roleId``.
    """
    return None


def get_request_id(request: Request) -> str:
    """Return the ``X-Request-ID`` header, or a fresh id."""
    return request.headers.get("x-request-id") or uuid.uuid4().hex

"""FastAPI integration for authz-simulator."""

from __future__ import annotations

try:
    import fastapi as _fastapi_check  # noqa: F401  # pyright: ignore[reportUnusedImport]

    del _fastapi_check
except ImportError as exc:
    raise ImportError(
        "FastAPI integration requires fastapi. "
        "Install it with: pip install authz-simulator[fastapi]"
    ) from exc

from authz_simulator.integrations.fastapi._dependencies import (
    get_accountability,
    get_directory,
    get_executor,
    get_request_id,
)
from authz_simulator.integrations.fastapi._errors import install_error_handlers
from authz_simulator.integrations.fastapi._router import create_app, create_router

__all__ = [
    "create_app",
    "create_router",
    "get_accountability",
    "get_directory",
    "get_executor",
    "get_request_id",
    "install_error_handlers",
]

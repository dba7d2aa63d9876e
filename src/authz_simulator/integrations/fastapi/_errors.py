"""Exception handlers for FastAPI integration."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from authz_simulator.exceptions import InvalidRequestError, SimulatorError

__all__ = ["install_error_handlers", "status_code_of"]


def status_code_of(exc: BaseException) -> int:
    """HTTP status carried by an executor error, defaulting to 500.

    Reads ``status_code`` and then ``status``; only integers in the
    400-599 range are honored.
    """
    for attr in ("status_code", "status"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and not isinstance(value, bool) and 400 <= value <= 599:
            return value
    return 500


def install_error_handlers(app: FastAPI) -> None:
    """Install exception handlers for authz-simulator errors on a FastAPI app.

    Every ``SimulatorError`` becomes a JSON response with its
    ``status_code``:

    - ``SimulationForbidden`` -> 403 Forbidden
    - ``InvalidRequestError`` (and ``UnresolvedIdentity``) -> 400 Bad Request
    - ``DelegateError`` -> the executor's own status (default 500)

    Args:
        app: The FastAPI application instance.

    Example::

        from fastapi import FastAPI
        from authz_simulator.integrations.fastapi import install_error_handlers

        app = FastAPI()
        install_error_handlers(app)
    """

    @app.exception_handler(SimulatorError)
    async def simulator_error_handler(  # pyright: ignore[reportUnusedFunction]
        request: object, exc: SimulatorError
    ) -> JSONResponse:
        content: dict[str, Any] = {"detail": str(exc)}
        if isinstance(exc, InvalidRequestError) and exc.field is not None:
            content["field"] = exc.field
        return JSONResponse(status_code=status_code_of(exc), content=content)

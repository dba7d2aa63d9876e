"""Router exposing the simulator over HTTP."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, Request

from authz_simulator._accountability import Accountability
from authz_simulator._types import QueryExecutor, UserDirectory
from authz_simulator.config._config import SimulatorConfig, get_global_config
from authz_simulator.exceptions import DelegateError, InvalidRequestError, SimulatorError
from authz_simulator.integrations.fastapi._dependencies import (
    get_accountability,
    get_directory,
    get_executor,
    get_request_id,
)
from authz_simulator.integrations.fastapi._errors import install_error_handlers, status_code_of
from authz_simulator.recovery._extract import reason_of
from authz_simulator.simulation._orchestrator import Simulator, ensure_administrator

__all__ = ["create_app", "create_router"]


async def _read_body(request: Request) -> object:
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidRequestError(message="Request body is not valid JSON.") from exc


def create_router(*, config: SimulatorConfig | None = None) -> APIRouter:
    """Build the simulator router.

    Routes:

    - ``GET /`` -> ``{"name": ..., "status": "ok"}``
    - ``POST /simulate`` -> the simulation result (see ``SimulationResult.to_dict``)

    The caller's accountability, the executor and the user directory
    come from the dependencies in
    :mod:`authz_simulator.integrations.fastapi._dependencies`.

    Args:
        config: Optional config. Defaults to the global config at request time.

    Example::

        app = FastAPI()
        app.include_router(create_router(), prefix="/permission-simulator")
        install_error_handlers(app)
        app.dependency_overrides[get_accountability] = current_accountability
        app.dependency_overrides[get_executor] = lambda: executor
    """
    router = APIRouter()

    def _config() -> SimulatorConfig:
        return config if config is not None else get_global_config()

    @router.get("/")
    async def health() -> dict[str, str]:  # pyright: ignore[reportUnusedFunction]
        return {"name": _config().name, "status": "ok"}

    @router.post("/simulate")
    async def simulate_endpoint(  # pyright: ignore[reportUnusedFunction]
        request: Request,
        caller: Accountability = Depends(get_accountability),
        executor: QueryExecutor = Depends(get_executor),
        directory: UserDirectory | None = Depends(get_directory),
        request_id: str = Depends(get_request_id),
    ) -> dict[str, Any]:
        ensure_administrator(caller, request_id=request_id)
        body = await _read_body(request)

        simulator = Simulator(executor, directory=directory, config=_config())
        try:
            result = await simulator.simulate_payload(body, caller, request_id=request_id)
        except SimulatorError:
            raise
        except Exception as exc:
            raise DelegateError(reason_of(exc), status_code=status_code_of(exc)) from exc
        return result.to_dict()

    return router


def create_app(
    *,
    executor: QueryExecutor,
    accountability_provider: Callable[..., Accountability],
    directory: UserDirectory | None = None,
    config: SimulatorConfig | None = None,
    prefix: str = "",
) -> FastAPI:
    """Create a standalone FastAPI app serving the simulator.

    Args:
        executor: The query executor to simulate against.
        accountability_provider: Dependency returning the caller's
            accountability (may itself declare FastAPI parameters).
        directory: Optional user directory for ``mode="user"``.
        config: Optional config. Defaults to the global config.
        prefix: Path prefix for the routes.

    Example::

        app = create_app(
            executor=SqlItemsExecutor(engine, metadata, permissions),
            directory=SqlUserDirectory(engine, users),
            accountability_provider=current_accountability,
        )
    """
    app = FastAPI(title=(config or get_global_config()).name)
    app.include_router(create_router(config=config), prefix=prefix)
    install_error_handlers(app)
    app.dependency_overrides[get_accountability] = accountability_provider
    app.dependency_overrides[get_executor] = lambda: executor
    app.dependency_overrides[get_directory] = lambda: directory
    return app

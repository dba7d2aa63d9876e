"""Simulator — runs a query as another identity and compares it with the caller's view."""

from __future__ import annotations

import time
from collections.abc import Sequence

from authz_simulator._accountability import Accountability, build_accountability
from authz_simulator._audit import (
    log_attempt_failed,
    log_forbidden_caller,
    log_forbidden_fields,
    log_simulation_done,
    log_simulation_error,
    log_simulation_start,
)
from authz_simulator._hints import Hint, diff_rows, first_row
from authz_simulator._types import QueryExecutor, Row, UserDirectory
from authz_simulator.config._config import SimulatorConfig, get_global_config
from authz_simulator.exceptions import (
    InvalidRequestError,
    SimulationForbidden,
    SimulatorError,
    UnresolvedIdentity,
)
from authz_simulator.query._model import Query
from authz_simulator.recovery._extract import forbidden_fields_from_error, reason_of
from authz_simulator.recovery._strip import StripResult, strip_forbidden_fields
from authz_simulator.simulation._models import SimulationRequest, SimulationResult

__all__ = ["Simulator", "ensure_administrator", "simulate"]

ROLE_ONLY_WARNING = (
    "Role-only simulation can't evaluate $CURRENT_USER-dependent permission rules. "
    "Prefer mode 'user' for accurate results."
)
NO_ROLE_WARNING = "User has no role assigned; simulation may deny most access."
WILDCARD_REMOVED_WARNING = (
    "Simulated context cannot access one or more fields while query.fields contains '*'. "
    "Retrying simulation with '*' removed (keeping explicit fields only)."
)


def _status_warning(status: str) -> str:
    return f"User status is '{status}'. In real requests, non-active users cannot authenticate."


def _removed_fields_warning(fields: Sequence[str]) -> str:
    quoted = ", ".join(f"'{f}'" for f in fields)
    return (
        f"Simulated context cannot access field(s) {quoted}. "
        "Retrying simulation with those fields removed from query.fields."
    )


def ensure_administrator(caller: Accountability, *, request_id: str | None = None) -> None:
    """Raise ``SimulationForbidden`` unless ``caller`` is an administrator."""
    if not caller.admin:
        log_forbidden_caller(request_id=request_id, caller=caller)
        raise SimulationForbidden()


class Simulator:
    """Runs permission simulations against a query executor.

    Each call to :meth:`simulate` is self-contained: warnings and the
    retry flag live in local state, and executor calls are made one at
    a time (simulated attempt, at most one retry, then the baseline).

    Args:
        executor: Reads items under a given accountability.
        directory: Resolves a user's role and status. Only needed for
            ``mode="user"`` requests without an explicit ``roleId``.
        config: Optional config. Defaults to the global config.

    Example::

        simulator = Simulator(executor, directory=directory)
        result = await simulator.simulate(
            SimulationRequest(mode="public", collection="posts"),
            caller=admin_accountability,
        )
        print(result.hints)
    """

    def __init__(
        self,
        executor: QueryExecutor,
        *,
        directory: UserDirectory | None = None,
        config: SimulatorConfig | None = None,
    ) -> None:
        self._executor = executor
        self._directory = directory
        self._config = config

    @property
    def config(self) -> SimulatorConfig:
        return self._config if self._config is not None else get_global_config()

    async def simulate_payload(
        self,
        body: object,
        caller: Accountability,
        *,
        request_id: str | None = None,
    ) -> SimulationResult:
        """Check the caller, validate a raw JSON body, then simulate.

        The administrator check runs before the body is looked at.

        Raises:
            SimulationForbidden: If ``caller`` is not an administrator.
            InvalidRequestError: If the body fails validation.
        """
        ensure_administrator(caller, request_id=request_id)
        request = SimulationRequest.from_payload(
            body, include_baseline_default=self.config.include_baseline_default
        )
        return await self.simulate(request, caller, request_id=request_id)

    async def simulate(
        self,
        request: SimulationRequest,
        caller: Accountability,
        *,
        request_id: str | None = None,
    ) -> SimulationResult:
        """Run ``request`` as the simulated identity and diff against ``caller``.

        Args:
            request: A validated simulation request.
            caller: The administrator's own accountability.
            request_id: Optional id used to correlate log lines.

        Returns:
            A ``SimulationResult``.

        Raises:
            SimulationForbidden: If ``caller`` is not an administrator.
            UnresolvedIdentity: If the target user does not exist.
            Exception: Any executor failure that could not be recovered,
                unchanged.
        """
        ensure_administrator(caller, request_id=request_id)
        started = time.perf_counter()
        log_simulation_start(
            request_id=request_id,
            mode=request.mode,
            collection=request.collection,
            query=request.query,
            include_baseline=request.include_baseline,
            user_id=request.user_id if request.mode == "user" else None,
            role_id=request.role_id if request.mode in ("user", "role") else None,
            max_length=self.config.log_payload_max_length,
        )
        try:
            result = await self._run(request, caller, request_id=request_id, started=started)
        except Exception as exc:
            log_simulation_error(
                request_id=request_id,
                duration_ms=(time.perf_counter() - started) * 1000,
                exc=exc,
            )
            raise

        log_simulation_done(
            request_id=request_id,
            duration_ms=result.duration_ms,
            simulated_count=len(result.simulated_items),
            baseline_count=(
                len(result.baseline_items) if result.baseline_items is not None else None
            ),
            hints_count=len(result.hints),
            warnings_count=len(result.warnings),
        )
        return result

    async def _run(
        self,
        request: SimulationRequest,
        caller: Accountability,
        *,
        request_id: str | None,
        started: float,
    ) -> SimulationResult:
        warnings: list[str] = []
        accountability = await self._build_accountability(request, caller, warnings)

        simulated_items, strip = await self._read_simulated(
            request, accountability, warnings, request_id=request_id
        )
        effective_query = strip.query if strip is not None else request.query

        baseline_items: Sequence[Row] | None = None
        hints: list[Hint] = []
        if request.include_baseline:
            baseline_items = await self._executor.execute(
                request.collection, request.query, caller
            )
            hints = diff_rows(first_row(baseline_items), first_row(simulated_items))

        return SimulationResult(
            mode=request.mode,
            collection=request.collection,
            effective_query=effective_query,
            warnings=tuple(warnings),
            simulated_items=simulated_items,
            baseline_items=baseline_items,
            hints=tuple(hints),
            retried=strip is not None,
            removed_fields=strip.removed_fields if strip is not None else (),
            removed_wildcard=strip.removed_wildcard if strip is not None else False,
            duration_ms=(time.perf_counter() - started) * 1000,
        )

    async def _build_accountability(
        self,
        request: SimulationRequest,
        caller: Accountability,
        warnings: list[str],
    ) -> Accountability:
        if request.mode == "requester":
            return caller

        if request.mode == "public":
            return build_accountability(caller, user=None, role=None, admin=False, app=True)

        if request.mode == "role":
            warnings.append(ROLE_ONLY_WARNING)
            return build_accountability(
                caller, user=None, role=request.role_id, admin=False, app=True
            )

        # mode == "user"
        if request.user_id is None:
            raise InvalidRequestError(field="userId", message="userId is required for mode 'user'")
        role_id = request.role_id
        status: str | None = None
        # An explicit roleId is trusted without checking the user's membership.
        if role_id is None:
            if self._directory is None:
                raise SimulatorError(
                    "A user directory is required to resolve the role for mode 'user'."
                )
            record = await self._directory.lookup(request.user_id)
            if record is None:
                raise UnresolvedIdentity(user_id=request.user_id)
            role_id = record.role
            status = record.status

        if not role_id:
            warnings.append(NO_ROLE_WARNING)
        if status and status != "active":
            warnings.append(_status_warning(status))

        return build_accountability(
            caller, user=request.user_id, role=role_id, admin=False, app=True
        )

    async def _read_simulated(
        self,
        request: SimulationRequest,
        accountability: Accountability,
        warnings: list[str],
        *,
        request_id: str | None,
    ) -> tuple[Sequence[Row], StripResult | None]:
        """Read as the simulated identity, retrying once without forbidden fields.

        Returns the items and, when a retry happened, the strip result
        that produced the narrowed query.
        """
        try:
            items = await self._executor.execute(
                request.collection, request.query, accountability
            )
        except Exception as exc:
            log_attempt_failed(
                request_id=request_id, collection=request.collection, reason=reason_of(exc)
            )
            forbidden = forbidden_fields_from_error(exc)
            if not forbidden:
                raise
            strip = strip_forbidden_fields(request.query, forbidden)
            log_forbidden_fields(
                request_id=request_id,
                forbidden=forbidden,
                removed=strip.removed_fields,
                removed_wildcard=strip.removed_wildcard,
            )
            if not strip.changed:
                raise

            if strip.removed_wildcard:
                warnings.append(WILDCARD_REMOVED_WARNING)
            if strip.removed_fields:
                warnings.append(_removed_fields_warning(strip.removed_fields))

            items = await self._executor.execute(request.collection, strip.query, accountability)
            return items, strip

        return items, None


async def simulate(
    request: SimulationRequest,
    caller: Accountability,
    *,
    executor: QueryExecutor,
    directory: UserDirectory | None = None,
    config: SimulatorConfig | None = None,
    request_id: str | None = None,
) -> SimulationResult:
    """Run one simulation without keeping a ``Simulator`` around.

    Example::

        result = await simulate(
            SimulationRequest(mode="role", collection="posts", role_id="editor"),
            caller=admin,
            executor=executor,
        )
    """
    simulator = Simulator(executor, directory=directory, config=config)
    return await simulator.simulate(request, caller, request_id=request_id)

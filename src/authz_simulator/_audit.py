"""Audit logging for simulation requests."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence

from authz_simulator._accountability import Accountability
from authz_simulator.query._model import Query

__all__ = [
    "log_attempt_failed",
    "log_forbidden_caller",
    "log_forbidden_fields",
    "log_simulation_done",
    "log_simulation_error",
    "log_simulation_start",
    "safe_json",
]

logger = logging.getLogger("authz_simulator")


def safe_json(value: object, max_length: int = 4000) -> str:
    """Serialize ``value`` for a log line, truncated to ``max_length``.

    Example::

        safe_json({"fields": ["*"]})  # '{"fields": ["*"]}'
    """
    try:
        text = json.dumps(value, default=str)
    except (TypeError, ValueError):
        return "[unserializable]"
    if len(text) > max_length:
        return text[:max_length] + "…"
    return text


def log_forbidden_caller(*, request_id: str | None, caller: Accountability) -> None:
    """Log a simulation attempt by a non-administrator."""
    logger.warning(
        "Simulation forbidden (admin required) request=%s user=%s",
        request_id,
        caller.user,
    )


def log_simulation_start(
    *,
    request_id: str | None,
    mode: str,
    collection: str,
    query: Query,
    include_baseline: bool,
    user_id: str | None = None,
    role_id: str | None = None,
    max_length: int = 4000,
) -> None:
    """Log the start of a simulation.

    Logging levels:
    - INFO: Summary (mode, collection, target ids)
    - DEBUG: The parsed query
    """
    logger.info(
        "Simulation start request=%s mode=%s collection=%s baseline=%s user=%s role=%s",
        request_id,
        mode,
        collection,
        include_baseline,
        user_id,
        role_id,
    )
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "Simulation query request=%s: %s",
            request_id,
            safe_json(query.to_dict(), max_length),
        )


def log_attempt_failed(*, request_id: str | None, collection: str, reason: str) -> None:
    """Log a failed primary attempt before recovery is tried."""
    logger.warning(
        "Simulated read of %s failed, attempting single retry without forbidden fields "
        "request=%s: %s",
        collection,
        request_id,
        reason,
    )


def log_forbidden_fields(
    *,
    request_id: str | None,
    forbidden: Sequence[str],
    removed: Sequence[str],
    removed_wildcard: bool,
) -> None:
    """Log the fields named by a failure and what was stripped."""
    logger.warning(
        "Forbidden fields request=%s named=%s removed=%s wildcard_removed=%s",
        request_id,
        list(forbidden),
        list(removed),
        removed_wildcard,
    )


def log_simulation_done(
    *,
    request_id: str | None,
    duration_ms: float,
    simulated_count: int,
    baseline_count: int | None,
    hints_count: int,
    warnings_count: int,
) -> None:
    """Log a completed simulation."""
    logger.info(
        "Simulation done request=%s duration_ms=%.1f simulated=%d baseline=%s "
        "hints=%d warnings=%d",
        request_id,
        duration_ms,
        simulated_count,
        baseline_count,
        hints_count,
        warnings_count,
    )


def log_simulation_error(
    *,
    request_id: str | None,
    duration_ms: float,
    exc: BaseException,
) -> None:
    """Log a simulation that ended in an error."""
    logger.error(
        "Simulation error request=%s duration_ms=%.1f %s: %s",
        request_id,
        duration_ms,
        type(exc).__name__,
        exc,
        exc_info=logger.isEnabledFor(logging.DEBUG),
    )

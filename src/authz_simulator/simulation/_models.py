"""Request and result models for permission simulation."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, cast, get_args

from authz_simulator._hints import Hint
from authz_simulator._types import Row, SimulationMode
from authz_simulator.config._config import get_global_config
from authz_simulator.exceptions import InvalidRequestError
from authz_simulator.query._model import Query

__all__ = ["SIMULATION_MODES", "SimulationRequest", "SimulationResult"]

SIMULATION_MODES: frozenset[str] = frozenset(get_args(SimulationMode))


def _plain_rows(items: Sequence[Any]) -> list[Any]:
    return [dict(row) if isinstance(row, Mapping) else row for row in items]


def _optional_id(body: Mapping[str, Any], key: str) -> str | None:
    value = body.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise InvalidRequestError(field=key, message=f"{key} must be a string")
    return value


@dataclass(frozen=True, slots=True)
class SimulationRequest:
    """Input to one simulation run.

    Attributes:
        mode: Which identity to simulate.
        collection: The collection to query.
        query: The query to run.
        include_baseline: Whether to also run the query as the caller and
            compare results.
        user_id: Target user (required for ``mode="user"``).
        role_id: Target role (required for ``mode="role"``; optional
            override for ``mode="user"``).

    Example::

        request = SimulationRequest(mode="public", collection="posts")
    """

    mode: SimulationMode
    collection: str
    query: Query = field(default_factory=Query)
    include_baseline: bool = True
    user_id: str | None = None
    role_id: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.collection, str) or not self.collection:
            raise InvalidRequestError(
                field="collection", message="collection must be a non-empty string"
            )
        if self.mode not in SIMULATION_MODES:
            raise InvalidRequestError(
                field="mode",
                message=f"mode must be one of {sorted(SIMULATION_MODES)!r}, got {self.mode!r}",
            )
        if self.mode == "user" and not self.user_id:
            raise InvalidRequestError(field="userId", message="userId is required for mode 'user'")
        if self.mode == "role" and not self.role_id:
            raise InvalidRequestError(field="roleId", message="roleId is required for mode 'role'")

    @classmethod
    def from_payload(
        cls,
        body: object,
        *,
        include_baseline_default: bool | None = None,
    ) -> SimulationRequest:
        """Validate a decoded JSON request body.

        ``mode`` defaults to ``"requester"``; ``includeRequester`` defaults
        to the configured ``include_baseline_default``.

        Raises:
            InvalidRequestError: On any missing or malformed key.
            InvalidQueryError: If ``query`` is malformed.
        """
        if body is None:
            body = {}
        if not isinstance(body, Mapping):
            raise InvalidRequestError(message="Request body must be a JSON object.")

        if include_baseline_default is None:
            include_baseline_default = get_global_config().include_baseline_default

        mode = body.get("mode")
        if mode is None:
            mode = "requester"
        elif not isinstance(mode, str):
            raise InvalidRequestError(field="mode", message="mode must be a string")

        include = body.get("includeRequester")
        if include is None:
            include = include_baseline_default
        elif not isinstance(include, bool):
            raise InvalidRequestError(
                field="includeRequester", message="includeRequester must be a boolean"
            )

        return cls(
            mode=cast(SimulationMode, mode),
            collection=body.get("collection"),  # type: ignore[arg-type]
            query=Query.parse(body.get("query")),
            include_baseline=include,
            user_id=_optional_id(body, "userId"),
            role_id=_optional_id(body, "roleId"),
        )


@dataclass(frozen=True, slots=True)
class SimulationResult:
    """Outcome of a successful simulation.

    Attributes:
        mode: The simulated mode.
        collection: The queried collection.
        effective_query: The query used by the successful simulated attempt.
        warnings: Accuracy caveats and recovery notes, in order.
        simulated_items: Rows returned for the simulated identity.
        baseline_items: Rows returned for the caller, or ``None`` when the
            baseline was not requested.
        hints: Field-level differences between the first rows.
        retried: Whether the simulated query was retried with fewer fields.
        removed_fields: Fields dropped before the retry.
        removed_wildcard: Whether ``"*"`` was dropped before the retry.
        duration_ms: Wall time of the whole simulation.
    """

    mode: SimulationMode
    collection: str
    effective_query: Query
    warnings: tuple[str, ...]
    simulated_items: Sequence[Row]
    baseline_items: Sequence[Row] | None
    hints: tuple[Hint, ...]
    retried: bool = False
    removed_fields: tuple[str, ...] = ()
    removed_wildcard: bool = False
    duration_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON response body."""
        out: dict[str, Any] = {
            "mode": self.mode,
            "collection": self.collection,
            "query": self.effective_query.to_dict(),
            "warnings": list(self.warnings),
            "simulated": {"items": _plain_rows(self.simulated_items)},
        }
        if self.baseline_items is not None:
            out["requester"] = {"items": _plain_rows(self.baseline_items)}
        out["hints"] = [h.to_dict() for h in self.hints]
        return out

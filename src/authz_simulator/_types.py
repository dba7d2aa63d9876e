"""Shared protocols and type aliases for authz-simulator."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal, Protocol, runtime_checkable

if TYPE_CHECKING:
    from authz_simulator._accountability import Accountability
    from authz_simulator.query._model import Query

__all__ = [
    "HintKind",
    "QueryExecutor",
    "Row",
    "SimulationMode",
    "UserDirectory",
    "UserRecord",
    "WILDCARD",
]

# Valid values for SimulationRequest.mode.
SimulationMode = Literal["requester", "user", "role", "public"]

# Valid values for Hint.kind.
HintKind = Literal["missing", "null"]

# One item returned by the query executor.
Row = Mapping[str, Any]

# Field token that requests every readable field.
WILDCARD = "*"


@dataclass(frozen=True, slots=True)
class UserRecord:
    """What the user directory knows about a user.

    Attributes:
        role: The user's role id, or ``None`` when unassigned.
        status: Account status (``"active"``, ``"suspended"``, ...), if known.
    """

    role: str | None = None
    status: str | None = None


@runtime_checkable
class QueryExecutor(Protocol):
    """Structural type for the service that evaluates permissions and reads items.

    Implementations raise :class:`~authz_simulator.exceptions.FieldAccessDenied`
    (or any exception whose reason names the denied fields) when the
    accountability cannot read some of the requested fields.

    Example::

        class MyExecutor:
            async def execute(self, collection, query, accountability):
                return await items_service(collection, accountability).read(query)
    """

    async def execute(
        self,
        collection: str,
        query: Query,
        accountability: Accountability,
    ) -> Sequence[Row]: ...


@runtime_checkable
class UserDirectory(Protocol):
    """Structural type for resolving a user's role and account status."""

    async def lookup(self, user_id: str) -> UserRecord | None: ...

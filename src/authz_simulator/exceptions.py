"""Exception hierarchy for authz-simulator."""

from __future__ import annotations

from collections.abc import Iterable

__all__ = [
    "AuthorizationDenied",
    "CollectionAccessDenied",
    "DelegateError",
    "FieldAccessDenied",
    "InvalidQueryError",
    "InvalidRequestError",
    "SimulationForbidden",
    "SimulatorError",
    "UnresolvedIdentity",
]


class SimulatorError(Exception):
    """Base exception for all authz-simulator errors.

    Attributes:
        status_code: HTTP status used when the error reaches the API layer.
    """

    status_code: int = 500


class SimulationForbidden(SimulatorError):  # noqa: N818
    """The caller is not allowed to run simulations.

    Raised before any input validation when the caller's accountability
    is not administrator-privileged.
    """

    status_code = 403

    def __init__(self, message: str = "Admin access required.") -> None:
        super().__init__(message)


class InvalidRequestError(SimulatorError):
    """The simulation request failed validation.

    Attributes:
        field: The request key that was rejected, if known.

    Example::

        raise InvalidRequestError(field="roleId", message="roleId is required for mode 'role'")
    """

    status_code = 400

    def __init__(self, *, field: str | None = None, message: str | None = None) -> None:
        self.field = field
        if message is None:
            message = f"Invalid request: {field!r}" if field else "Invalid request."
        super().__init__(message)


class InvalidQueryError(InvalidRequestError):
    """The query is malformed (bad JSON, wrong shape, unknown column or operator)."""

    def __init__(self, message: str = "Invalid query.") -> None:
        super().__init__(field="query", message=message)


class UnresolvedIdentity(InvalidRequestError):  # noqa: N818
    """The user referenced by a ``user`` mode simulation does not exist.

    Attributes:
        user_id: The id that could not be resolved.
    """

    def __init__(self, *, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(field="userId", message=f"User {user_id!r} not found.")


class DelegateError(SimulatorError):
    """Failure reported by the query executor.

    Attributes:
        reason: Human-readable reason, as reported by the executor.
        status_code: HTTP status the failure maps to.
    """

    def __init__(self, reason: str, *, status_code: int = 500) -> None:
        self.reason = reason
        self.status_code = status_code
        super().__init__(reason)


class AuthorizationDenied(DelegateError):  # noqa: N818
    """The accountability lacks collection- or field-level read access."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason, status_code=403)


class CollectionAccessDenied(AuthorizationDenied):
    """No read access to the collection at all.

    Attributes:
        collection: The collection that was denied.
    """

    def __init__(self, *, collection: str, message: str | None = None) -> None:
        self.collection = collection
        if message is None:
            message = (
                f'You don\'t have permission to access collection "{collection}" '
                "or it does not exist."
            )
        super().__init__(message)


class FieldAccessDenied(AuthorizationDenied):
    """Read access denied for specific fields of a collection.

    Carries the denied field names as data so recovery does not depend
    on parsing the message.

    Attributes:
        collection: The collection being read.
        fields: The denied field names, in request order.

    Example::

        try:
            await executor.execute("posts", query, accountability)
        except FieldAccessDenied as exc:
            print(exc.fields)  # ("secret_note",)
    """

    def __init__(
        self,
        *,
        collection: str,
        fields: Iterable[str],
        message: str | None = None,
    ) -> None:
        self.collection = collection
        self.fields = tuple(dict.fromkeys(fields))
        if message is None:
            quoted = ", ".join(f'"{f}"' for f in self.fields)
            noun = "field" if len(self.fields) == 1 else "fields"
            message = (
                f"You don't have permission to access {noun} {quoted} "
                f'in collection "{collection}" or it does not exist.'
            )
        super().__init__(message)

"""Accountability — the security identity a query is executed as."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

__all__ = ["Accountability", "build_accountability"]


class _Unset:
    """Marker for keyword arguments that were not passed."""

    def __repr__(self) -> str:
        return "<unset>"


_UNSET: Any = _Unset()


@dataclass(frozen=True, slots=True)
class Accountability:
    """Immutable identity context: user, role(s), admin flag, app-access flag.

    Attributes:
        user: User id, or ``None`` for anonymous/role-only contexts.
        role: Primary role id, or ``None``.
        admin: Whether the identity bypasses permission checks.
        app: Whether the identity has app (data studio) access.
        roles: Role ids the identity belongs to.

    Example::

        caller = Accountability(user="u-admin", role="r-admin", admin=True, app=True)
        assert caller.is_administrator
    """

    user: str | None = None
    role: str | None = None
    admin: bool = False
    app: bool = False
    roles: tuple[str, ...] = ()

    @property
    def is_administrator(self) -> bool:
        return self.admin

    @property
    def role_ids(self) -> tuple[str, ...]:
        return self.roles

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dictionary."""
        return {
            "user": self.user,
            "role": self.role,
            "admin": self.admin,
            "app": self.app,
            "roles": list(self.roles),
        }


def build_accountability(
    base: Accountability,
    *,
    user: str | None = _UNSET,
    role: str | None = _UNSET,
    admin: bool | None = _UNSET,
    app: bool | None = _UNSET,
) -> Accountability:
    """Derive a new accountability from ``base`` with the given overrides.

    Only the keywords actually passed are applied; the rest keep the
    base value. ``admin=None`` means ``False`` and ``app=None`` means
    ``True``. ``roles`` is recomputed: ``(role,)`` when the resulting
    role is set, otherwise whatever ``base`` carried.

    Args:
        base: The accountability to start from. Never modified.
        user: Override for the user id.
        role: Override for the role id.
        admin: Override for the admin flag.
        app: Override for the app-access flag.

    Returns:
        A new ``Accountability``.

    Example::

        public = build_accountability(caller, user=None, role=None, admin=False, app=True)
        assert public.user is None and not public.admin
    """
    changes: dict[str, Any] = {}
    if user is not _UNSET:
        changes["user"] = user
    if role is not _UNSET:
        changes["role"] = role
    if admin is not _UNSET:
        changes["admin"] = bool(admin) if admin is not None else False
    if app is not _UNSET:
        changes["app"] = bool(app) if app is not None else True

    next_role = changes.get("role", base.role)
    if next_role:
        changes["roles"] = (next_role,)

    return replace(base, **changes)

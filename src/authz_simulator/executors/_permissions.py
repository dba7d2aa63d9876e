"""FieldPermissions — per-role read permissions on collections and fields."""

from __future__ import annotations

from collections.abc import Iterable

from authz_simulator._types import WILDCARD

__all__ = ["PUBLIC_ROLE", "FieldPermissions"]

# Role key for requests without a role (anonymous callers).
PUBLIC_ROLE: None = None


class FieldPermissions:
    """Registry of which fields each role may read in each collection.

    Grants are additive: granting the same (role, collection) twice
    unions the field sets. ``"*"`` grants every field.

    Example::

        permissions = FieldPermissions()
        permissions.grant("editor", "posts", ["id", "title", "body"])
        permissions.grant(PUBLIC_ROLE, "posts", ["id", "title"])
        permissions.allowed_fields("editor", "posts")  # frozenset({"id", "title", "body"})
    """

    def __init__(self) -> None:
        self._grants: dict[tuple[str | None, str], set[str]] = {}

    def grant(self, role: str | None, collection: str, fields: Iterable[str]) -> None:
        """Allow ``role`` to read ``fields`` of ``collection``.

        Args:
            role: Role id, or ``PUBLIC_ROLE`` for anonymous access.
            collection: Collection (table) name.
            fields: Field names; ``"*"`` grants all fields.
        """
        key = (role, collection)
        if key not in self._grants:
            self._grants[key] = set()
        self._grants[key].update(fields)

    def allowed_fields(self, role: str | None, collection: str) -> frozenset[str] | None:
        """Return the readable fields, or ``None`` without collection access.

        The result may contain ``"*"``; use :meth:`can_read` to test a
        single field.
        """
        fields = self._grants.get((role, collection))
        if fields is None:
            return None
        return frozenset(fields)

    def can_read(self, role: str | None, collection: str, field: str) -> bool:
        allowed = self.allowed_fields(role, collection)
        if allowed is None:
            return False
        return WILDCARD in allowed or field in allowed

    def has_collection(self, role: str | None, collection: str) -> bool:
        return (role, collection) in self._grants

    def clear(self) -> None:
        """Remove all grants. Intended for testing."""
        self._grants.clear()

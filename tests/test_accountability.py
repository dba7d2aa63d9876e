"""Tests for _accountability.py — Accountability and build_accountability."""

from __future__ import annotations

import dataclasses

import pytest

from authz_simulator._accountability import Accountability, build_accountability


@pytest.fixture()
def base() -> Accountability:
    return Accountability(
        user="admin-1", role="administrator", admin=True, app=True, roles=("administrator",)
    )


class TestAccountability:
    """Accountability is an immutable value type."""

    def test_defaults(self) -> None:
        acc = Accountability()
        assert acc.user is None
        assert acc.role is None
        assert acc.admin is False
        assert acc.app is False
        assert acc.roles == ()

    def test_frozen(self, base: Accountability) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            base.admin = False  # type: ignore[misc]

    def test_aliases(self, base: Accountability) -> None:
        assert base.is_administrator is True
        assert base.role_ids == ("administrator",)

    def test_to_dict(self, base: Accountability) -> None:
        assert base.to_dict() == {
            "user": "admin-1",
            "role": "administrator",
            "admin": True,
            "app": True,
            "roles": ["administrator"],
        }


class TestBuildAccountability:
    """build_accountability applies only the overrides that were passed."""

    def test_no_overrides_keeps_base(self, base: Accountability) -> None:
        assert build_accountability(base) == base

    def test_base_is_not_modified(self, base: Accountability) -> None:
        build_accountability(base, user=None, role=None, admin=False, app=True)
        assert base.user == "admin-1"
        assert base.admin is True

    def test_public_overrides(self, base: Accountability) -> None:
        public = build_accountability(base, user=None, role=None, admin=False, app=True)
        assert public.user is None
        assert public.role is None
        assert public.admin is False
        assert public.app is True

    def test_role_override_recomputes_roles(self, base: Accountability) -> None:
        acc = build_accountability(base, user=None, role="editor", admin=False, app=True)
        assert acc.role == "editor"
        assert acc.roles == ("editor",)

    def test_null_role_keeps_base_roles(self, base: Accountability) -> None:
        acc = build_accountability(base, role=None)
        assert acc.role is None
        assert acc.roles == ("administrator",)

    def test_null_role_with_no_base_roles_is_empty(self) -> None:
        acc = build_accountability(Accountability(user="x"), role=None)
        assert acc.roles == ()

    def test_absent_role_keeps_base_role_in_roles(self) -> None:
        base = Accountability(user="x", role="editor")
        acc = build_accountability(base, user="y")
        assert acc.role == "editor"
        assert acc.roles == ("editor",)

    def test_none_admin_means_false(self, base: Accountability) -> None:
        assert build_accountability(base, admin=None).admin is False

    def test_none_app_means_true(self) -> None:
        assert build_accountability(Accountability(app=False), app=None).app is True

    def test_absent_keys_preserved(self, base: Accountability) -> None:
        acc = build_accountability(base, user="u1")
        assert acc.user == "u1"
        assert acc.role == "administrator"
        assert acc.admin is True
        assert acc.app is True

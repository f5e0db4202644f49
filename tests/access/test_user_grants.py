from __future__ import annotations

import logging

import pytest

from src.camping_gate.camping_gate.access.grants import UserGrants
from src.camping_gate.camping_gate.core.enums import Permission
from src.camping_gate.camping_gate.core.exceptions import AuthorizationError
from src.camping_gate.camping_gate.users.model import RoleAssignment


def test_scoped_role_limits_campings():
    grants = UserGrants.from_assignments(
        7, [RoleAssignment("camping", ("create:visitas",), camping_id=1), RoleAssignment("camping", (), camping_id=3)]
    )

    assert grants.camping_ids == frozenset({1, 3})
    assert grants.can_access_camping(1)
    assert grants.can_access_camping(3)
    assert not grants.can_access_camping(2)
    assert not grants.can_access_camping(None)


def test_unscoped_role_reaches_every_camping():
    grants = UserGrants.from_assignments(7, [RoleAssignment("camping", ("sync:visitas",))])

    assert grants.has_unscoped_role
    assert grants.can_access_camping(42)


def test_admin_and_wildcard():
    grants = UserGrants.from_assignments(1, [RoleAssignment("admin", ("all",), camping_id=5)])

    assert grants.is_admin
    assert grants.is_wildcard
    assert grants.has(Permission.CLOSE_SHIFT)
    assert grants.can_access_camping(99)


def test_inactive_assignments_are_ignored():
    grants = UserGrants.from_assignments(7, [RoleAssignment("admin", ("all",), is_active=False)])

    assert not grants.is_admin
    assert not grants.has(Permission.READ_VISITS)
    assert not grants.can_access_camping(1)


def test_unknown_permission_is_skipped_with_warning(caplog):
    with caplog.at_level(logging.WARNING):
        grants = UserGrants.from_assignments(7, [RoleAssignment("camping", ("create:visitas", "fly:drones"), camping_id=1)])

    assert grants.permissions == frozenset({Permission.CREATE_VISITS})
    assert "fly:drones" in caplog.text


def test_has_is_any_of():
    grants = UserGrants.from_assignments(7, [RoleAssignment("camping", ("read:caja",), camping_id=1)])

    assert grants.has(Permission.OPEN_SHIFT, Permission.READ_SHIFTS)
    assert not grants.has(Permission.OPEN_SHIFT)


def test_policy_requires_permission(access):
    assert access.require_permission(2, Permission.SYNC_VISITS).has(Permission.SYNC_VISITS)
    with pytest.raises(AuthorizationError):
        access.require_permission(5, Permission.CREATE_VISITS)

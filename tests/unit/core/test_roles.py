"""
Role and capability tests.
"""

import pytest
from fleetwatch.core.errors import AuthorizationError, ForbiddenError
from fleetwatch.core.roles import (
    Capability, Role, has_capability, parse_roles, require_capability, roles_with
)


@pytest.mark.parametrize("value,expected", [
    ("admin", Role.ADMIN),
    (" Dispatcher ", Role.DISPATCHER),
    ("TECHNICIAN", Role.TECHNICIAN),
    ("owner", None),
    ("", None),
    (None, None),
])
def test_parse(value, expected):
    assert Role.parse(value) is expected


def test_technician_may_log_maintenance():
    assert require_capability(Role.TECHNICIAN, Capability.LOG_MAINTENANCE) is Role.TECHNICIAN


@pytest.mark.parametrize("role", [Role.ADMIN, Role.DISPATCHER, Role.DRIVER, None])
def test_others_may_not_log_maintenance(role):
    with pytest.raises(ForbiddenError):
        require_capability(role, Capability.LOG_MAINTENANCE)


def test_forbidden_is_an_authorization_error():
    with pytest.raises(AuthorizationError, match="unknown"):
        require_capability(None, Capability.MANAGE_GEOFENCES)


def test_default_notify_roles():
    assert roles_with(Capability.RECEIVE_GEOFENCE_NOTIFICATIONS) == [Role.ADMIN, Role.DISPATCHER]


def test_only_admin_manages_geofences():
    assert [r for r in Role if has_capability(r, Capability.MANAGE_GEOFENCES)] == [Role.ADMIN]


def test_parse_roles_drops_unknown_and_duplicates():
    assert parse_roles(["admin", "nobody", "ADMIN", "dispatcher"]) == [Role.ADMIN, Role.DISPATCHER]

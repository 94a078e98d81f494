"""
Roles and capabilities for FleetWatch.

Roles form a closed enumeration; handlers ask for a capability
instead of comparing role strings.
"""

from enum import Enum
from typing import Optional
from .errors import ForbiddenError


class Role(str, Enum):
    ADMIN = "admin"
    DISPATCHER = "dispatcher"
    TECHNICIAN = "technician"
    DRIVER = "driver"

    @classmethod
    def parse(cls, value) -> Optional["Role"]:
        """Unknown or empty values map to None."""
        if value is None:
            return None
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


class Capability(str, Enum):
    RECEIVE_GEOFENCE_NOTIFICATIONS = "receive_geofence_notifications"
    LOG_MAINTENANCE = "log_maintenance"
    MANAGE_GEOFENCES = "manage_geofences"


CAPABILITIES = {
    Role.ADMIN: frozenset({
        Capability.RECEIVE_GEOFENCE_NOTIFICATIONS,
        Capability.MANAGE_GEOFENCES,
    }),
    Role.DISPATCHER: frozenset({
        Capability.RECEIVE_GEOFENCE_NOTIFICATIONS,
    }),
    Role.TECHNICIAN: frozenset({
        Capability.LOG_MAINTENANCE,
    }),
    Role.DRIVER: frozenset(),
}


def has_capability(role: Optional[Role], capability: Capability) -> bool:
    if role is None:
        return False
    return capability in CAPABILITIES.get(role, frozenset())


def require_capability(role: Optional[Role], capability: Capability) -> Role:
    """
    Checks that a role grants a capability.

    Args:
        role: caller role, None when the lookup found nothing
        capability: required capability

    Returns:
        the role, when allowed

    Raises:
        ForbiddenError: the role does not grant the capability
    """
    if not has_capability(role, capability):
        label = role.value if role is not None else "unknown"
        raise ForbiddenError(f"Role '{label}' is not allowed to {capability.value.replace('_', ' ')}")
    return role


def parse_roles(values) -> list:
    """Parses a role list, dropping unknown entries."""
    roles = []
    for value in values:
        role = Role.parse(value)
        if role is not None and role not in roles:
            roles.append(role)
    return roles


def roles_with(capability: Capability) -> list:
    """Roles granting a capability, in declaration order."""
    return [role for role in Role if capability in CAPABILITIES.get(role, frozenset())]

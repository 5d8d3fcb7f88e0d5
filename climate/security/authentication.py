# climate/security/authentication.py
"""
User roles and permissions for climate controller callers.

Provides:
- Household user roles
- Role-permission table
- Default authorisation callback

Account storage, sessions and login belong to the caller; the controller
only needs to know who is acting and whether they may do it.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


# ----------------------------------------------------------------
# User roles and permissions
# ----------------------------------------------------------------

class UserRole(Enum):
    """Household user roles with increasing privilege levels."""
    GUEST = 1  # Temporary access, comfort controls only
    HOMEOWNER = 2  # Full household control
    TECHNICIAN = 3  # Service access


class PermissionType(Enum):
    """Types of actions requiring authorisation."""
    CONTROL_SETPOINT = "control_setpoint"
    CONTROL_MODE_CHANGE = "control_mode_change"
    CONTROL_ECO_MODE = "control_eco_mode"


# Role-Permission mapping
ROLE_PERMISSIONS = {
    UserRole.GUEST: {
        PermissionType.CONTROL_SETPOINT,
        PermissionType.CONTROL_MODE_CHANGE,
    },
    UserRole.HOMEOWNER: {
        PermissionType.CONTROL_SETPOINT,
        PermissionType.CONTROL_MODE_CHANGE,
        PermissionType.CONTROL_ECO_MODE,
    },
    UserRole.TECHNICIAN: set(PermissionType),  # All permissions
}


@dataclass(frozen=True)
class User:
    """Acting user as supplied by the caller."""
    username: str
    role: UserRole


SYSTEM_USER = User(username="system", role=UserRole.TECHNICIAN)

Authorizer = Callable[[User, PermissionType], bool]


def role_has_permission(user: User, permission: PermissionType) -> bool:
    """Default authorisation callback backed by ROLE_PERMISSIONS."""
    allowed = permission in ROLE_PERMISSIONS.get(user.role, set())
    if not allowed:
        logger.debug(
            f"Permission {permission.value} not granted to role {user.role.name} "
            f"(user={user.username})"
        )
    return allowed

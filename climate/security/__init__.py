# climate/security/__init__.py
"""
Security components for the climate controller.

Modules:
- authentication: Household roles and the eco-mode authorisation hook
- logging_system: Structured controller logging with audit trail
"""

from climate.security.authentication import (
    SYSTEM_USER,
    PermissionType,
    User,
    UserRole,
    role_has_permission,
)
from climate.security.logging_system import (
    ClimateLogger,
    EventCategory,
    EventSeverity,
    configure_logging,
    get_logger,
)

__all__ = [
    # Authentication
    "User",
    "UserRole",
    "PermissionType",
    "SYSTEM_USER",
    "role_has_permission",
    # Logging
    "ClimateLogger",
    "EventSeverity",
    "EventCategory",
    "configure_logging",
    "get_logger",
]

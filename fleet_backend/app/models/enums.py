"""
User roles enumeration.

Defines the role types for the fleet management system.
"""

import enum


class UserRole(str, enum.Enum):
    """
    User role enumeration.

    Roles:
        ADMIN: Full access, including deletes and user management
        MODERATOR: Manages vehicles, trips, maintenance and bookings (default role)
    """
    ADMIN = "admin"
    MODERATOR = "moderator"

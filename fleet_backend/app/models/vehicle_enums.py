"""
Vehicle-related enumerations.
"""

import enum


class VehicleStatus(str, enum.Enum):
    """Vehicle status enumeration."""
    AVAILABLE = "available"  # Free to be booked or to start a trip
    MAINTENANCE = "maintenance"  # Held by an open maintenance record
    IN_USE = "in_use"  # Held by an IN_PROGRESS trip
    OUT_OF_SERVICE = "out_of_service"  # Administrative override only

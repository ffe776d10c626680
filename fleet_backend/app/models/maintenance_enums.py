"""
Maintenance-related enumerations.
"""

import enum


class MaintenanceType(str, enum.Enum):
    """Maintenance type enumeration."""
    SCHEDULED = "scheduled"
    UNSCHEDULED = "unscheduled"
    REPAIR = "repair"


class MaintenanceStatus(str, enum.Enum):
    """Maintenance status enumeration."""
    PENDING = "pending"  # Booked in, vehicle held
    IN_PROGRESS = "in_progress"  # Work under way, record cannot be deleted
    COMPLETED = "completed"  # Done, vehicle released


MAINTENANCE_TRANSITIONS = {
    MaintenanceStatus.PENDING: {MaintenanceStatus.IN_PROGRESS, MaintenanceStatus.COMPLETED},
    MaintenanceStatus.IN_PROGRESS: {MaintenanceStatus.COMPLETED},
    MaintenanceStatus.COMPLETED: set(),
}

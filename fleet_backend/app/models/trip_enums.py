"""
Trip-related enumerations.
"""

import enum


class TripStatus(str, enum.Enum):
    """Trip status enumeration."""
    PLANNED = "planned"  # Scheduled, vehicle not yet occupied
    IN_PROGRESS = "in_progress"  # Driver has started, vehicle is in use
    COMPLETED = "completed"  # Finished, vehicle released and mileage synced
    CANCELLED = "cancelled"  # Abandoned from PLANNED or IN_PROGRESS


# Legal status moves; a status may always be re-submitted unchanged
TRIP_TRANSITIONS = {
    TripStatus.PLANNED: {TripStatus.IN_PROGRESS, TripStatus.CANCELLED},
    TripStatus.IN_PROGRESS: {TripStatus.COMPLETED, TripStatus.CANCELLED},
    TripStatus.COMPLETED: set(),
    TripStatus.CANCELLED: set(),
}

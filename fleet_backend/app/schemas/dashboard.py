"""
Dashboard schemas.
"""

from pydantic import BaseModel


class DashboardStats(BaseModel):
    """Fleet-wide counters shown on the dashboard."""
    total_vehicles: int
    available_vehicles: int
    in_use: int
    in_maintenance: int
    out_of_service: int
    active_trips: int
    upcoming_maintenance: int


class VehicleUsage(BaseModel):
    """Per-vehicle usage summary."""
    vehicle_id: int
    registration_number: str
    status: str
    trip_count: int
    completed_distance: int
    fuel_consumed: float
    maintenance_cost: float

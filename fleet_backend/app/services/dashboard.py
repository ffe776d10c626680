"""
Dashboard Service.

Read-only aggregation queries for the fleet dashboard.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from typing import List

from fleet_backend.app.models.maintenance import Maintenance
from fleet_backend.app.models.maintenance_enums import MaintenanceStatus
from fleet_backend.app.models.trip import Trip
from fleet_backend.app.models.trip_enums import TripStatus
from fleet_backend.app.models.vehicle import Vehicle
from fleet_backend.app.models.vehicle_enums import VehicleStatus
from fleet_backend.app.schemas.dashboard import DashboardStats, VehicleUsage


class DashboardService:

    @staticmethod
    async def get_stats(db: AsyncSession) -> DashboardStats:
        """Fleet-wide counters."""

        # Vehicle counts per status in one pass
        rows = await db.execute(
            select(Vehicle.status, func.count(Vehicle.id)).group_by(Vehicle.status)
        )
        by_status = {status: count for status, count in rows}

        active_trips = (await db.execute(
            select(func.count(Trip.id)).where(Trip.status == TripStatus.IN_PROGRESS)
        )).scalar() or 0

        upcoming = (await db.execute(
            select(func.count(Maintenance.id)).where(Maintenance.status != MaintenanceStatus.COMPLETED)
        )).scalar() or 0

        return DashboardStats(
            total_vehicles=sum(by_status.values()),
            available_vehicles=by_status.get(VehicleStatus.AVAILABLE, 0),
            in_use=by_status.get(VehicleStatus.IN_USE, 0),
            in_maintenance=by_status.get(VehicleStatus.MAINTENANCE, 0),
            out_of_service=by_status.get(VehicleStatus.OUT_OF_SERVICE, 0),
            active_trips=active_trips,
            upcoming_maintenance=upcoming
        )

    @staticmethod
    async def get_vehicle_usage(db: AsyncSession) -> List[VehicleUsage]:
        """
        Per-vehicle breakdown.

        Distance and fuel only count completed trips. Trips and maintenance
        are aggregated in separate subqueries so the two joins do not
        multiply each other's rows.
        """
        trip_totals = select(
            Trip.vehicle_id.label("vehicle_id"),
            func.count(Trip.id).label("trip_count"),
            func.coalesce(func.sum(
                (Trip.end_odometer - Trip.start_odometer)
            ).filter(Trip.status == TripStatus.COMPLETED), 0).label("distance"),
            func.coalesce(func.sum(Trip.fuel_consumed).filter(Trip.status == TripStatus.COMPLETED), 0).label("fuel")
        ).group_by(Trip.vehicle_id).subquery()

        maintenance_totals = select(
            Maintenance.vehicle_id.label("vehicle_id"),
            func.coalesce(func.sum(Maintenance.cost), 0).label("cost")
        ).group_by(Maintenance.vehicle_id).subquery()

        stmt = select(
            Vehicle.id,
            Vehicle.registration_number,
            Vehicle.status,
            func.coalesce(trip_totals.c.trip_count, 0).label("trip_count"),
            func.coalesce(trip_totals.c.distance, 0).label("distance"),
            func.coalesce(trip_totals.c.fuel, 0).label("fuel"),
            func.coalesce(maintenance_totals.c.cost, 0).label("cost")
        ).outerjoin(trip_totals, trip_totals.c.vehicle_id == Vehicle.id)\
         .outerjoin(maintenance_totals, maintenance_totals.c.vehicle_id == Vehicle.id)\
         .order_by(Vehicle.id)

        results = await db.execute(stmt)

        data = []
        for row in results:
            data.append(VehicleUsage(
                vehicle_id=row.id,
                registration_number=row.registration_number,
                status=row.status.value,
                trip_count=row.trip_count,
                completed_distance=int(row.distance),
                fuel_consumed=float(row.fuel),
                maintenance_cost=float(row.cost)
            ))
        return data

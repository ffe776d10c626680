"""
Trip Manager.

Starts, updates and completes trips, keeping the vehicle's status and
mileage in step:

    planned -> in_progress -> completed
    planned | in_progress -> cancelled

Starting a trip moves the vehicle available -> in_use. Completing it raises
mileage to the end odometer reading and releases the vehicle; cancelling an
in-progress trip releases it too. A released vehicle goes back to available,
or to maintenance while a job scheduled during the trip is still open. Each
of these runs as one unit of work under the vehicle lock.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_backend.app.core.clock import as_utc, utcnow
from fleet_backend.app.core.exceptions import ConflictError, NotFoundError, ValidationError
from fleet_backend.app.db.unit_of_work import with_transaction
from fleet_backend.app.models.trip import Trip
from fleet_backend.app.models.trip_enums import TripStatus, TRIP_TRANSITIONS
from fleet_backend.app.models.vehicle import Vehicle
from fleet_backend.app.models.vehicle_enums import VehicleStatus
from fleet_backend.app.schemas.trip import TripCreate, TripUpdate
from fleet_backend.app.services.maintenance_manager import count_open_jobs
from fleet_backend.app.services.vehicle_locking import vehicle_locks, lock_vehicle_row
from fleet_backend.app.services.vehicle_registry import ensure_user_exists

logger = logging.getLogger(__name__)


def check_odometer(start_odometer: int, end_odometer: Optional[int]) -> None:
    if end_odometer is not None and end_odometer < start_odometer:
        raise ValidationError(
            "End odometer reading must be greater than or equal to start odometer reading",
            details={"start_odometer": start_odometer, "end_odometer": end_odometer}
        )


def check_trip_times(start_time: datetime, end_time: Optional[datetime]) -> None:
    if end_time is not None and as_utc(end_time) < as_utc(start_time):
        raise ValidationError("End time must not be before start time")


def occupy_vehicle(vehicle: Vehicle) -> None:
    """available -> in_use, or ConflictError."""
    if vehicle.status != VehicleStatus.AVAILABLE:
        raise ConflictError(
            f"Vehicle not available (status: {vehicle.status.value})",
            details={"vehicle_id": vehicle.id, "status": vehicle.status.value}
        )
    vehicle.status = VehicleStatus.IN_USE


async def release_vehicle(db: AsyncSession, vehicle: Vehicle, end_odometer: Optional[int] = None) -> None:
    """
    Hand back an in_use vehicle, syncing mileage when a reading is given.

    The vehicle goes to maintenance instead of available while any maintenance
    job scheduled during the trip is still open. A vehicle moved out of in_use
    by an administrator keeps its status; mileage still never goes down.
    """
    if end_odometer is not None:
        vehicle.mileage = max(vehicle.mileage, end_odometer)
    if vehicle.status != VehicleStatus.IN_USE:
        return
    if await count_open_jobs(db, vehicle.id):
        vehicle.status = VehicleStatus.MAINTENANCE
        logger.info("Vehicle %s released into maintenance; open jobs remain", vehicle.id)
    else:
        vehicle.status = VehicleStatus.AVAILABLE


async def load_trip_for_update(db: AsyncSession, trip_id: int) -> Trip:
    trip = await db.get(Trip, trip_id, with_for_update=True, populate_existing=True)
    if trip is None:
        raise NotFoundError("Trip", trip_id)
    return trip


class TripManager:

    @staticmethod
    async def get(db: AsyncSession, trip_id: int) -> Trip:
        trip = await db.get(Trip, trip_id)
        if trip is None:
            raise NotFoundError("Trip", trip_id)
        return trip

    @staticmethod
    async def list_for_vehicle(db: AsyncSession, vehicle_id: int) -> List[Trip]:
        result = await db.execute(
            select(Trip).where(Trip.vehicle_id == vehicle_id)
            .order_by(Trip.start_time.desc(), Trip.id.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def list_for_driver(db: AsyncSession, driver_id: int) -> List[Trip]:
        result = await db.execute(
            select(Trip).where(Trip.driver_id == driver_id)
            .order_by(Trip.start_time.desc(), Trip.id.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def list_active(db: AsyncSession) -> List[Trip]:
        """Trips currently IN_PROGRESS."""
        result = await db.execute(
            select(Trip).where(Trip.status == TripStatus.IN_PROGRESS)
            .order_by(Trip.start_time, Trip.id)
        )
        return list(result.scalars().all())

    @staticmethod
    async def create(db: AsyncSession, data: TripCreate) -> Trip:
        """
        Create a trip, starting it immediately when status is IN_PROGRESS.

        Raises:
            ValidationError: Bad odometer/time ordering, or a terminal initial status
            NotFoundError: Unknown vehicle or driver
            ConflictError: Starting on a vehicle that is not available
        """
        if data.status in (TripStatus.COMPLETED, TripStatus.CANCELLED):
            raise ValidationError(
                f"A trip cannot be created as {data.status.value}; create it planned or in_progress"
            )
        check_odometer(data.start_odometer, data.end_odometer)
        check_trip_times(data.start_time, data.end_time)

        async def _insert(session: AsyncSession) -> Trip:
            vehicle = await lock_vehicle_row(session, data.vehicle_id)
            await ensure_user_exists(session, data.driver_id, "Driver")

            if data.status == TripStatus.IN_PROGRESS:
                occupy_vehicle(vehicle)

            trip = Trip(**data.model_dump())
            session.add(trip)
            await session.flush()
            return trip

        async with vehicle_locks.hold(data.vehicle_id):
            trip = await with_transaction(db, _insert)

        logger.info(
            "Trip %s created for vehicle %s with status %s",
            trip.id, trip.vehicle_id, trip.status.value
        )
        return trip

    @staticmethod
    async def update(db: AsyncSession, trip_id: int, patch: TripUpdate) -> Trip:
        """
        Apply a partial update, running any status transition's vehicle effects.

        Completing requires an end odometer reading; end_time defaults to now.

        Raises:
            NotFoundError: Unknown trip or driver
            ValidationError: Odometer/time ordering violated, or missing end odometer on completion
            ConflictError: Illegal status transition, or starting on an unavailable vehicle
        """
        changes = patch.model_dump(exclude_unset=True)
        vehicle_id = (await TripManager.get(db, trip_id)).vehicle_id

        async def _apply(session: AsyncSession) -> Trip:
            trip = await load_trip_for_update(session, trip_id)
            current = trip.status
            target = changes.get("status", current)

            if target != current and target not in TRIP_TRANSITIONS[current]:
                raise ConflictError(
                    f"Cannot change trip status from {current.value} to {target.value}",
                    details={"trip_id": trip_id, "from": current.value, "to": target.value}
                )

            completing = target == TripStatus.COMPLETED and current != TripStatus.COMPLETED
            if completing and changes.get("end_time", trip.end_time) is None:
                changes["end_time"] = utcnow()

            start_odometer = changes.get("start_odometer", trip.start_odometer)
            end_odometer = changes.get("end_odometer", trip.end_odometer)
            if completing and end_odometer is None:
                raise ValidationError("End odometer reading is required to complete a trip")
            check_odometer(start_odometer, end_odometer)
            check_trip_times(
                changes.get("start_time", trip.start_time),
                changes.get("end_time", trip.end_time)
            )

            if "driver_id" in changes:
                await ensure_user_exists(session, changes["driver_id"], "Driver")

            if target != current:
                vehicle = await lock_vehicle_row(session, trip.vehicle_id)
                if target == TripStatus.IN_PROGRESS:
                    occupy_vehicle(vehicle)
                elif completing:
                    await release_vehicle(session, vehicle, end_odometer)
                elif current == TripStatus.IN_PROGRESS:
                    await release_vehicle(session, vehicle)

            for field, value in changes.items():
                setattr(trip, field, value)

            await session.flush()
            return trip

        async with vehicle_locks.hold(vehicle_id):
            trip = await with_transaction(db, _apply)

        logger.info("Trip %s updated (status: %s)", trip.id, trip.status.value)
        return trip

    @staticmethod
    async def delete(db: AsyncSession, trip_id: int) -> None:
        """
        Delete a trip that is not in progress.

        Raises:
            NotFoundError: Unknown trip
            ConflictError: Trip is IN_PROGRESS (complete or cancel it first)
        """
        vehicle_id = (await TripManager.get(db, trip_id)).vehicle_id

        async def _remove(session: AsyncSession) -> None:
            trip = await load_trip_for_update(session, trip_id)
            if trip.status == TripStatus.IN_PROGRESS:
                raise ConflictError(
                    "Cannot delete a trip that is in progress. Complete or cancel it first.",
                    details={"trip_id": trip_id}
                )
            await session.delete(trip)
            await session.flush()

        async with vehicle_locks.hold(vehicle_id):
            await with_transaction(db, _remove)

        logger.info("Trip %s deleted", trip_id)

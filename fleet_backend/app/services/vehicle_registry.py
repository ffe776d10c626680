"""
Vehicle Registry.

Owns vehicle records and their status field. Status changes made here are
administrative overrides; the trip and maintenance managers drive the
normal lifecycle transitions.
"""

import logging
from typing import List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_backend.app.core.exceptions import ConflictError, NotFoundError, ValidationError
from fleet_backend.app.db.unit_of_work import with_transaction
from fleet_backend.app.models.booking import Booking
from fleet_backend.app.models.maintenance import Maintenance
from fleet_backend.app.models.trip import Trip
from fleet_backend.app.models.user import User
from fleet_backend.app.models.vehicle import Vehicle
from fleet_backend.app.models.vehicle_enums import VehicleStatus
from fleet_backend.app.schemas.vehicle import VehicleCreate, VehicleUpdate
from fleet_backend.app.services.vehicle_locking import vehicle_locks, lock_vehicle_row

logger = logging.getLogger(__name__)

# Child tables that block deletion, in the order they are reported
DEPENDENT_RECORDS = (
    (Maintenance, "maintenance records"),
    (Trip, "trip records"),
    (Booking, "booking records"),
)


async def ensure_user_exists(db: AsyncSession, user_id: int, resource: str = "User") -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError(resource, user_id)
    return user


class VehicleRegistry:

    @staticmethod
    async def get(db: AsyncSession, vehicle_id: int) -> Vehicle:
        """
        Raises:
            NotFoundError: If the vehicle does not exist
        """
        vehicle = await db.get(Vehicle, vehicle_id)
        if vehicle is None:
            raise NotFoundError("Vehicle", vehicle_id)
        return vehicle

    @staticmethod
    async def list(
        db: AsyncSession,
        status: Optional[VehicleStatus] = None,
        make: Optional[str] = None,
        year: Optional[int] = None
    ) -> List[Vehicle]:
        """List vehicles, optionally filtered by status, make and year."""
        query = select(Vehicle).order_by(Vehicle.id)

        if status is not None:
            query = query.where(Vehicle.status == status)
        if make:
            query = query.where(Vehicle.make == make)
        if year is not None:
            query = query.where(Vehicle.year == year)

        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def create(db: AsyncSession, data: VehicleCreate) -> Vehicle:
        """
        Register a vehicle.

        Raises:
            NotFoundError: If assigned_to_id references an unknown user
        """
        async def _insert(session: AsyncSession) -> Vehicle:
            if data.assigned_to_id is not None:
                await ensure_user_exists(session, data.assigned_to_id, "Assigned user")

            vehicle = Vehicle(**data.model_dump())
            session.add(vehicle)
            await session.flush()
            return vehicle

        vehicle = await with_transaction(db, _insert)
        logger.info("Vehicle %s registered (%s)", vehicle.id, vehicle.registration_number)
        return vehicle

    @staticmethod
    async def update(db: AsyncSession, vehicle_id: int, patch: VehicleUpdate) -> Vehicle:
        """
        Apply a partial update.

        The lifecycle state machine is not enforced here: a `status` in the
        patch is taken as an administrative override. Mileage may not go down.

        Raises:
            NotFoundError: Unknown vehicle or assigned user
            ValidationError: Mileage lower than the current reading
        """
        changes = patch.model_dump(exclude_unset=True)

        async def _apply(session: AsyncSession) -> Vehicle:
            vehicle = await lock_vehicle_row(session, vehicle_id)

            if "mileage" in changes and changes["mileage"] < vehicle.mileage:
                raise ValidationError(
                    f"Mileage cannot decrease (current: {vehicle.mileage}, given: {changes['mileage']})",
                    details={"current_mileage": vehicle.mileage, "mileage": changes["mileage"]}
                )

            if changes.get("assigned_to_id") is not None:
                await ensure_user_exists(session, changes["assigned_to_id"], "Assigned user")

            for field, value in changes.items():
                setattr(vehicle, field, value)

            await session.flush()
            return vehicle

        async with vehicle_locks.hold(vehicle_id):
            return await with_transaction(db, _apply)

    @staticmethod
    async def delete(db: AsyncSession, vehicle_id: int) -> None:
        """
        Delete a vehicle with no maintenance, trip or booking records.

        Raises:
            NotFoundError: If the vehicle does not exist
            ConflictError: If any dependent record still references it
        """
        async def _remove(session: AsyncSession) -> None:
            vehicle = await lock_vehicle_row(session, vehicle_id)

            for model, label in DEPENDENT_RECORDS:
                count = (await session.execute(
                    select(func.count(model.id)).where(model.vehicle_id == vehicle_id)
                )).scalar()
                if count:
                    raise ConflictError(
                        f"Cannot delete vehicle with {label}. Remove {label} first.",
                        details={"vehicle_id": vehicle_id, "dependents": label, "count": count}
                    )

            await session.delete(vehicle)
            await session.flush()

        async with vehicle_locks.hold(vehicle_id):
            await with_transaction(db, _remove)

        logger.info("Vehicle %s deleted", vehicle_id)

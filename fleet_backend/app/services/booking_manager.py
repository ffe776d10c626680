"""
Booking Manager.

Reservations of a vehicle for a time window. A booking can only be made
while the vehicle is available, but it never changes the vehicle's status.

Status flow:
    pending -> approved | declined | cancelled
    approved -> completed | cancelled
"""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_backend.app.core.clock import as_utc
from fleet_backend.app.core.exceptions import ConflictError, NotFoundError, ValidationError
from fleet_backend.app.db.unit_of_work import with_transaction
from fleet_backend.app.models.booking import Booking
from fleet_backend.app.models.booking_enums import BOOKING_TRANSITIONS
from fleet_backend.app.models.vehicle_enums import VehicleStatus
from fleet_backend.app.schemas.booking import BookingCreate, BookingUpdate
from fleet_backend.app.services.vehicle_locking import vehicle_locks, lock_vehicle_row
from fleet_backend.app.services.vehicle_registry import ensure_user_exists

logger = logging.getLogger(__name__)


def check_booking_window(start_time, end_time) -> None:
    if as_utc(end_time) < as_utc(start_time):
        raise ValidationError(
            "End time must be after start time",
            details={"start_time": str(start_time), "end_time": str(end_time)}
        )


class BookingManager:

    @staticmethod
    async def get(db: AsyncSession, booking_id: int) -> Booking:
        booking = await db.get(Booking, booking_id)
        if booking is None:
            raise NotFoundError("Booking", booking_id)
        return booking

    @staticmethod
    async def list_all(db: AsyncSession) -> List[Booking]:
        result = await db.execute(select(Booking).order_by(Booking.start_time.desc(), Booking.id.desc()))
        return list(result.scalars().all())

    @staticmethod
    async def list_for_vehicle(db: AsyncSession, vehicle_id: int) -> List[Booking]:
        result = await db.execute(
            select(Booking).where(Booking.vehicle_id == vehicle_id)
            .order_by(Booking.start_time.desc(), Booking.id.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def list_for_user(db: AsyncSession, user_id: int) -> List[Booking]:
        result = await db.execute(
            select(Booking).where(Booking.user_id == user_id)
            .order_by(Booking.start_time.desc(), Booking.id.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def create(db: AsyncSession, data: BookingCreate) -> Booking:
        """
        Reserve a vehicle.

        Raises:
            ValidationError: end_time before start_time
            NotFoundError: Unknown vehicle or user
            ConflictError: Vehicle is not available
        """
        check_booking_window(data.start_time, data.end_time)

        async def _insert(session: AsyncSession) -> Booking:
            vehicle = await lock_vehicle_row(session, data.vehicle_id)
            await ensure_user_exists(session, data.user_id)

            if vehicle.status != VehicleStatus.AVAILABLE:
                raise ConflictError(
                    f"Vehicle not available (status: {vehicle.status.value})",
                    details={"vehicle_id": vehicle.id, "status": vehicle.status.value}
                )

            booking = Booking(**data.model_dump())
            session.add(booking)
            await session.flush()
            return booking

        async with vehicle_locks.hold(data.vehicle_id):
            booking = await with_transaction(db, _insert)

        # created_at is assigned by the database
        await db.refresh(booking)
        logger.info("Booking %s created for vehicle %s by user %s", booking.id, booking.vehicle_id, booking.user_id)
        return booking

    @staticmethod
    async def update(db: AsyncSession, booking_id: int, patch: BookingUpdate) -> Booking:
        """
        Apply a partial update.

        Raises:
            NotFoundError: Unknown booking
            ValidationError: Merged window has end_time before start_time
            ConflictError: Illegal status transition
        """
        changes = patch.model_dump(exclude_unset=True)

        async def _apply(session: AsyncSession) -> Booking:
            booking = await session.get(Booking, booking_id, with_for_update=True, populate_existing=True)
            if booking is None:
                raise NotFoundError("Booking", booking_id)

            current = booking.status
            target = changes.get("status", current)
            if target != current and target not in BOOKING_TRANSITIONS[current]:
                raise ConflictError(
                    f"Cannot change booking status from {current.value} to {target.value}",
                    details={"booking_id": booking_id, "from": current.value, "to": target.value}
                )

            check_booking_window(
                changes.get("start_time", booking.start_time),
                changes.get("end_time", booking.end_time)
            )

            for field, value in changes.items():
                setattr(booking, field, value)

            await session.flush()
            return booking

        booking = await with_transaction(db, _apply)
        logger.info("Booking %s updated (status: %s)", booking.id, booking.status.value)
        return booking

    @staticmethod
    async def delete(db: AsyncSession, booking_id: int) -> None:
        """
        Raises:
            NotFoundError: Unknown booking
        """
        async def _remove(session: AsyncSession) -> None:
            booking = await BookingManager.get(session, booking_id)
            await session.delete(booking)
            await session.flush()

        await with_transaction(db, _remove)
        logger.info("Booking %s deleted", booking_id)

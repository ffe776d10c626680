"""
Maintenance Manager.

Schedules and completes maintenance jobs:

    pending -> in_progress -> completed
    pending -> completed

An open job (anything not completed) takes an available vehicle into
`maintenance`. The vehicle goes back to `available` once its last open job
is completed or removed. Mileage is never touched here.
"""

import logging
from typing import List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_backend.app.core.clock import utcnow
from fleet_backend.app.core.exceptions import ConflictError, NotFoundError
from fleet_backend.app.db.unit_of_work import with_transaction
from fleet_backend.app.models.maintenance import Maintenance
from fleet_backend.app.models.maintenance_enums import MaintenanceStatus, MAINTENANCE_TRANSITIONS
from fleet_backend.app.models.vehicle import Vehicle
from fleet_backend.app.models.vehicle_enums import VehicleStatus
from fleet_backend.app.schemas.maintenance import MaintenanceCreate, MaintenanceUpdate
from fleet_backend.app.services.vehicle_locking import vehicle_locks, lock_vehicle_row

logger = logging.getLogger(__name__)


async def count_open_jobs(db: AsyncSession, vehicle_id: int, exclude_id: Optional[int] = None) -> int:
    """Number of the vehicle's maintenance records that are not completed."""
    query = select(func.count(Maintenance.id)).where(
        Maintenance.vehicle_id == vehicle_id,
        Maintenance.status != MaintenanceStatus.COMPLETED
    )
    if exclude_id is not None:
        query = query.where(Maintenance.id != exclude_id)
    result = await db.execute(query)
    return result.scalar() or 0


async def release_if_idle(db: AsyncSession, vehicle: Vehicle, record_id: int) -> bool:
    """maintenance -> available when no other open job holds the vehicle."""
    if vehicle.status != VehicleStatus.MAINTENANCE:
        return False
    if await count_open_jobs(db, vehicle.id, exclude_id=record_id):
        return False
    vehicle.status = VehicleStatus.AVAILABLE
    return True


async def load_record_for_update(db: AsyncSession, record_id: int) -> Maintenance:
    record = await db.get(Maintenance, record_id, with_for_update=True, populate_existing=True)
    if record is None:
        raise NotFoundError("Maintenance record", record_id)
    return record


class MaintenanceManager:

    @staticmethod
    async def get(db: AsyncSession, record_id: int) -> Maintenance:
        record = await db.get(Maintenance, record_id)
        if record is None:
            raise NotFoundError("Maintenance record", record_id)
        return record

    @staticmethod
    async def list_for_vehicle(db: AsyncSession, vehicle_id: int) -> List[Maintenance]:
        result = await db.execute(
            select(Maintenance).where(Maintenance.vehicle_id == vehicle_id)
            .order_by(Maintenance.date.desc(), Maintenance.id.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def list_upcoming(db: AsyncSession) -> List[Maintenance]:
        """Open jobs, earliest first. Overdue jobs are included."""
        result = await db.execute(
            select(Maintenance).where(Maintenance.status != MaintenanceStatus.COMPLETED)
            .order_by(Maintenance.date, Maintenance.id)
        )
        return list(result.scalars().all())

    @staticmethod
    async def create(db: AsyncSession, data: MaintenanceCreate) -> Maintenance:
        """
        Schedule a job, taking an available vehicle into maintenance.

        A job recorded as already completed has no effect on the vehicle.

        Raises:
            NotFoundError: Unknown vehicle
        """
        values = data.model_dump()
        if data.status == MaintenanceStatus.COMPLETED and data.completed_at is None:
            values["completed_at"] = utcnow()

        async def _insert(session: AsyncSession) -> Maintenance:
            vehicle = await lock_vehicle_row(session, data.vehicle_id)

            if data.status != MaintenanceStatus.COMPLETED and vehicle.status == VehicleStatus.AVAILABLE:
                vehicle.status = VehicleStatus.MAINTENANCE

            record = Maintenance(**values)
            session.add(record)
            await session.flush()
            return record

        async with vehicle_locks.hold(data.vehicle_id):
            record = await with_transaction(db, _insert)

        logger.info(
            "Maintenance %s scheduled for vehicle %s on %s (status: %s)",
            record.id, record.vehicle_id, record.date, record.status.value
        )
        return record

    @staticmethod
    async def update(db: AsyncSession, record_id: int, patch: MaintenanceUpdate) -> Maintenance:
        """
        Apply a partial update. Completing stamps completed_at (default now)
        and releases the vehicle if this was its last open job.

        Raises:
            NotFoundError: Unknown record
            ConflictError: Illegal status transition
        """
        changes = patch.model_dump(exclude_unset=True)
        vehicle_id = (await MaintenanceManager.get(db, record_id)).vehicle_id

        async def _apply(session: AsyncSession) -> Maintenance:
            record = await load_record_for_update(session, record_id)
            current = record.status
            target = changes.get("status", current)

            if target != current and target not in MAINTENANCE_TRANSITIONS[current]:
                raise ConflictError(
                    f"Cannot change maintenance status from {current.value} to {target.value}",
                    details={"maintenance_id": record_id, "from": current.value, "to": target.value}
                )

            if target == MaintenanceStatus.COMPLETED and current != MaintenanceStatus.COMPLETED:
                if changes.get("completed_at") is None:
                    changes["completed_at"] = utcnow()
                vehicle = await lock_vehicle_row(session, record.vehicle_id)
                await release_if_idle(session, vehicle, record.id)

            for field, value in changes.items():
                setattr(record, field, value)

            await session.flush()
            return record

        async with vehicle_locks.hold(vehicle_id):
            record = await with_transaction(db, _apply)

        logger.info("Maintenance %s updated (status: %s)", record.id, record.status.value)
        return record

    @staticmethod
    async def delete(db: AsyncSession, record_id: int) -> None:
        """
        Remove a job that is not in progress.

        Removing a pending job releases the vehicle if no other open job
        holds it.

        Raises:
            NotFoundError: Unknown record
            ConflictError: Job is IN_PROGRESS
        """
        vehicle_id = (await MaintenanceManager.get(db, record_id)).vehicle_id

        async def _remove(session: AsyncSession) -> None:
            record = await load_record_for_update(session, record_id)
            if record.status == MaintenanceStatus.IN_PROGRESS:
                raise ConflictError(
                    "Cannot delete maintenance that is in progress. Complete it first.",
                    details={"maintenance_id": record_id}
                )

            if record.status == MaintenanceStatus.PENDING:
                vehicle = await lock_vehicle_row(session, record.vehicle_id)
                await release_if_idle(session, vehicle, record.id)

            await session.delete(record)
            await session.flush()

        async with vehicle_locks.hold(vehicle_id):
            await with_transaction(db, _remove)

        logger.info("Maintenance %s deleted", record_id)

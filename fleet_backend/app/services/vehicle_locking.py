"""
Vehicle locking service.

Serialises the check-then-set on a vehicle's status. Two layers:

- an in-process asyncio.Lock per vehicle, held for the whole unit of work,
- a `SELECT ... FOR UPDATE` on the vehicle row inside the transaction, which
  PostgreSQL turns into a row lock across processes.

SQLite ignores FOR UPDATE, so on SQLite the in-process lock is what keeps two
concurrent "start trip" calls from both seeing `available`.
"""

import asyncio
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession

from fleet_backend.app.core.exceptions import NotFoundError
from fleet_backend.app.models.vehicle import Vehicle


class VehicleLockRegistry:
    """
    Hands out one asyncio.Lock per vehicle id.

    Locks are held weakly: once no coroutine holds or waits on a lock it is
    dropped, so the registry does not grow with the fleet.
    """

    def __init__(self):
        self._locks: "weakref.WeakValueDictionary[int, asyncio.Lock]" = weakref.WeakValueDictionary()

    def lock_for(self, vehicle_id: int) -> asyncio.Lock:
        lock = self._locks.get(vehicle_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[vehicle_id] = lock
        return lock

    @asynccontextmanager
    async def hold(self, vehicle_id: int) -> AsyncIterator[None]:
        lock = self.lock_for(vehicle_id)
        async with lock:
            yield


vehicle_locks = VehicleLockRegistry()


async def lock_vehicle_row(db: AsyncSession, vehicle_id: int) -> Vehicle:
    """
    Load a vehicle for update, bypassing the identity map.

    Args:
        db: Session with an open transaction
        vehicle_id: Vehicle to lock

    Returns:
        The freshly read vehicle

    Raises:
        NotFoundError: If the vehicle does not exist
    """
    vehicle = await db.get(
        Vehicle,
        vehicle_id,
        with_for_update=True,
        populate_existing=True,
    )
    if vehicle is None:
        raise NotFoundError("Vehicle", vehicle_id)
    return vehicle

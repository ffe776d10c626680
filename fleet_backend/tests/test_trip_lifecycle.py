"""
Trip lifecycle tests.

Covers starting, completing and cancelling trips and the vehicle status and
mileage changes that go with them.
"""

import pytest
from datetime import date, timedelta

from fleet_backend.app.core.exceptions import ConflictError, NotFoundError, ValidationError
from fleet_backend.app.models.trip import Trip
from fleet_backend.app.models.trip_enums import TripStatus
from fleet_backend.app.models.vehicle import Vehicle
from fleet_backend.app.models.vehicle_enums import VehicleStatus
from fleet_backend.app.schemas.trip import TripCreate, TripUpdate
from fleet_backend.app.models.maintenance_enums import MaintenanceStatus, MaintenanceType
from fleet_backend.app.schemas.maintenance import MaintenanceCreate, MaintenanceUpdate
from fleet_backend.app.services.maintenance_manager import MaintenanceManager
from fleet_backend.app.services.trip_manager import TripManager


def new_trip(vehicle_id, driver_id, start_time, **overrides):
    values = {
        "vehicle_id": vehicle_id,
        "driver_id": driver_id,
        "start_time": start_time,
        "start_odometer": 1000,
    }
    values.update(overrides)
    return TripCreate(**values)


@pytest.mark.asyncio
async def test_start_and_complete_trip_syncs_mileage(db_session, moderator_user, make_vehicle, trip_start_time):
    """Vehicle at 1000 km, trip 1000 -> 1200: vehicle ends available at 1200."""
    vehicle = await make_vehicle(mileage=1000)

    trip = await TripManager.create(db_session, new_trip(
        vehicle.id, moderator_user.id, trip_start_time, status=TripStatus.IN_PROGRESS
    ))
    await db_session.refresh(vehicle)
    assert trip.status == TripStatus.IN_PROGRESS
    assert vehicle.status == VehicleStatus.IN_USE

    trip = await TripManager.update(db_session, trip.id, TripUpdate(
        status=TripStatus.COMPLETED, end_odometer=1200, fuel_consumed=18.5
    ))
    await db_session.refresh(vehicle)

    assert trip.status == TripStatus.COMPLETED
    assert trip.end_odometer == 1200
    assert trip.end_time is not None
    assert vehicle.status == VehicleStatus.AVAILABLE
    assert vehicle.mileage == 1200


@pytest.mark.asyncio
async def test_planned_trip_leaves_vehicle_available(db_session, moderator_user, make_vehicle, trip_start_time):
    vehicle = await make_vehicle()

    trip = await TripManager.create(db_session, new_trip(vehicle.id, moderator_user.id, trip_start_time))
    await db_session.refresh(vehicle)

    assert trip.status == TripStatus.PLANNED
    assert vehicle.status == VehicleStatus.AVAILABLE


@pytest.mark.asyncio
async def test_starting_planned_trip_occupies_vehicle(db_session, moderator_user, make_vehicle, trip_start_time):
    vehicle = await make_vehicle()
    trip = await TripManager.create(db_session, new_trip(vehicle.id, moderator_user.id, trip_start_time))

    await TripManager.update(db_session, trip.id, TripUpdate(status=TripStatus.IN_PROGRESS))
    await db_session.refresh(vehicle)

    assert vehicle.status == VehicleStatus.IN_USE


@pytest.mark.asyncio
async def test_start_on_vehicle_in_maintenance_conflicts(db_session, moderator_user, make_vehicle, trip_start_time):
    vehicle = await make_vehicle(status=VehicleStatus.MAINTENANCE)
    vehicle_id, driver_id = vehicle.id, moderator_user.id

    with pytest.raises(ConflictError) as exc_info:
        await TripManager.create(db_session, new_trip(
            vehicle_id, driver_id, trip_start_time, status=TripStatus.IN_PROGRESS
        ))

    assert "Vehicle not available (status: maintenance)" in exc_info.value.message
    assert await TripManager.list_for_vehicle(db_session, vehicle_id) == []
    vehicle = await db_session.get(Vehicle, vehicle_id, populate_existing=True)
    assert vehicle.status == VehicleStatus.MAINTENANCE


@pytest.mark.asyncio
async def test_completing_with_lower_odometer_changes_nothing(db_session, moderator_user, make_vehicle, trip_start_time):
    vehicle = await make_vehicle(mileage=1000)
    vehicle_id = vehicle.id
    trip = await TripManager.create(db_session, new_trip(
        vehicle_id, moderator_user.id, trip_start_time, status=TripStatus.IN_PROGRESS
    ))
    trip_id = trip.id

    with pytest.raises(ValidationError):
        await TripManager.update(db_session, trip_id, TripUpdate(status=TripStatus.COMPLETED, end_odometer=900))

    trip = await db_session.get(Trip, trip_id, populate_existing=True)
    vehicle = await db_session.get(Vehicle, vehicle_id, populate_existing=True)
    assert trip.status == TripStatus.IN_PROGRESS
    assert trip.end_odometer is None
    assert vehicle.status == VehicleStatus.IN_USE
    assert vehicle.mileage == 1000


@pytest.mark.asyncio
async def test_completing_requires_end_odometer(db_session, moderator_user, make_vehicle, trip_start_time):
    vehicle = await make_vehicle()
    trip = await TripManager.create(db_session, new_trip(
        vehicle.id, moderator_user.id, trip_start_time, status=TripStatus.IN_PROGRESS
    ))

    with pytest.raises(ValidationError):
        await TripManager.update(db_session, trip.id, TripUpdate(status=TripStatus.COMPLETED))


@pytest.mark.asyncio
async def test_end_time_before_start_rejected(db_session, moderator_user, make_vehicle, trip_start_time):
    vehicle = await make_vehicle()

    with pytest.raises(ValidationError):
        await TripManager.create(db_session, new_trip(
            vehicle.id, moderator_user.id, trip_start_time,
            end_time=trip_start_time - timedelta(hours=1)
        ))


@pytest.mark.asyncio
async def test_mileage_never_decreases_on_completion(db_session, moderator_user, make_vehicle, trip_start_time):
    """A trip logged with an old odometer reading does not wind the vehicle back."""
    vehicle = await make_vehicle(mileage=5000)
    trip = await TripManager.create(db_session, new_trip(
        vehicle.id, moderator_user.id, trip_start_time, start_odometer=1000, status=TripStatus.IN_PROGRESS
    ))

    await TripManager.update(db_session, trip.id, TripUpdate(status=TripStatus.COMPLETED, end_odometer=1200))
    await db_session.refresh(vehicle)

    assert vehicle.mileage == 5000
    assert vehicle.status == VehicleStatus.AVAILABLE


@pytest.mark.asyncio
async def test_cancel_in_progress_trip_releases_vehicle(db_session, moderator_user, make_vehicle, trip_start_time):
    vehicle = await make_vehicle(mileage=1000)
    trip = await TripManager.create(db_session, new_trip(
        vehicle.id, moderator_user.id, trip_start_time, status=TripStatus.IN_PROGRESS
    ))

    await TripManager.update(db_session, trip.id, TripUpdate(status=TripStatus.CANCELLED))
    await db_session.refresh(vehicle)

    assert vehicle.status == VehicleStatus.AVAILABLE
    assert vehicle.mileage == 1000


@pytest.mark.asyncio
async def test_completed_trip_cannot_restart(db_session, moderator_user, make_vehicle, trip_start_time):
    vehicle = await make_vehicle()
    trip = await TripManager.create(db_session, new_trip(
        vehicle.id, moderator_user.id, trip_start_time, status=TripStatus.IN_PROGRESS
    ))
    await TripManager.update(db_session, trip.id, TripUpdate(status=TripStatus.COMPLETED, end_odometer=1100))

    with pytest.raises(ConflictError):
        await TripManager.update(db_session, trip.id, TripUpdate(status=TripStatus.IN_PROGRESS))


@pytest.mark.asyncio
async def test_trip_cannot_be_created_completed(db_session, moderator_user, make_vehicle, trip_start_time):
    vehicle = await make_vehicle()

    with pytest.raises(ValidationError):
        await TripManager.create(db_session, new_trip(
            vehicle.id, moderator_user.id, trip_start_time, status=TripStatus.COMPLETED, end_odometer=1100
        ))


@pytest.mark.asyncio
async def test_unknown_driver_rejected(db_session, make_vehicle, trip_start_time):
    vehicle = await make_vehicle()

    with pytest.raises(NotFoundError):
        await TripManager.create(db_session, new_trip(vehicle.id, 9999, trip_start_time))


@pytest.mark.asyncio
async def test_in_progress_trip_cannot_be_deleted(db_session, moderator_user, make_vehicle, trip_start_time):
    vehicle = await make_vehicle()
    trip = await TripManager.create(db_session, new_trip(
        vehicle.id, moderator_user.id, trip_start_time, status=TripStatus.IN_PROGRESS
    ))
    trip_id = trip.id

    with pytest.raises(ConflictError):
        await TripManager.delete(db_session, trip_id)

    await TripManager.update(db_session, trip_id, TripUpdate(status=TripStatus.COMPLETED, end_odometer=1050))
    await TripManager.delete(db_session, trip_id)

    with pytest.raises(NotFoundError):
        await TripManager.get(db_session, trip_id)


@pytest.mark.asyncio
async def test_list_active_and_by_driver(db_session, moderator_user, admin_user, make_vehicle, trip_start_time):
    first = await make_vehicle()
    second = await make_vehicle()

    active = await TripManager.create(db_session, new_trip(
        first.id, moderator_user.id, trip_start_time, status=TripStatus.IN_PROGRESS
    ))
    await TripManager.create(db_session, new_trip(second.id, admin_user.id, trip_start_time))

    assert [t.id for t in await TripManager.list_active(db_session)] == [active.id]
    assert [t.id for t in await TripManager.list_for_driver(db_session, moderator_user.id)] == [active.id]


@pytest.mark.asyncio
async def test_completing_trip_with_open_job_moves_vehicle_to_maintenance(
    db_session, moderator_user, make_vehicle, trip_start_time
):
    """A repair booked mid-trip takes the vehicle once the trip ends."""
    vehicle = await make_vehicle(mileage=1000)
    vehicle_id, driver_id = vehicle.id, moderator_user.id
    trip = await TripManager.create(db_session, new_trip(
        vehicle_id, driver_id, trip_start_time, status=TripStatus.IN_PROGRESS
    ))
    job = await MaintenanceManager.create(db_session, MaintenanceCreate(
        vehicle_id=vehicle_id, type=MaintenanceType.REPAIR, description="Brake pads", date=date(2025, 3, 3)
    ))
    trip_id, job_id = trip.id, job.id

    await TripManager.update(db_session, trip_id, TripUpdate(status=TripStatus.COMPLETED, end_odometer=1200))
    vehicle = await db_session.get(Vehicle, vehicle_id, populate_existing=True)

    assert vehicle.status == VehicleStatus.MAINTENANCE
    assert vehicle.mileage == 1200

    # The vehicle waits for the repair
    with pytest.raises(ConflictError):
        await TripManager.create(db_session, new_trip(
            vehicle_id, driver_id, trip_start_time + timedelta(days=1), status=TripStatus.IN_PROGRESS
        ))

    await MaintenanceManager.update(db_session, job_id, MaintenanceUpdate(status=MaintenanceStatus.COMPLETED))
    vehicle = await db_session.get(Vehicle, vehicle_id, populate_existing=True)
    assert vehicle.status == VehicleStatus.AVAILABLE


@pytest.mark.asyncio
async def test_cancelling_trip_with_open_job_moves_vehicle_to_maintenance(
    db_session, moderator_user, make_vehicle, trip_start_time
):
    vehicle = await make_vehicle()
    trip = await TripManager.create(db_session, new_trip(
        vehicle.id, moderator_user.id, trip_start_time, status=TripStatus.IN_PROGRESS
    ))
    await MaintenanceManager.create(db_session, MaintenanceCreate(
        vehicle_id=vehicle.id, type=MaintenanceType.UNSCHEDULED, description="Warning light", date=date(2025, 3, 3)
    ))

    await TripManager.update(db_session, trip.id, TripUpdate(status=TripStatus.CANCELLED))
    await db_session.refresh(vehicle)

    assert vehicle.status == VehicleStatus.MAINTENANCE


@pytest.mark.asyncio
async def test_completing_with_null_end_time_stamps_now(db_session, moderator_user, make_vehicle, trip_start_time):
    vehicle = await make_vehicle()
    trip = await TripManager.create(db_session, new_trip(
        vehicle.id, moderator_user.id, trip_start_time,
        status=TripStatus.IN_PROGRESS, end_time=trip_start_time + timedelta(hours=2)
    ))

    trip = await TripManager.update(db_session, trip.id, TripUpdate(
        status=TripStatus.COMPLETED, end_odometer=1100, end_time=None
    ))

    assert trip.status == TripStatus.COMPLETED
    assert trip.end_time is not None

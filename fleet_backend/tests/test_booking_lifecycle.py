"""
Booking lifecycle tests.
"""

import pytest
from datetime import timedelta

from fleet_backend.app.core.exceptions import ConflictError, NotFoundError, ValidationError
from fleet_backend.app.models.booking_enums import BookingStatus
from fleet_backend.app.models.vehicle import Vehicle
from fleet_backend.app.models.vehicle_enums import VehicleStatus
from fleet_backend.app.schemas.booking import BookingCreate, BookingUpdate
from fleet_backend.app.services.booking_manager import BookingManager


def new_booking(vehicle_id, user_id, start_time, **overrides):
    values = {
        "vehicle_id": vehicle_id,
        "user_id": user_id,
        "start_time": start_time,
        "end_time": start_time + timedelta(hours=4),
        "purpose": "Site visit",
    }
    values.update(overrides)
    return BookingCreate(**values)


@pytest.mark.asyncio
async def test_booking_available_vehicle(db_session, moderator_user, make_vehicle, trip_start_time):
    vehicle = await make_vehicle()

    booking = await BookingManager.create(db_session, new_booking(vehicle.id, moderator_user.id, trip_start_time))
    await db_session.refresh(vehicle)

    assert booking.status == BookingStatus.PENDING
    assert booking.created_at is not None
    # Bookings never occupy the vehicle
    assert vehicle.status == VehicleStatus.AVAILABLE


@pytest.mark.asyncio
async def test_booking_vehicle_in_maintenance_rejected(db_session, moderator_user, make_vehicle, trip_start_time):
    vehicle = await make_vehicle(status=VehicleStatus.MAINTENANCE)
    vehicle_id, user_id = vehicle.id, moderator_user.id

    with pytest.raises(ConflictError) as exc_info:
        await BookingManager.create(db_session, new_booking(vehicle_id, user_id, trip_start_time))

    assert exc_info.value.message == "Vehicle not available (status: maintenance)"
    assert await BookingManager.list_for_vehicle(db_session, vehicle_id) == []
    vehicle = await db_session.get(Vehicle, vehicle_id, populate_existing=True)
    assert vehicle.status == VehicleStatus.MAINTENANCE


@pytest.mark.asyncio
async def test_booking_end_before_start_rejected(db_session, moderator_user, make_vehicle, trip_start_time):
    vehicle = await make_vehicle()

    with pytest.raises(ValidationError):
        await BookingManager.create(db_session, new_booking(
            vehicle.id, moderator_user.id, trip_start_time, end_time=trip_start_time - timedelta(minutes=1)
        ))


@pytest.mark.asyncio
async def test_booking_unknown_user_rejected(db_session, make_vehicle, trip_start_time):
    vehicle = await make_vehicle()

    with pytest.raises(NotFoundError):
        await BookingManager.create(db_session, new_booking(vehicle.id, 777, trip_start_time))


@pytest.mark.asyncio
async def test_status_flow(db_session, moderator_user, make_vehicle, trip_start_time):
    vehicle = await make_vehicle()
    booking = await BookingManager.create(db_session, new_booking(vehicle.id, moderator_user.id, trip_start_time))

    booking = await BookingManager.update(db_session, booking.id, BookingUpdate(status=BookingStatus.APPROVED))
    assert booking.status == BookingStatus.APPROVED

    # Re-submitting the current status is accepted
    booking = await BookingManager.update(db_session, booking.id, BookingUpdate(status=BookingStatus.APPROVED))
    assert booking.status == BookingStatus.APPROVED

    booking = await BookingManager.update(db_session, booking.id, BookingUpdate(status=BookingStatus.COMPLETED))
    assert booking.status == BookingStatus.COMPLETED

    with pytest.raises(ConflictError):
        await BookingManager.update(db_session, booking.id, BookingUpdate(status=BookingStatus.PENDING))


@pytest.mark.asyncio
async def test_declined_booking_is_terminal(db_session, moderator_user, make_vehicle, trip_start_time):
    vehicle = await make_vehicle()
    booking = await BookingManager.create(db_session, new_booking(vehicle.id, moderator_user.id, trip_start_time))
    await BookingManager.update(db_session, booking.id, BookingUpdate(status=BookingStatus.DECLINED))

    with pytest.raises(ConflictError):
        await BookingManager.update(db_session, booking.id, BookingUpdate(status=BookingStatus.APPROVED))


@pytest.mark.asyncio
async def test_update_rechecks_merged_window(db_session, moderator_user, make_vehicle, trip_start_time):
    vehicle = await make_vehicle()
    booking = await BookingManager.create(db_session, new_booking(vehicle.id, moderator_user.id, trip_start_time))

    with pytest.raises(ValidationError):
        await BookingManager.update(db_session, booking.id, BookingUpdate(
            start_time=trip_start_time + timedelta(days=1)
        ))


@pytest.mark.asyncio
async def test_delete_and_lists(db_session, moderator_user, admin_user, make_vehicle, trip_start_time):
    vehicle = await make_vehicle()
    mine = await BookingManager.create(db_session, new_booking(vehicle.id, moderator_user.id, trip_start_time))
    theirs = await BookingManager.create(db_session, new_booking(
        vehicle.id, admin_user.id, trip_start_time + timedelta(days=2)
    ))

    assert [b.id for b in await BookingManager.list_for_user(db_session, moderator_user.id)] == [mine.id]
    assert {b.id for b in await BookingManager.list_all(db_session)} == {mine.id, theirs.id}

    await BookingManager.delete(db_session, mine.id)
    assert [b.id for b in await BookingManager.list_all(db_session)] == [theirs.id]

    with pytest.raises(NotFoundError):
        await BookingManager.delete(db_session, mine.id)


@pytest.mark.asyncio
async def test_booking_vehicle_in_use_rejected(db_session, moderator_user, make_vehicle, trip_start_time):
    vehicle = await make_vehicle(status=VehicleStatus.IN_USE)
    vehicle_id, user_id = vehicle.id, moderator_user.id

    with pytest.raises(ConflictError) as exc_info:
        await BookingManager.create(db_session, new_booking(vehicle_id, user_id, trip_start_time))

    assert exc_info.value.message == "Vehicle not available (status: in_use)"
    assert await BookingManager.list_all(db_session) == []


@pytest.mark.asyncio
async def test_booking_unknown_vehicle_rejected(db_session, moderator_user, trip_start_time):
    with pytest.raises(NotFoundError) as exc_info:
        await BookingManager.create(db_session, new_booking(4242, moderator_user.id, trip_start_time))

    assert exc_info.value.message == "Vehicle with ID 4242 not found"
    assert await BookingManager.list_all(db_session) == []

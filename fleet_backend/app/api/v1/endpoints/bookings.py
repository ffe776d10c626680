"""
Booking API Endpoints.

Any authenticated user can book an available vehicle. The booking's user
or staff may update it; only admins delete bookings.
"""

from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_backend.app.db.session import get_db
from fleet_backend.app.schemas.auth import MessageResponse
from fleet_backend.app.schemas.booking import BookingCreate, BookingUpdate, BookingResponse
from fleet_backend.app.core.dependencies import get_current_user
from fleet_backend.app.core.guards import require_admin, enforce_owner_or_staff
from fleet_backend.app.services.audit import log_actor_event, AuditAction
from fleet_backend.app.services.booking_manager import BookingManager

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.get("", response_model=List[BookingResponse])
async def list_bookings(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    bookings = await BookingManager.list_all(db)
    return [BookingResponse.model_validate(b) for b in bookings]


@router.get("/vehicle/{vehicle_id}", response_model=List[BookingResponse])
async def list_vehicle_bookings(
    vehicle_id: int,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    bookings = await BookingManager.list_for_vehicle(db, vehicle_id)
    return [BookingResponse.model_validate(b) for b in bookings]


@router.get("/user/{user_id}", response_model=List[BookingResponse])
async def list_user_bookings(
    user_id: int,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """A user's bookings. Users see their own; staff see anyone's."""
    enforce_owner_or_staff(user_id, current_user, "user's bookings")
    bookings = await BookingManager.list_for_user(db, user_id)
    return [BookingResponse.model_validate(b) for b in bookings]


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: int,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    booking = await BookingManager.get(db, booking_id)
    return BookingResponse.model_validate(booking)


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Book a vehicle.

    Returns 409 when the vehicle is not available.
    """
    booking = await BookingManager.create(db, booking_data)
    response = BookingResponse.model_validate(booking)

    await log_actor_event(
        db=db,
        action=AuditAction.BOOKING_CREATED,
        current_user=current_user,
        entity_type="booking",
        entity_id=response.id,
        metadata={"vehicle_id": response.vehicle_id, "user_id": response.user_id}
    )

    return response


@router.put("/{booking_id}", response_model=BookingResponse)
async def update_booking(
    booking_id: int,
    patch: BookingUpdate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    booking = await BookingManager.get(db, booking_id)
    enforce_owner_or_staff(booking.user_id, current_user, "booking")
    previous_status = booking.status

    booking = await BookingManager.update(db, booking_id, patch)
    response = BookingResponse.model_validate(booking)

    if response.status != previous_status:
        await log_actor_event(
            db=db,
            action=AuditAction.BOOKING_STATUS_CHANGED,
            current_user=current_user,
            entity_type="booking",
            entity_id=booking_id,
            metadata={"from": previous_status.value, "to": response.status.value}
        )

    return response


@router.delete("/{booking_id}", response_model=MessageResponse)
async def delete_booking(
    booking_id: int,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await BookingManager.delete(db, booking_id)

    await log_actor_event(
        db=db,
        action=AuditAction.BOOKING_DELETED,
        current_user=admin,
        entity_type="booking",
        entity_id=booking_id
    )

    return MessageResponse(message="Booking deleted successfully")

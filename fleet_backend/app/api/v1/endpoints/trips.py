"""
Trip API Endpoints.

Staff create trips; the assigned driver or staff update them (start,
complete, cancel); only admins delete them.
"""

from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_backend.app.db.session import get_db
from fleet_backend.app.models.trip_enums import TripStatus
from fleet_backend.app.schemas.auth import MessageResponse
from fleet_backend.app.schemas.trip import TripCreate, TripUpdate, TripResponse
from fleet_backend.app.core.dependencies import get_current_user
from fleet_backend.app.core.guards import (
    require_admin, require_role, enforce_owner_or_staff, STAFF_ROLES
)
from fleet_backend.app.services.audit import log_actor_event, AuditAction
from fleet_backend.app.services.trip_manager import TripManager

router = APIRouter(prefix="/trips", tags=["Trips"])

# Audit action for each status a trip can move into
TRANSITION_ACTIONS = {
    TripStatus.IN_PROGRESS: AuditAction.TRIP_STARTED,
    TripStatus.COMPLETED: AuditAction.TRIP_COMPLETED,
    TripStatus.CANCELLED: AuditAction.TRIP_CANCELLED,
}


@router.get("/vehicle/{vehicle_id}", response_model=List[TripResponse])
async def list_vehicle_trips(
    vehicle_id: int,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    trips = await TripManager.list_for_vehicle(db, vehicle_id)
    return [TripResponse.model_validate(t) for t in trips]


@router.get("/driver/{driver_id}", response_model=List[TripResponse])
async def list_driver_trips(
    driver_id: int,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """A driver's trips. Drivers see their own; staff see anyone's."""
    enforce_owner_or_staff(driver_id, current_user, "driver's trips")
    trips = await TripManager.list_for_driver(db, driver_id)
    return [TripResponse.model_validate(t) for t in trips]


@router.get("/active", response_model=List[TripResponse])
async def list_active_trips(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    trips = await TripManager.list_active(db)
    return [TripResponse.model_validate(t) for t in trips]


@router.get("/{trip_id}", response_model=TripResponse)
async def get_trip(
    trip_id: int,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    trip = await TripManager.get(db, trip_id)
    return TripResponse.model_validate(trip)


@router.post("", response_model=TripResponse, status_code=status.HTTP_201_CREATED)
async def create_trip(
    trip_data: TripCreate,
    current_user: dict = Depends(require_role(STAFF_ROLES)),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a trip.

    A trip created `in_progress` starts immediately and takes its vehicle
    `in_use`; 409 if the vehicle is not available.
    """
    trip = await TripManager.create(db, trip_data)
    response = TripResponse.model_validate(trip)

    await log_actor_event(
        db=db,
        action=AuditAction.TRIP_STARTED if response.status == TripStatus.IN_PROGRESS else AuditAction.TRIP_CREATED,
        current_user=current_user,
        entity_type="trip",
        entity_id=response.id,
        metadata={"vehicle_id": response.vehicle_id, "driver_id": response.driver_id}
    )

    return response


@router.put("/{trip_id}", response_model=TripResponse)
async def update_trip(
    trip_id: int,
    patch: TripUpdate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Update a trip. Status changes start, complete or cancel it.

    Completing requires `end_odometer`; the vehicle's mileage is raised to
    that reading.
    """
    trip = await TripManager.get(db, trip_id)
    enforce_owner_or_staff(trip.driver_id, current_user, "trip")
    previous_status = trip.status

    trip = await TripManager.update(db, trip_id, patch)
    response = TripResponse.model_validate(trip)

    if response.status != previous_status:
        await log_actor_event(
            db=db,
            action=TRANSITION_ACTIONS[response.status],
            current_user=current_user,
            entity_type="trip",
            entity_id=trip_id,
            metadata={
                "vehicle_id": response.vehicle_id,
                "from": previous_status.value,
                "end_odometer": response.end_odometer
            }
        )

    return response


@router.delete("/{trip_id}", response_model=MessageResponse)
async def delete_trip(
    trip_id: int,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Delete a trip (admin-only). 409 while the trip is in progress."""
    await TripManager.delete(db, trip_id)

    await log_actor_event(
        db=db,
        action=AuditAction.TRIP_DELETED,
        current_user=admin,
        entity_type="trip",
        entity_id=trip_id
    )

    return MessageResponse(message="Trip deleted successfully")

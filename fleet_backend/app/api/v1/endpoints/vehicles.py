"""
Vehicle API Endpoints.

Any authenticated user can view vehicles; staff create and update them;
only admins delete them.
"""

import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_backend.app.db.session import get_db
from fleet_backend.app.models.vehicle_enums import VehicleStatus
from fleet_backend.app.schemas.vehicle import (
    VehicleCreate, VehicleUpdate, VehicleResponse, VehicleDeleteResponse
)
from fleet_backend.app.core.dependencies import get_current_user
from fleet_backend.app.core.guards import require_admin, require_role, STAFF_ROLES
from fleet_backend.app.services.audit import log_actor_event, AuditAction
from fleet_backend.app.services.vehicle_registry import VehicleRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/vehicles", tags=["Vehicles"])


@router.get("", response_model=List[VehicleResponse])
async def list_vehicles(
    status_filter: Optional[VehicleStatus] = Query(None, alias="status"),
    make: Optional[str] = None,
    year: Optional[int] = None,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List vehicles, filtered by status, make and year."""
    vehicles = await VehicleRegistry.list(db, status=status_filter, make=make, year=year)
    return [VehicleResponse.model_validate(v) for v in vehicles]


@router.get("/{vehicle_id}", response_model=VehicleResponse)
async def get_vehicle(
    vehicle_id: int,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    vehicle = await VehicleRegistry.get(db, vehicle_id)
    return VehicleResponse.model_validate(vehicle)


@router.post("", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    vehicle_data: VehicleCreate,
    current_user: dict = Depends(require_role(STAFF_ROLES)),
    db: AsyncSession = Depends(get_db)
):
    vehicle = await VehicleRegistry.create(db, vehicle_data)
    response = VehicleResponse.model_validate(vehicle)

    await log_actor_event(
        db=db,
        action=AuditAction.VEHICLE_CREATED,
        current_user=current_user,
        entity_type="vehicle",
        entity_id=vehicle.id,
        metadata={"registration_number": vehicle.registration_number}
    )

    return response


@router.put("/{vehicle_id}", response_model=VehicleResponse)
async def update_vehicle(
    vehicle_id: int,
    patch: VehicleUpdate,
    current_user: dict = Depends(require_role(STAFF_ROLES)),
    db: AsyncSession = Depends(get_db)
):
    """
    Update vehicle details.

    Setting `status` here bypasses the trip and maintenance lifecycle and is
    recorded as an administrative override.
    """
    previous_status = (await VehicleRegistry.get(db, vehicle_id)).status
    vehicle = await VehicleRegistry.update(db, vehicle_id, patch)
    response = VehicleResponse.model_validate(vehicle)

    if vehicle.status != previous_status:
        logger.warning(
            "Vehicle %s status overridden by %s: %s -> %s",
            vehicle_id, current_user.get("sub"), previous_status.value, vehicle.status.value
        )
        await log_actor_event(
            db=db,
            action=AuditAction.VEHICLE_STATUS_OVERRIDDEN,
            current_user=current_user,
            entity_type="vehicle",
            entity_id=vehicle_id,
            metadata={"from": previous_status.value, "to": vehicle.status.value}
        )
    else:
        await log_actor_event(
            db=db,
            action=AuditAction.VEHICLE_UPDATED,
            current_user=current_user,
            entity_type="vehicle",
            entity_id=vehicle_id,
            metadata={"fields": sorted(patch.model_fields_set)}
        )

    return response


@router.delete("/{vehicle_id}", response_model=VehicleDeleteResponse)
async def delete_vehicle(
    vehicle_id: int,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Delete a vehicle (admin-only).

    Returns 409 while maintenance, trip or booking records reference it.
    """
    await VehicleRegistry.delete(db, vehicle_id)

    await log_actor_event(
        db=db,
        action=AuditAction.VEHICLE_DELETED,
        current_user=admin,
        entity_type="vehicle",
        entity_id=vehicle_id
    )

    return VehicleDeleteResponse(vehicle_id=vehicle_id)

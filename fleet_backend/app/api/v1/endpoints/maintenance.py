"""
Maintenance API Endpoints.
"""

from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_backend.app.db.session import get_db
from fleet_backend.app.models.maintenance_enums import MaintenanceStatus
from fleet_backend.app.schemas.auth import MessageResponse
from fleet_backend.app.schemas.maintenance import MaintenanceCreate, MaintenanceUpdate, MaintenanceResponse
from fleet_backend.app.core.dependencies import get_current_user
from fleet_backend.app.core.guards import require_admin, require_role, STAFF_ROLES
from fleet_backend.app.services.audit import log_actor_event, AuditAction
from fleet_backend.app.services.maintenance_manager import MaintenanceManager

router = APIRouter(prefix="/maintenance", tags=["Maintenance"])


@router.get("/vehicle/{vehicle_id}", response_model=List[MaintenanceResponse])
async def list_vehicle_maintenance(
    vehicle_id: int,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    records = await MaintenanceManager.list_for_vehicle(db, vehicle_id)
    return [MaintenanceResponse.model_validate(r) for r in records]


@router.get("/upcoming", response_model=List[MaintenanceResponse])
async def list_upcoming_maintenance(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Open maintenance jobs, earliest first."""
    records = await MaintenanceManager.list_upcoming(db)
    return [MaintenanceResponse.model_validate(r) for r in records]


@router.get("/{record_id}", response_model=MaintenanceResponse)
async def get_maintenance(
    record_id: int,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    record = await MaintenanceManager.get(db, record_id)
    return MaintenanceResponse.model_validate(record)


@router.post("", response_model=MaintenanceResponse, status_code=status.HTTP_201_CREATED)
async def create_maintenance(
    data: MaintenanceCreate,
    current_user: dict = Depends(require_role(STAFF_ROLES)),
    db: AsyncSession = Depends(get_db)
):
    """Schedule maintenance; an available vehicle moves to `maintenance`."""
    record = await MaintenanceManager.create(db, data)
    response = MaintenanceResponse.model_validate(record)

    await log_actor_event(
        db=db,
        action=AuditAction.MAINTENANCE_SCHEDULED,
        current_user=current_user,
        entity_type="maintenance",
        entity_id=response.id,
        metadata={"vehicle_id": response.vehicle_id, "type": response.type.value}
    )

    return response


@router.put("/{record_id}", response_model=MaintenanceResponse)
async def update_maintenance(
    record_id: int,
    patch: MaintenanceUpdate,
    current_user: dict = Depends(require_role(STAFF_ROLES)),
    db: AsyncSession = Depends(get_db)
):
    previous_status = (await MaintenanceManager.get(db, record_id)).status
    record = await MaintenanceManager.update(db, record_id, patch)
    response = MaintenanceResponse.model_validate(record)

    if response.status == MaintenanceStatus.COMPLETED and previous_status != MaintenanceStatus.COMPLETED:
        await log_actor_event(
            db=db,
            action=AuditAction.MAINTENANCE_COMPLETED,
            current_user=current_user,
            entity_type="maintenance",
            entity_id=record_id,
            metadata={"vehicle_id": response.vehicle_id, "cost": response.cost}
        )

    return response


@router.delete("/{record_id}", response_model=MessageResponse)
async def delete_maintenance(
    record_id: int,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Delete a maintenance record (admin-only). 409 while in progress."""
    await MaintenanceManager.delete(db, record_id)

    await log_actor_event(
        db=db,
        action=AuditAction.MAINTENANCE_DELETED,
        current_user=admin,
        entity_type="maintenance",
        entity_id=record_id
    )

    return MessageResponse(message="Maintenance record deleted successfully")

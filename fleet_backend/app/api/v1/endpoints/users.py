"""
User Management API Endpoints.

Staff can list users; only admins create and delete them. User actions are
written to the audit log.
"""

from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from fleet_backend.app.db.session import get_db
from fleet_backend.app.models.booking import Booking
from fleet_backend.app.models.enums import UserRole
from fleet_backend.app.models.trip import Trip
from fleet_backend.app.models.user import User
from fleet_backend.app.models.vehicle import Vehicle
from fleet_backend.app.schemas.auth import UserCreate, UserResponse, MessageResponse
from fleet_backend.app.core.exceptions import ConflictError, ValidationError
from fleet_backend.app.core.guards import require_admin, require_role, STAFF_ROLES
from fleet_backend.app.core.security import get_password_hash
from fleet_backend.app.services.audit import log_actor_event, AuditAction

router = APIRouter(prefix="/users", tags=["Users"])

# Records that keep a user from being deleted
USER_REFERENCES = (
    (Trip.driver_id, "trips"),
    (Booking.user_id, "bookings"),
    (Vehicle.assigned_to_id, "vehicle assignments"),
)


@router.get("", response_model=List[UserResponse])
async def list_users(
    current_user: dict = Depends(require_role(STAFF_ROLES)),
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(select(User).order_by(User.id))
    return [UserResponse.model_validate(user) for user in result.scalars().all()]


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Create an admin or moderator account (admin-only).

    Raises:
        400: Username already exists
    """
    result = await db.execute(select(User).where(User.username == user_data.username))
    if result.scalar_one_or_none():
        raise ValidationError("Username already exists", details={"username": user_data.username})

    new_user = User(
        username=user_data.username,
        hashed_password=get_password_hash(user_data.password),
        name=user_data.name,
        role=user_data.role,
        position=user_data.position,
        email=user_data.email,
        phone=user_data.phone
    )

    db.add(new_user)
    await db.commit()
    await db.refresh(new_user)
    response = UserResponse.model_validate(new_user)

    await log_actor_event(
        db=db,
        action=AuditAction.USER_CREATED,
        current_user=admin,
        entity_type="user",
        entity_id=new_user.id,
        metadata={"username": new_user.username, "role": new_user.role.value}
    )

    return response


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: int,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Delete a user (admin-only).

    Admins cannot delete themselves or other admins. Users still referenced
    by trips, bookings or vehicle assignments cannot be deleted.
    """
    # Prevent deleting self
    if user_id == admin["user_id"]:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete your own account"
        )

    target_user = await db.get(User, user_id)
    if not target_user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    # Prevent deleting another admin
    if target_user.role == UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Cannot delete admin users"
        )

    for column, label in USER_REFERENCES:
        count = (await db.execute(select(func.count()).where(column == user_id))).scalar()
        if count:
            raise ConflictError(
                f"Cannot delete user referenced by {label}",
                details={"user_id": user_id, "references": label, "count": count}
            )

    username = target_user.username
    await db.delete(target_user)
    await db.commit()

    await log_actor_event(
        db=db,
        action=AuditAction.USER_DELETED,
        current_user=admin,
        entity_type="user",
        entity_id=user_id,
        metadata={"username": username}
    )

    return MessageResponse(message="User deleted successfully")

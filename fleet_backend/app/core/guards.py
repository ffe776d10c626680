"""
Security guards for role-based and ownership-based access control.

Provides dependencies for protecting endpoints.
"""

from typing import List
from fastapi import Depends, HTTPException, status
from fleet_backend.app.models.enums import UserRole
from fleet_backend.app.core.dependencies import get_current_user

STAFF_ROLES = [UserRole.ADMIN, UserRole.MODERATOR]


def require_role(allowed_roles: List[UserRole]):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.post("/vehicles")
        async def create_vehicle(current_user: dict = Depends(require_role(STAFF_ROLES))):
            ...

    Raises:
        HTTPException 403 if user role is not in allowed_roles
    """
    async def role_checker(current_user: dict = Depends(get_current_user)) -> dict:
        user_role_str = current_user.get("role")

        if not user_role_str:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Role information missing from token"
            )

        try:
            user_role = UserRole(user_role_str)
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid role in token"
            )

        if user_role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required role: {', '.join([r.value for r in allowed_roles])}"
            )

        return current_user

    return role_checker


def require_admin(current_user: dict = Depends(get_current_user)) -> dict:
    """
    Dependency for admin-only endpoints.

    Returns:
        User payload if admin, raises 403 otherwise
    """
    if current_user.get("role") != UserRole.ADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )

    return current_user


def is_owner_or_staff(resource_user_id: int, current_user: dict) -> bool:
    """
    Whether the current user owns the resource or holds a staff role.

    Admins and moderators can act on any booking or trip; other users only
    on the records that reference them.
    """
    if current_user.get("role") in [role.value for role in STAFF_ROLES]:
        return True
    return current_user.get("user_id") == resource_user_id


def enforce_owner_or_staff(resource_user_id: int, current_user: dict, resource_name: str = "resource"):
    """
    Raise 403 unless the current user owns the resource or is staff.
    """
    if not is_owner_or_staff(resource_user_id, current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Access denied. You do not have permission to access this {resource_name}."
        )

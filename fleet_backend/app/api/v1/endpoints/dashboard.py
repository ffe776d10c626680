"""
Dashboard API Endpoints.

Read-only dashboard data for any authenticated user.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from fleet_backend.app.db.session import get_db
from fleet_backend.app.core.dependencies import get_current_user
from fleet_backend.app.services.dashboard import DashboardService
from fleet_backend.app.schemas.dashboard import DashboardStats, VehicleUsage

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Vehicle counts by status, active trips and open maintenance."""
    return await DashboardService.get_stats(db)


@router.get("/vehicle-usage", response_model=List[VehicleUsage])
async def get_vehicle_usage(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Trips, distance, fuel and maintenance cost per vehicle."""
    return await DashboardService.get_vehicle_usage(db)

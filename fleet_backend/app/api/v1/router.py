"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from fleet_backend.app.api.v1.endpoints import (
    auth, users, vehicles, maintenance, trips, bookings, dashboard
)

router = APIRouter()

# Authentication and user management
router.include_router(auth.router)
router.include_router(users.router)

# Fleet records
router.include_router(vehicles.router)
router.include_router(maintenance.router)
router.include_router(trips.router)
router.include_router(bookings.router)

# Read-only aggregates
router.include_router(dashboard.router)

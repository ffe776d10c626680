"""
Vehicle Pydantic schemas.

Defines request and response models for the vehicle registry.
"""

from pydantic import BaseModel, Field, model_validator
from datetime import date
from typing import Optional

from fleet_backend.app.models.vehicle_enums import VehicleStatus
from fleet_backend.app.schemas.common import reject_explicit_nulls


class VehicleCreate(BaseModel):
    """Schema for registering a new vehicle."""
    make: str = Field(..., min_length=1, max_length=100)
    model: str = Field(..., min_length=1, max_length=100)
    year: int = Field(..., ge=1900, le=2100)
    registration_number: str = Field(..., min_length=1, max_length=50, description="Registration plate")
    vin: Optional[str] = Field(None, max_length=50)
    color: Optional[str] = Field(None, max_length=50)
    fuel_type: Optional[str] = Field(None, max_length=50, description="Fuel type (e.g., Diesel, Electric)")

    status: VehicleStatus = Field(default=VehicleStatus.AVAILABLE)
    mileage: int = Field(default=0, ge=0)
    assigned_to_id: Optional[int] = Field(None, description="User the vehicle is assigned to")

    purchase_date: Optional[date] = None
    notes: Optional[str] = None

    class Config:
        extra = "forbid"


class VehicleUpdate(BaseModel):
    """
    Patch for an existing vehicle.

    Setting `status` here is an administrative override of the lifecycle.
    """
    make: Optional[str] = Field(None, min_length=1, max_length=100)
    model: Optional[str] = Field(None, min_length=1, max_length=100)
    year: Optional[int] = Field(None, ge=1900, le=2100)
    registration_number: Optional[str] = Field(None, min_length=1, max_length=50)
    vin: Optional[str] = Field(None, max_length=50)
    color: Optional[str] = Field(None, max_length=50)
    fuel_type: Optional[str] = Field(None, max_length=50)
    status: Optional[VehicleStatus] = None
    mileage: Optional[int] = Field(None, ge=0)
    assigned_to_id: Optional[int] = None
    purchase_date: Optional[date] = None
    notes: Optional[str] = None

    class Config:
        extra = "forbid"

    @model_validator(mode="after")
    def check_required_columns(self):
        reject_explicit_nulls(self, ["make", "model", "year", "registration_number", "status", "mileage"])
        return self


class VehicleResponse(BaseModel):
    """Schema for vehicle response."""
    id: int
    make: str
    model: str
    year: int
    registration_number: str
    vin: Optional[str]
    color: Optional[str]
    fuel_type: Optional[str]
    status: VehicleStatus
    mileage: int
    assigned_to_id: Optional[int]
    purchase_date: Optional[date]
    notes: Optional[str]

    class Config:
        from_attributes = True


class VehicleDeleteResponse(BaseModel):
    """Response after deleting a vehicle."""
    vehicle_id: int
    message: str = "Vehicle deleted successfully"

"""
Maintenance schemas.
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional
import datetime as dt
from datetime import datetime

from fleet_backend.app.models.maintenance_enums import MaintenanceType, MaintenanceStatus
from fleet_backend.app.schemas.common import (
    coerce_calendar_date, normalize_timestamp, reject_explicit_nulls
)


class MaintenanceCreate(BaseModel):
    """Schema for scheduling a maintenance job."""
    vehicle_id: int
    type: MaintenanceType
    description: str = Field(..., min_length=1)
    date: dt.date
    cost: Optional[float] = Field(None, ge=0)
    odometer: Optional[int] = Field(None, ge=0, description="Reading for the record; does not change vehicle mileage")
    status: MaintenanceStatus = MaintenanceStatus.PENDING
    notes: Optional[str] = None
    completed_at: Optional[datetime] = None

    class Config:
        extra = "forbid"

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, value):
        return coerce_calendar_date(value)

    @field_validator("completed_at")
    @classmethod
    def normalize_completed_at(cls, value):
        return normalize_timestamp(value)


class MaintenanceUpdate(BaseModel):
    """Patch for a maintenance record. The vehicle cannot be changed."""
    type: Optional[MaintenanceType] = None
    description: Optional[str] = Field(None, min_length=1)
    date: Optional[dt.date] = None
    cost: Optional[float] = Field(None, ge=0)
    odometer: Optional[int] = Field(None, ge=0)
    status: Optional[MaintenanceStatus] = None
    notes: Optional[str] = None
    completed_at: Optional[datetime] = None

    class Config:
        extra = "forbid"

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, value):
        return coerce_calendar_date(value)

    @field_validator("completed_at")
    @classmethod
    def normalize_completed_at(cls, value):
        return normalize_timestamp(value)

    @model_validator(mode="after")
    def check_required_columns(self):
        reject_explicit_nulls(self, ["type", "description", "date", "status"])
        return self


class MaintenanceResponse(BaseModel):
    """Schema for maintenance response."""
    id: int
    vehicle_id: int
    type: MaintenanceType
    description: str
    date: dt.date
    cost: Optional[float]
    odometer: Optional[int]
    status: MaintenanceStatus
    notes: Optional[str]
    completed_at: Optional[datetime]

    class Config:
        from_attributes = True

"""
Trip schemas.

Schemas for trip creation, patches and responses.
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional
from datetime import datetime

from fleet_backend.app.models.trip_enums import TripStatus
from fleet_backend.app.schemas.common import normalize_timestamp, reject_explicit_nulls


class TripCreate(BaseModel):
    """
    Schema for creating a trip.

    Timestamps accept ISO-8601 strings or datetimes; odometer ordering is
    checked by the trip manager.
    """
    vehicle_id: int
    driver_id: int
    start_time: datetime
    start_odometer: int = Field(..., ge=0)
    end_time: Optional[datetime] = None
    end_odometer: Optional[int] = Field(None, ge=0)
    fuel_consumed: Optional[float] = Field(None, ge=0)
    purpose: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None
    status: TripStatus = TripStatus.PLANNED

    class Config:
        extra = "forbid"

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_times(cls, value):
        return normalize_timestamp(value)


class TripUpdate(BaseModel):
    """
    Patch for a trip.

    The vehicle cannot be changed; completing is a patch with
    status=completed plus end_time/end_odometer/fuel_consumed.
    """
    driver_id: Optional[int] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    start_odometer: Optional[int] = Field(None, ge=0)
    end_odometer: Optional[int] = Field(None, ge=0)
    fuel_consumed: Optional[float] = Field(None, ge=0)
    purpose: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None
    status: Optional[TripStatus] = None

    class Config:
        extra = "forbid"

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_times(cls, value):
        return normalize_timestamp(value)

    @model_validator(mode="after")
    def check_required_columns(self):
        reject_explicit_nulls(self, ["driver_id", "start_time", "start_odometer", "status"])
        return self


class TripResponse(BaseModel):
    """Schema for trip response."""
    id: int
    vehicle_id: int
    driver_id: int
    start_time: datetime
    end_time: Optional[datetime]
    start_odometer: int
    end_odometer: Optional[int]
    fuel_consumed: Optional[float]
    purpose: Optional[str]
    notes: Optional[str]
    status: TripStatus

    class Config:
        from_attributes = True

"""
Booking schemas.
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional
from datetime import datetime

from fleet_backend.app.models.booking_enums import BookingStatus
from fleet_backend.app.schemas.common import normalize_timestamp, reject_explicit_nulls


class BookingCreate(BaseModel):
    """Schema for reserving a vehicle."""
    vehicle_id: int
    user_id: int
    start_time: datetime
    end_time: datetime
    purpose: Optional[str] = Field(None, max_length=255)
    status: BookingStatus = BookingStatus.PENDING

    class Config:
        extra = "forbid"

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_times(cls, value):
        return normalize_timestamp(value)


class BookingUpdate(BaseModel):
    """Patch for a booking. Vehicle and user are fixed at creation."""
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    purpose: Optional[str] = Field(None, max_length=255)
    status: Optional[BookingStatus] = None

    class Config:
        extra = "forbid"

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_times(cls, value):
        return normalize_timestamp(value)

    @model_validator(mode="after")
    def check_required_columns(self):
        reject_explicit_nulls(self, ["start_time", "end_time", "status"])
        return self


class BookingResponse(BaseModel):
    """Schema for booking response."""
    id: int
    vehicle_id: int
    user_id: int
    start_time: datetime
    end_time: datetime
    purpose: Optional[str]
    status: BookingStatus
    created_at: datetime

    class Config:
        from_attributes = True

"""
Trip database model.

A trip occupies its vehicle while IN_PROGRESS.
"""

from sqlalchemy import Column, Integer, Float, String, Text, ForeignKey, DateTime, Enum
from fleet_backend.app.db.session import Base
from fleet_backend.app.models.trip_enums import TripStatus


class Trip(Base):
    """
    Trip model.

    Invariant: end_odometer, when set, is >= start_odometer.
    """
    __tablename__ = "trips"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    vehicle_id = Column(Integer, ForeignKey('vehicles.id'), nullable=False, index=True)
    driver_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)

    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=True)

    start_odometer = Column(Integer, nullable=False)
    end_odometer = Column(Integer, nullable=True)
    fuel_consumed = Column(Float, nullable=True)

    purpose = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    status = Column(Enum(TripStatus), default=TripStatus.PLANNED, nullable=False, index=True)

    def __repr__(self):
        return f"<Trip(id={self.id}, vehicle_id={self.vehicle_id}, status='{self.status.value}')>"

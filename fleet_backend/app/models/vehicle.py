"""
Vehicle database model.

The vehicle's status and mileage are the only fields written by more than one
lifecycle manager (trips, maintenance); see services/vehicle_locking.py.
"""

from sqlalchemy import Column, Integer, String, Text, Date, Enum, ForeignKey
from fleet_backend.app.db.session import Base
from fleet_backend.app.models.vehicle_enums import VehicleStatus


class Vehicle(Base):
    """
    Vehicle model.

    Status changes through trip start/completion, maintenance
    creation/completion, or an explicit administrative override.
    """
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Identification
    make = Column(String(100), nullable=False, index=True)
    model = Column(String(100), nullable=False)
    year = Column(Integer, nullable=False, index=True)
    registration_number = Column(String(50), nullable=False)
    vin = Column(String(50), nullable=True)
    color = Column(String(50), nullable=True)
    fuel_type = Column(String(50), nullable=True)  # e.g., "Diesel", "Petrol", "Electric"

    # Operational state
    status = Column(Enum(VehicleStatus), default=VehicleStatus.AVAILABLE, nullable=False, index=True)
    mileage = Column(Integer, default=0, nullable=False)
    assigned_to_id = Column(Integer, ForeignKey('users.id'), nullable=True, index=True)

    purchase_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)

    def __repr__(self):
        return f"<Vehicle(id={self.id}, registration='{self.registration_number}', status='{self.status.value}')>"

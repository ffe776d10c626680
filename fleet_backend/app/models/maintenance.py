"""
Maintenance record database model.
"""

from sqlalchemy import Column, Integer, Float, Text, Date, DateTime, Enum, ForeignKey
from fleet_backend.app.db.session import Base
from fleet_backend.app.models.maintenance_enums import MaintenanceType, MaintenanceStatus


class Maintenance(Base):
    """
    Maintenance model.

    An open (not COMPLETED) record holds its vehicle in `maintenance`.
    The odometer reading is kept for the record only; it never updates
    the vehicle's mileage.
    """
    __tablename__ = "maintenance"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    vehicle_id = Column(Integer, ForeignKey('vehicles.id'), nullable=False, index=True)

    type = Column(Enum(MaintenanceType), nullable=False)
    description = Column(Text, nullable=False)
    date = Column(Date, nullable=False, index=True)

    cost = Column(Float, nullable=True)
    odometer = Column(Integer, nullable=True)

    status = Column(Enum(MaintenanceStatus), default=MaintenanceStatus.PENDING, nullable=False, index=True)
    notes = Column(Text, nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<Maintenance(id={self.id}, vehicle_id={self.vehicle_id}, status='{self.status.value}')>"

"""
User database model.

Users are the fleet's employees: they log in, drive trips and make bookings.
"""

from sqlalchemy import Column, Integer, String, Enum
from fleet_backend.app.db.session import Base
from fleet_backend.app.models.enums import UserRole


class User(Base):
    """
    User model for authentication and staff records.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    username = Column(String(100), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    name = Column(String(200), nullable=False)

    role = Column(Enum(UserRole), default=UserRole.MODERATOR, nullable=False)

    # Employee details
    position = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}', role='{self.role.value}')>"

"""
Authentication and user Pydantic schemas.
"""

from pydantic import BaseModel, Field
from typing import Optional
from fleet_backend.app.models.enums import UserRole


class UserCreate(BaseModel):
    """
    Schema for creating a user (admin only).

    Default role is MODERATOR.
    """
    username: str = Field(..., min_length=3, max_length=50, description="Unique username")
    password: str = Field(..., min_length=6, description="Password (min 6 characters)")
    name: str = Field(..., min_length=1, max_length=200)
    role: UserRole = Field(default=UserRole.MODERATOR)
    position: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)

    class Config:
        extra = "forbid"


class UserLogin(BaseModel):
    """Schema for user login."""
    username: str
    password: str


class UserResponse(BaseModel):
    """
    Schema for user information. Never includes the password hash.
    """
    id: int
    username: str
    name: str
    role: UserRole
    position: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    """Schema for JWT token response returned by login."""
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer")
    user: UserResponse


class MessageResponse(BaseModel):
    """Plain acknowledgement."""
    message: str

"""
User contracts (API request/response schemas).
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from folio.models.enums import UserRole


class UserCreate(BaseModel):
    """User creation request (Super Admin only)."""

    username: str = Field(..., min_length=3, max_length=64, pattern=r"^[A-Za-z0-9_.-]+$")
    email: EmailStr
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    avatar: str | None = Field(default=None, max_length=1024)
    bio: str | None = None
    role: UserRole = UserRole.USER


class UserRoleUpdate(BaseModel):
    """Role change request."""

    role: UserRole


class UserPublic(BaseModel):
    """User response model."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    avatar: str | None = None
    bio: str | None = None
    role: UserRole
    is_active: bool
    created_at: datetime

"""User profile schemas for request/response validation."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from app.core.permissions import UserRole


class ProfileResponse(BaseModel):
    """Profile schema for API responses."""

    id: UUID
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    role: UserRole
    hospital: str | None = None
    clinic: str | None = None
    specialty: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProfileListResponse(BaseModel):
    """Schema for profile listing."""

    total: int
    items: list[ProfileResponse]


class RoleUpdate(BaseModel):
    """Schema for changing a user's role."""

    role: UserRole

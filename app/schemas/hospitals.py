"""Hospital schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class HospitalCreate(BaseModel):
    """Schema for registering a hospital."""

    name: str = Field(..., min_length=1, max_length=200)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        """Reject names that are blank once trimmed."""
        v = v.strip()
        if not v:
            raise ValueError("Hospital name is required")
        return v


class HospitalResponse(BaseModel):
    """Hospital with its derived user count."""

    id: UUID
    name: str
    user_count: int = 0
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class HospitalListResponse(BaseModel):
    """Schema for hospital listing."""

    total: int
    items: list[HospitalResponse]

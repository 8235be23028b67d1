"""Appointment schemas for request/response validation."""

import datetime as dt
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.core.status import UiStatus


class DateRange(str, Enum):
    """Calendar window applied to appointment listings."""

    TODAY = "today"
    UPCOMING = "upcoming"
    PAST = "past"
    ALL = "all"


class AppointmentBase(BaseModel):
    """Fields shared by the scheduling payload and stored appointments."""

    patient_id: str
    patient_name: str
    gender: str | None = None
    phone_number: str | None = None
    email: str | None = None
    address: str | None = None
    occupation: str | None = None
    has_insurance: bool = False
    insurance_number: str | None = None
    date: dt.date
    time: str
    purpose: str
    diagnosis: str | None = None
    notes: str | None = None
    hospital: str | None = None
    clinic: str | None = None


class AppointmentCreate(AppointmentBase):
    """Schema for scheduling a new appointment (always starts pending)."""

    patient_id: str = Field(..., min_length=1, max_length=100)
    patient_name: str = Field(..., min_length=1, max_length=200)
    gender: str | None = Field(None, max_length=20)
    phone_number: str | None = Field(None, max_length=20)
    email: str | None = Field(None, max_length=254)
    time: str = Field(..., pattern=r"^([01]\d|2[0-3]):[0-5]\d$", description="Wall-clock HH:MM")
    purpose: str = Field(..., min_length=1, max_length=200)
    diagnosis: str | None = Field(None, max_length=500)
    notes: str | None = Field(None, max_length=1000)
    hospital: str | None = Field(None, max_length=200)
    clinic: str | None = Field(None, max_length=200)

    @field_validator("phone_number")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        """Validate phone number format."""
        if v is None:
            return v
        cleaned = (
            v.replace("-", "").replace(" ", "").replace("(", "").replace(")", "").replace("+", "")
        )
        if not cleaned.isdigit():
            raise ValueError("Phone number must contain only digits and separators")
        if len(cleaned) < 7:
            raise ValueError("Phone number must have at least 7 digits")
        return v


class AppointmentResponse(AppointmentBase):
    """Appointment as handed to clients, status in UI vocabulary.

    Stored values are returned as they are; input checks apply only when
    scheduling.
    """

    id: UUID
    status: str
    next_review_date: dt.date | None = None
    created_at: dt.datetime
    updated_at: dt.datetime

    model_config = {"from_attributes": True}


class AppointmentListResponse(BaseModel):
    """Schema for appointment list response."""

    total: int
    items: list[AppointmentResponse]


class AppointmentFilters(BaseModel):
    """Schema for appointment filtering."""

    status: str = Field(default="all", description="'all' or a status token")
    date_range: DateRange = DateRange.UPCOMING
    hospital: str | None = None


class StatusChangeRequest(BaseModel):
    """Schema for requesting a status change (UI vocabulary, any case)."""

    status: str = Field(..., min_length=1, max_length=20)


class AttendCompletion(BaseModel):
    """Second step of the attend flow; ``null`` explicitly declines a review."""

    next_review_date: dt.date | None = Field(...)


class PendingReviewDecision(BaseModel):
    """Returned when marking attended: nothing is persisted until a review decision."""

    appointment_id: UUID
    current_status: str
    target_status: str = UiStatus.ATTENDED.value
    requires_review_decision: bool = True
    message: str = "Supply next_review_date (or null) to complete the appointment"


class SweepResult(BaseModel):
    """Outcome of one overdue sweep pass."""

    reclassified: list[UUID] = Field(default_factory=list)
    skipped: list[UUID] = Field(default_factory=list)
    failed: list[UUID] = Field(default_factory=list)

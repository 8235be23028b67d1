"""Appointment endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from app.core.permissions import APPOINTMENT_MANAGERS, CallerContext
from app.dependencies import Caller, DatabaseSession, require_roles
from app.schemas.appointments import (
    AppointmentCreate,
    AppointmentFilters,
    AppointmentListResponse,
    AppointmentResponse,
    AttendCompletion,
    DateRange,
    PendingReviewDecision,
    StatusChangeRequest,
    SweepResult,
)
from app.services.appointment_service import AppointmentService
from app.services.appointment_status_service import AppointmentStatusService
from app.services.overdue_sweep import OverdueSweepService

router = APIRouter()

require_appointment_manager = require_roles(*APPOINTMENT_MANAGERS)


@router.post(
    "/",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Schedule new appointment",
)
async def create_appointment(
    data: AppointmentCreate,
    db: DatabaseSession,
    caller: CallerContext = Depends(require_appointment_manager),
) -> AppointmentResponse:
    """
    Schedule an appointment; it always starts pending.

    Callers other than super admins are pinned to their own hospital.
    """
    service = AppointmentService(db)
    return await service.create_appointment(caller, data)


@router.get(
    "/",
    response_model=AppointmentListResponse,
    status_code=status.HTTP_200_OK,
    summary="List appointments",
)
async def list_appointments(
    caller: Caller,
    db: DatabaseSession,
    status_filter: str = Query("all", alias="status", description="'all' or a status"),
    date_range: DateRange = Query(DateRange.UPCOMING),
    hospital: str | None = Query(None, description="Hospital name (super admins only)"),
) -> AppointmentListResponse:
    """
    List appointments visible to the caller.

    Args:
        caller: Authenticated caller
        db: Database session
        status_filter: Filter by status
        date_range: today, upcoming, past or all
        hospital: Requested hospital, ignored for scoped roles

    Returns:
        Appointments ordered by date descending, then time ascending
    """
    filters = AppointmentFilters(status=status_filter, date_range=date_range, hospital=hospital)
    service = AppointmentService(db)
    return await service.list_appointments(caller, filters)


@router.post(
    "/overdue-sweep",
    response_model=SweepResult,
    status_code=status.HTTP_200_OK,
    summary="Mark overdue pending appointments as missed",
)
async def sweep_overdue_appointments(
    db: DatabaseSession,
    caller: CallerContext = Depends(require_appointment_manager),
) -> SweepResult:
    """Run one overdue sweep pass over the caller's visible appointments."""
    service = OverdueSweepService(db)
    return await service.sweep_for_caller(caller)


@router.get(
    "/{appointment_id}",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    summary="Get appointment by ID",
)
async def get_appointment(
    appointment_id: UUID,
    caller: Caller,
    db: DatabaseSession,
) -> AppointmentResponse:
    """Get a specific appointment within the caller's scope."""
    service = AppointmentService(db)
    return await service.get_appointment(caller, appointment_id)


@router.patch(
    "/{appointment_id}/status",
    response_model=AppointmentResponse | PendingReviewDecision,
    status_code=status.HTTP_200_OK,
    summary="Change appointment status",
    responses={
        status.HTTP_202_ACCEPTED: {
            "model": PendingReviewDecision,
            "description": "Attended requires a review decision before anything is saved",
        }
    },
)
async def change_appointment_status(
    appointment_id: UUID,
    data: StatusChangeRequest,
    response: Response,
    db: DatabaseSession,
    caller: CallerContext = Depends(require_appointment_manager),
) -> AppointmentResponse | PendingReviewDecision:
    """
    Change an appointment's status (UI vocabulary).

    ``attended`` is not saved here: the response is a 202 asking for the
    next review decision, to be sent to ``/attend``.
    """
    service = AppointmentStatusService(db)
    result = await service.change_status(caller, appointment_id, data.status)
    if isinstance(result, PendingReviewDecision):
        response.status_code = status.HTTP_202_ACCEPTED
    return result


@router.post(
    "/{appointment_id}/attend",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    summary="Complete an attended appointment",
)
async def complete_attended_appointment(
    appointment_id: UUID,
    data: AttendCompletion,
    db: DatabaseSession,
    caller: CallerContext = Depends(require_appointment_manager),
) -> AppointmentResponse:
    """Mark the appointment attended with its next review date (or none)."""
    service = AppointmentStatusService(db)
    return await service.complete_attend(caller, appointment_id, data.next_review_date)

"""Appointment status transitions, including the two-step attend flow."""

from datetime import UTC, date, datetime
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    BadRequestException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
    PersistenceException,
)
from app.core.permissions import CallerContext
from app.core.status import (
    TERMINAL_UI_STATUSES,
    UiStatus,
    is_storage_status,
    is_ui_status,
    to_storage,
    to_ui,
)
from app.models.appointments import appointments
from app.schemas.appointments import AppointmentResponse, PendingReviewDecision
from app.services.appointment_service import AppointmentService, to_response
from app.services.audit_service import AuditLogService

logger = structlog.get_logger()


def check_transition(current: str, target: str) -> None:
    """
    Validate a UI-vocabulary transition.

    Only ``pending`` appointments move, and only to a terminal status.

    Raises:
        ConflictException: If the transition is not allowed
    """
    details = {"current_status": current, "target_status": target}
    if target == UiStatus.PENDING.value:
        raise ConflictException("Appointments cannot be moved back to pending", details)
    if current in TERMINAL_UI_STATUSES:
        raise ConflictException(f"Appointment is already {current}", details)
    if current != UiStatus.PENDING.value:
        raise ConflictException(f"Appointment has an unrecognized status: {current}", details)


class AppointmentStatusService:
    """
    Service validating and applying appointment status changes.

    Marking an appointment attended is a two-phase request: ``begin_attend``
    only validates and returns a :class:`PendingReviewDecision`;
    ``complete_attend`` persists the status together with the (possibly null)
    next review date.
    """

    def __init__(self, db: AsyncSession, audit: AuditLogService | None = None):
        """Initialize service with database session."""
        self.db = db
        self.audit = audit or AuditLogService(db)
        self.appointments = AppointmentService(db, self.audit)

    async def change_status(
        self,
        caller: CallerContext,
        appointment_id: UUID,
        target_status: str,
    ) -> AppointmentResponse | PendingReviewDecision:
        """
        Request a status change.

        Args:
            caller: Acting user
            appointment_id: Appointment ID
            target_status: UI status token, any case

        Returns:
            The refreshed appointment, or a pending review decision when the
            target is ``attended``

        Raises:
            BadRequestException: If the target is not a UI status
            ConflictException: If the transition is not allowed
            PersistenceException: If the update fails
        """
        target = self._normalize_target(target_status)
        if target == UiStatus.ATTENDED.value:
            return await self.begin_attend(caller, appointment_id)
        return await self._apply(caller, appointment_id, target)

    async def begin_attend(
        self,
        caller: CallerContext,
        appointment_id: UUID,
    ) -> PendingReviewDecision:
        """First phase of the attend flow: validate, persist nothing."""
        self._require_manager(caller)
        row = await self.appointments.get_scoped_row(caller, appointment_id)
        current = to_ui(row["status"])
        check_transition(current, UiStatus.ATTENDED.value)
        return PendingReviewDecision(appointment_id=appointment_id, current_status=current)

    async def complete_attend(
        self,
        caller: CallerContext,
        appointment_id: UUID,
        next_review_date: date | None,
    ) -> AppointmentResponse:
        """
        Second phase of the attend flow.

        Status and review date are written in one update; the audit entry
        only covers the status field.
        """
        return await self._apply(
            caller,
            appointment_id,
            UiStatus.ATTENDED.value,
            {"next_review_date": next_review_date},
        )

    async def _apply(
        self,
        caller: CallerContext,
        appointment_id: UUID,
        target: str,
        extra_values: dict[str, Any] | None = None,
    ) -> AppointmentResponse:
        self._require_manager(caller)
        row = await self.appointments.get_scoped_row(caller, appointment_id)
        old_status = row["status"]
        check_transition(to_ui(old_status), target)

        new_status = to_storage(target)
        if not is_storage_status(new_status):
            raise BadRequestException(f"Unknown appointment status: {target}")

        values = {"status": new_status, "updated_at": datetime.now(UTC), **(extra_values or {})}
        try:
            await self.db.execute(
                update(appointments).where(appointments.c.id == appointment_id).values(**values)
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "appointment_status_change_failed",
                appointment_id=str(appointment_id),
                target=target,
                error=str(e),
            )
            raise PersistenceException("Failed to update appointment status") from e

        logger.info(
            "appointment_status_changed",
            appointment_id=str(appointment_id),
            old_status=old_status,
            new_status=new_status,
            user_id=str(caller.user_id),
        )
        await self.audit.log_status_change(appointment_id, old_status, new_status, caller.user_id)

        return await self._reload(appointment_id)

    async def _reload(self, appointment_id: UUID) -> AppointmentResponse:
        # Re-read from storage rather than patching the old row
        try:
            row = await self.appointments.fetch_row(appointment_id)
        except SQLAlchemyError as e:
            raise PersistenceException("Failed to load appointment") from e
        if row is None:
            raise NotFoundException("Appointment not found")
        return to_response(row)

    @staticmethod
    def _normalize_target(target_status: str) -> str:
        if not is_ui_status(target_status):
            raise BadRequestException(f"Unknown appointment status: {target_status}")
        return target_status.strip().lower()

    @staticmethod
    def _require_manager(caller: CallerContext) -> None:
        if not caller.can_manage_appointments:
            raise ForbiddenException("Your role cannot change appointment statuses")

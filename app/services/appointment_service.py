"""Appointment service: scheduling, scoped reads and filtered listings."""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import and_, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from app.core.exceptions import (
    BadRequestException,
    ForbiddenException,
    NotFoundException,
    PersistenceException,
)
from app.core.permissions import CallerContext
from app.core.status import StorageStatus, is_storage_status, to_storage, to_ui
from app.models.appointments import appointments
from app.schemas.appointments import (
    AppointmentCreate,
    AppointmentFilters,
    AppointmentListResponse,
    AppointmentResponse,
    DateRange,
)
from app.services.audit_service import AuditLogService

logger = structlog.get_logger()


@dataclass(frozen=True)
class AppointmentScope:
    """Organizational restriction applied to appointment reads and writes."""

    hospital: str | None = None
    clinic: str | None = None

    def conditions(self) -> list[ColumnElement[bool]]:
        conditions = []
        if self.hospital:
            conditions.append(appointments.c.hospital == self.hospital)
        if self.clinic:
            conditions.append(appointments.c.clinic == self.clinic)
        return conditions

    def contains(self, row: Mapping[str, Any]) -> bool:
        if self.hospital and row["hospital"] != self.hospital:
            return False
        if self.clinic and row["clinic"] != self.clinic:
            return False
        return True


def resolve_scope(caller: CallerContext, requested_hospital: str | None = None) -> AppointmentScope:
    """
    Work out which hospital/clinic a caller may see.

    Super admins get the hospital they ask for (or no restriction). Everyone
    else is pinned to their own hospital whatever they request, and clinic
    scoped roles are pinned to their clinic as well.

    Raises:
        ForbiddenException: If a restricted caller has no hospital assigned
    """
    if caller.has_full_scope:
        return AppointmentScope(hospital=requested_hospital or None)

    if not caller.hospital:
        raise ForbiddenException("No hospital is assigned to this account")

    return AppointmentScope(
        hospital=caller.hospital,
        clinic=caller.clinic if caller.is_clinic_scoped else None,
    )


def date_range_condition(date_range: DateRange, today: date) -> ColumnElement[bool] | None:
    """Predicate for a date window; ``upcoming`` includes today."""
    if date_range == DateRange.TODAY:
        return appointments.c.date == today
    if date_range == DateRange.UPCOMING:
        return appointments.c.date >= today
    if date_range == DateRange.PAST:
        return appointments.c.date < today
    return None


def to_response(row: Mapping[str, Any]) -> AppointmentResponse:
    """Build the client representation, translating the status to UI vocabulary."""
    data = dict(row)
    data["status"] = to_ui(data["status"])
    return AppointmentResponse.model_validate(data)


class AppointmentService:
    """Service for scheduling and querying appointments."""

    def __init__(self, db: AsyncSession, audit: AuditLogService | None = None):
        """Initialize service with database session."""
        self.db = db
        self.audit = audit or AuditLogService(db)

    async def create_appointment(
        self,
        caller: CallerContext,
        data: AppointmentCreate,
    ) -> AppointmentResponse:
        """
        Schedule a new appointment in the pending state.

        Args:
            caller: Acting user
            data: Appointment creation data

        Returns:
            Created appointment

        Raises:
            ForbiddenException: If the caller cannot manage appointments
            BadRequestException: If no hospital can be determined
            PersistenceException: If the insert fails
        """
        if not caller.can_manage_appointments:
            raise ForbiddenException("Your role cannot schedule appointments")

        values = data.model_dump()
        if not caller.has_full_scope:
            scope = resolve_scope(caller)
            values["hospital"] = scope.hospital
            if scope.clinic:
                values["clinic"] = scope.clinic
        if not values.get("hospital"):
            raise BadRequestException("A hospital is required for the appointment")

        values["status"] = StorageStatus.SCHEDULED.value

        try:
            result = await self.db.execute(
                insert(appointments).values(**values).returning(appointments)
            )
            row = dict(result.mappings().one())
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("appointment_create_failed", error=str(e))
            raise PersistenceException("Failed to create appointment") from e

        logger.info(
            "appointment_created",
            appointment_id=str(row["id"]),
            hospital=row["hospital"],
            user_id=str(caller.user_id),
        )
        await self.audit.log_appointment_creation(row, caller.user_id)

        return to_response(row)

    async def fetch_row(self, appointment_id: UUID) -> dict[str, Any] | None:
        """Load the raw stored row (storage vocabulary), unscoped."""
        result = await self.db.execute(
            select(appointments).where(appointments.c.id == appointment_id)
        )
        row = result.mappings().first()
        return dict(row) if row else None

    async def get_scoped_row(
        self,
        caller: CallerContext,
        appointment_id: UUID,
    ) -> dict[str, Any]:
        """
        Load a stored row the caller is allowed to see.

        Raises:
            NotFoundException: If appointment not found
            ForbiddenException: If it lies outside the caller's scope
        """
        scope = resolve_scope(caller)
        try:
            row = await self.fetch_row(appointment_id)
        except SQLAlchemyError as e:
            logger.error("appointment_fetch_failed", appointment_id=str(appointment_id), error=str(e))
            raise PersistenceException("Failed to load appointment") from e

        if row is None:
            raise NotFoundException("Appointment not found")
        if not scope.contains(row):
            raise ForbiddenException("Access denied to this appointment")
        return row

    async def get_appointment(
        self,
        caller: CallerContext,
        appointment_id: UUID,
    ) -> AppointmentResponse:
        """Get one appointment within the caller's scope."""
        return to_response(await self.get_scoped_row(caller, appointment_id))

    async def list_appointments(
        self,
        caller: CallerContext,
        filters: AppointmentFilters,
        today: date | None = None,
    ) -> AppointmentListResponse:
        """
        List the appointments visible to a caller.

        Rows are ordered by date descending, then time ascending, and statuses
        are returned in UI vocabulary.

        Args:
            caller: Requesting user
            filters: Status, date range and requested hospital
            today: Evaluation date, defaults to the local calendar date

        Returns:
            Matching appointments

        Raises:
            BadRequestException: If the status filter is unknown
            PersistenceException: If the query fails
        """
        today = today or date.today()
        scope = resolve_scope(caller, filters.hospital)
        conditions = scope.conditions()

        if filters.status.strip().lower() != "all":
            storage_status = to_storage(filters.status)
            if not is_storage_status(storage_status):
                raise BadRequestException(f"Unknown status filter: {filters.status}")
            conditions.append(appointments.c.status == storage_status)

        window = date_range_condition(filters.date_range, today)
        if window is not None:
            conditions.append(window)

        rows = await self._select(conditions)
        items = [to_response(row) for row in rows]
        return AppointmentListResponse(total=len(items), items=items)

    async def list_overdue_candidates(
        self,
        scope: AppointmentScope,
        today: date,
    ) -> list[AppointmentResponse]:
        """Pending appointments in scope dated strictly before ``today``."""
        conditions = scope.conditions()
        conditions.append(appointments.c.status == StorageStatus.SCHEDULED.value)
        conditions.append(appointments.c.date < today)
        return [to_response(row) for row in await self._select(conditions)]

    async def _select(self, conditions: list[ColumnElement[bool]]) -> list[dict[str, Any]]:
        stmt = select(appointments).order_by(
            appointments.c.date.desc(),
            appointments.c.time.asc(),
        )
        if conditions:
            stmt = stmt.where(and_(*conditions))

        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("appointment_query_failed", error=str(e))
            raise PersistenceException("Failed to load appointments") from e

        return [dict(row) for row in result.mappings().all()]

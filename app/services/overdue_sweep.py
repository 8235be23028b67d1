"""Reclassification of pending appointments whose date has passed."""

import asyncio
from collections.abc import Iterable
from datetime import UTC, date, datetime
from uuid import UUID

import structlog
from sqlalchemy import and_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config import settings
from app.core.exceptions import ForbiddenException
from app.core.permissions import CallerContext
from app.core.status import StorageStatus, UiStatus
from app.database import AsyncSessionLocal
from app.models.appointments import appointments
from app.schemas.appointments import AppointmentResponse, SweepResult
from app.schemas.audit_logs import AuditAction
from app.services.appointment_service import AppointmentScope, AppointmentService, resolve_scope
from app.services.audit_service import AuditLogService

logger = structlog.get_logger()


def find_overdue(
    loaded: Iterable[AppointmentResponse],
    today: date,
) -> list[AppointmentResponse]:
    """Pending appointments dated strictly before ``today`` (today is never overdue)."""
    return [
        appointment
        for appointment in loaded
        if appointment.status.lower() == UiStatus.PENDING.value and appointment.date < today
    ]


class OverdueSweepService:
    """Moves stale pending appointments to missed, one record at a time."""

    def __init__(self, db: AsyncSession, audit: AuditLogService | None = None):
        """Initialize service with database session."""
        self.db = db
        self.audit = audit or AuditLogService(db)

    async def run_pass(
        self,
        loaded: Iterable[AppointmentResponse],
        today: date | None = None,
        actor_id: UUID | None = None,
    ) -> SweepResult:
        """
        Run one sweep pass over an already loaded appointment set.

        Records are processed sequentially. A failing record is logged and
        the pass carries on with the rest. A record that is no longer
        ``scheduled`` in storage (resolved concurrently) is skipped.

        Args:
            loaded: Appointments as currently displayed (UI vocabulary)
            today: Evaluation date, defaults to the local calendar date
            actor_id: User the audit entries are attributed to

        Returns:
            Ids reclassified, skipped and failed
        """
        today = today or date.today()
        result = SweepResult()

        for appointment in find_overdue(loaded, today):
            try:
                changed = await self._reclassify(appointment.id)
            except SQLAlchemyError as e:
                await self.db.rollback()
                logger.error(
                    "overdue_appointment_update_failed",
                    appointment_id=str(appointment.id),
                    error=str(e),
                )
                result.failed.append(appointment.id)
                continue

            if not changed:
                logger.info("overdue_appointment_skipped", appointment_id=str(appointment.id))
                result.skipped.append(appointment.id)
                continue

            logger.info(
                "overdue_appointment_reclassified",
                appointment_id=str(appointment.id),
                date=appointment.date.isoformat(),
            )
            await self.audit.record(
                AuditAction.UPDATE,
                "appointments",
                appointment.id,
                {"status": appointment.status},
                {"status": StorageStatus.NO_SHOW.value},
                actor_id,
            )
            result.reclassified.append(appointment.id)

        return result

    async def sweep_for_caller(
        self,
        caller: CallerContext,
        today: date | None = None,
    ) -> SweepResult:
        """Sweep the overdue appointments visible to a caller."""
        if not caller.can_manage_appointments:
            raise ForbiddenException("Your role cannot change appointment statuses")

        today = today or date.today()
        loaded = await AppointmentService(self.db, self.audit).list_overdue_candidates(
            resolve_scope(caller), today
        )
        return await self.run_pass(loaded, today, caller.user_id)

    async def _reclassify(self, appointment_id: UUID) -> bool:
        stmt = (
            update(appointments)
            .where(
                and_(
                    appointments.c.id == appointment_id,
                    appointments.c.status == StorageStatus.SCHEDULED.value,
                )
            )
            .values(status=StorageStatus.NO_SHOW.value, updated_at=datetime.now(UTC))
        )
        result = await self.db.execute(stmt)
        await self.db.commit()
        return result.rowcount > 0  # type: ignore[attr-defined]


class OverdueSweepScheduler:
    """
    In-process periodic sweep over every hospital.

    Best effort: it only runs while this process is up, and a pass that
    fails is logged and retried on the next tick.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal,
        interval_seconds: int | None = None,
    ):
        self.session_factory = session_factory
        self.interval_seconds = interval_seconds or settings.overdue_sweep_interval_seconds
        self.is_running = False
        self._task: asyncio.Task | None = None

    async def start(self) -> None:
        """Start the periodic sweep."""
        if self.is_running:
            logger.warning("overdue_sweep_already_running")
            return

        self.is_running = True
        self._task = asyncio.create_task(self._run())
        logger.info("overdue_sweep_started", interval_seconds=self.interval_seconds)

    async def stop(self) -> None:
        """Stop the periodic sweep and wait for the task to finish."""
        self.is_running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("overdue_sweep_stopped")

    async def run_once(self, today: date | None = None) -> SweepResult:
        """Run a single unscoped pass with a system actor."""
        today = today or date.today()
        async with self.session_factory() as session:
            service = OverdueSweepService(session)
            loaded = await AppointmentService(session, service.audit).list_overdue_candidates(
                AppointmentScope(), today
            )
            return await service.run_pass(loaded, today, actor_id=None)

    async def _run(self) -> None:
        while self.is_running:
            try:
                result = await self.run_once()
                if result.reclassified or result.failed:
                    logger.info(
                        "overdue_sweep_pass_completed",
                        reclassified=len(result.reclassified),
                        skipped=len(result.skipped),
                        failed=len(result.failed),
                    )
            except Exception as e:
                logger.error("overdue_sweep_pass_failed", error=str(e))

            await asyncio.sleep(self.interval_seconds)

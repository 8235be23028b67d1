"""Audit trail recording and retrieval."""

from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.audit_logs import audit_logs
from app.models.profiles import profiles
from app.schemas.audit_logs import AuditAction, AuditLogListResponse, AuditLogResponse

logger = structlog.get_logger()

# Fields a snapshot may carry, per audited table
SNAPSHOT_FIELDS: dict[str, tuple[str, ...]] = {
    "appointments": (
        "status",
        "next_review_date",
        "patient_id",
        "patient_name",
        "date",
        "time",
        "purpose",
        "hospital",
        "clinic",
    ),
    "profiles": ("role",),
    "hospitals": ("id", "name"),
}


def _jsonable(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    return value


def build_snapshot(table_name: str, data: Mapping[str, Any] | None) -> dict[str, Any] | None:
    """
    Reduce a record to the audited fields of its table.

    Args:
        table_name: Audited table
        data: Full or partial record, or None

    Returns:
        JSON-safe dict restricted to ``SNAPSHOT_FIELDS[table_name]``, or None

    Raises:
        ValueError: If the table is not audited
    """
    if data is None:
        return None
    if table_name not in SNAPSHOT_FIELDS:
        raise ValueError(f"No audit snapshot defined for table {table_name!r}")
    allowed = SNAPSHOT_FIELDS[table_name]
    return {key: _jsonable(data[key]) for key in allowed if key in data}


class AuditLogService:
    """Service for the append-only audit trail."""

    DEFAULT_LIMIT = 100

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def record(
        self,
        action: AuditAction,
        table_name: str,
        record_id: str | UUID,
        old_data: Mapping[str, Any] | None,
        new_data: Mapping[str, Any] | None,
        user_id: UUID | None = None,
    ) -> None:
        """
        Append one audit entry, best effort.

        Runs after the primary mutation has committed. A failure is logged and
        swallowed: the caller never sees it and the primary mutation stands.

        Args:
            action: create, update or delete
            table_name: Table of the mutated record
            record_id: ID of the mutated record
            old_data: State before the mutation (None for creates)
            new_data: State after the mutation (None for deletes)
            user_id: Acting user, None for system actions
        """
        try:
            values = {
                "user_id": user_id,
                "action": AuditAction(action).value,
                "table_name": table_name,
                "record_id": str(record_id),
                "old_data": build_snapshot(table_name, old_data),
                "new_data": build_snapshot(table_name, new_data),
            }
            await self.db.execute(insert(audit_logs).values(**values))
            await self.db.commit()
        except Exception as e:
            logger.warning(
                "audit_log_write_failed",
                table_name=table_name,
                record_id=str(record_id),
                action=str(action),
                error=str(e),
            )
            try:
                await self.db.rollback()
            except Exception as rollback_error:
                logger.warning("audit_log_rollback_failed", error=str(rollback_error))

    async def log_appointment_creation(
        self, appointment: Mapping[str, Any], user_id: UUID | None
    ) -> None:
        await self.record(
            AuditAction.CREATE, "appointments", appointment["id"], None, appointment, user_id
        )

    async def log_status_change(
        self,
        appointment_id: UUID,
        old_status: str,
        new_status: str,
        user_id: UUID | None,
    ) -> None:
        await self.record(
            AuditAction.UPDATE,
            "appointments",
            appointment_id,
            {"status": old_status},
            {"status": new_status},
            user_id,
        )

    async def log_role_change(
        self, profile_id: UUID, old_role: str, new_role: str, user_id: UUID | None
    ) -> None:
        await self.record(
            AuditAction.UPDATE,
            "profiles",
            profile_id,
            {"role": old_role},
            {"role": new_role},
            user_id,
        )

    async def log_hospital_creation(
        self, hospital: Mapping[str, Any], user_id: UUID | None
    ) -> None:
        await self.record(AuditAction.CREATE, "hospitals", hospital["id"], None, hospital, user_id)

    async def resolve_user_emails(self, user_ids: Iterable[UUID]) -> dict[UUID, str]:
        """Map user ids to display e-mails; ids without a profile are omitted."""
        ids = {user_id for user_id in user_ids if user_id is not None}
        if not ids:
            return {}

        stmt = select(profiles.c.id, profiles.c.email).where(profiles.c.id.in_(ids))
        result = await self.db.execute(stmt)
        return {row.id: row.email for row in result.fetchall() if row.email}

    async def list_recent(self, limit: int = DEFAULT_LIMIT) -> AuditLogListResponse:
        """
        List the newest audit entries with actor e-mails resolved.

        Args:
            limit: Maximum number of entries

        Returns:
            Audit entries, newest first
        """
        total_result = await self.db.execute(select(func.count()).select_from(audit_logs))
        total = total_result.scalar() or 0

        stmt = select(audit_logs).order_by(audit_logs.c.created_at.desc()).limit(limit)
        result = await self.db.execute(stmt)
        rows = [dict(row) for row in result.mappings().all()]

        emails = await self.resolve_user_emails(row["user_id"] for row in rows)
        items = [
            AuditLogResponse.model_validate(
                {
                    **row,
                    "user_email": (
                        emails.get(row["user_id"], str(row["user_id"])) if row["user_id"] else None
                    ),
                }
            )
            for row in rows
        ]

        return AuditLogListResponse(total=total, items=items)

"""Tests for the audit log recorder."""

from datetime import date
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.permissions import UserRole
from app.models.audit_logs import audit_logs
from app.schemas.audit_logs import AuditAction
from app.services.audit_service import AuditLogService, build_snapshot


async def fetch_entries(db_session: AsyncSession) -> list[dict]:
    result = await db_session.execute(select(audit_logs))
    return [dict(row) for row in result.mappings().all()]


def test_build_snapshot_keeps_only_audited_fields() -> None:
    appointment_id = uuid4()
    snapshot = build_snapshot(
        "appointments",
        {
            "id": appointment_id,
            "status": "scheduled",
            "date": date(2024, 6, 1),
            "insurance_number": "NHIS-1",
            "phone_number": "0200000000",
        },
    )
    assert snapshot == {"status": "scheduled", "date": "2024-06-01"}


def test_build_snapshot_none_and_unknown_table() -> None:
    assert build_snapshot("appointments", None) is None
    with pytest.raises(ValueError):
        build_snapshot("payments", {"amount": 1})


@pytest.mark.asyncio
async def test_record_appends_one_entry(db_session: AsyncSession) -> None:
    """One invocation, one append with both snapshots."""
    user_id = uuid4()
    record_id = uuid4()
    service = AuditLogService(db_session)

    await service.record(
        AuditAction.UPDATE,
        "appointments",
        record_id,
        {"status": "scheduled"},
        {"status": "cancelled"},
        user_id,
    )

    entries = await fetch_entries(db_session)
    assert len(entries) == 1
    entry = entries[0]
    assert entry["action"] == "update"
    assert entry["table_name"] == "appointments"
    assert entry["record_id"] == str(record_id)
    assert entry["user_id"] == user_id
    assert entry["old_data"] == {"status": "scheduled"}
    assert entry["new_data"] == {"status": "cancelled"}
    assert entry["created_at"] is not None


@pytest.mark.asyncio
async def test_record_create_has_no_old_snapshot(db_session: AsyncSession) -> None:
    hospital_id = uuid4()
    await AuditLogService(db_session).log_hospital_creation(
        {"id": hospital_id, "name": "Ridge Hospital"}, None
    )

    entries = await fetch_entries(db_session)
    assert entries[0]["action"] == "create"
    assert entries[0]["old_data"] is None
    assert entries[0]["new_data"] == {"id": str(hospital_id), "name": "Ridge Hospital"}
    assert entries[0]["user_id"] is None


@pytest.mark.asyncio
async def test_record_never_raises_on_storage_failure() -> None:
    """Audit failures are logged and swallowed, with the session rolled back."""
    session = AsyncMock()
    session.execute.side_effect = OperationalError("INSERT", {}, Exception("connection lost"))

    await AuditLogService(session).log_status_change(uuid4(), "scheduled", "no-show", uuid4())

    session.rollback.assert_awaited_once()
    session.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_record_survives_rollback_failure() -> None:
    session = AsyncMock()
    session.execute.side_effect = OperationalError("INSERT", {}, Exception("connection lost"))
    session.rollback.side_effect = OperationalError("ROLLBACK", {}, Exception("gone"))

    await AuditLogService(session).log_role_change(uuid4(), "analytics_viewer", "hospital_admin", None)

    session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_list_recent_resolves_emails(db_session: AsyncSession, make_profile) -> None:
    admin = await make_profile(UserRole.HOSPITAL_ADMIN, email="admin@ridge.example")
    ghost_id = uuid4()
    service = AuditLogService(db_session)

    await service.log_status_change(uuid4(), "scheduled", "completed", admin.user_id)
    await service.log_status_change(uuid4(), "scheduled", "cancelled", ghost_id)
    await service.log_status_change(uuid4(), "scheduled", "no-show", None)

    listing = await service.list_recent()

    assert listing.total == 3
    emails = {entry.user_id: entry.user_email for entry in listing.items}
    assert emails[admin.user_id] == "admin@ridge.example"
    # Unknown actors fall back to their raw id
    assert emails[ghost_id] == str(ghost_id)
    assert emails[None] is None


@pytest.mark.asyncio
async def test_list_recent_respects_limit(db_session: AsyncSession) -> None:
    service = AuditLogService(db_session)
    for _ in range(5):
        await service.log_status_change(uuid4(), "scheduled", "cancelled", None)

    listing = await service.list_recent(limit=2)

    assert listing.total == 5
    assert len(listing.items) == 2

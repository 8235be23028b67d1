"""Audit log table model using SQLAlchemy Core.

Rows are append-only; the application never updates or deletes them.
"""

from uuid import uuid4

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    Index,
    MetaData,
    String,
    Table,
    Text,
    Uuid,
    func,
)

metadata = MetaData()

audit_logs = Table(
    "audit_logs",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    # Null for system actors (background sweep)
    Column("user_id", Uuid, nullable=True),
    Column("action", String(10), nullable=False),
    Column("table_name", Text, nullable=False),
    Column("record_id", Text, nullable=False),
    Column("old_data", JSON, nullable=True),
    Column("new_data", JSON, nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    CheckConstraint(
        "action IN ('create', 'update', 'delete')",
        name="audit_logs_action_check",
    ),
)

Index("ix_audit_logs_created_at", audit_logs.c.created_at)
Index("ix_audit_logs_target", audit_logs.c.table_name, audit_logs.c.record_id)

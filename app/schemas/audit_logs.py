"""Audit log schemas."""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel


class AuditAction(str, Enum):
    """Kind of mutation recorded in the audit trail."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class AuditLogResponse(BaseModel):
    """Audit entry as rendered for the log viewer."""

    id: UUID
    user_id: UUID | None
    user_email: str | None = None
    action: AuditAction
    table_name: str
    record_id: str
    old_data: dict[str, Any] | None = None
    new_data: dict[str, Any] | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class AuditLogListResponse(BaseModel):
    """Schema for audit log listing."""

    total: int
    items: list[AuditLogResponse]

"""Audit log endpoints."""

from fastapi import APIRouter, Depends, Query, status

from app.core.permissions import AUDIT_LOG_VIEWERS, CallerContext
from app.dependencies import DatabaseSession, require_roles
from app.schemas.audit_logs import AuditLogListResponse
from app.services.audit_service import AuditLogService

router = APIRouter()


@router.get(
    "/",
    response_model=AuditLogListResponse,
    status_code=status.HTTP_200_OK,
    summary="List recent audit entries",
)
async def list_audit_logs(
    db: DatabaseSession,
    caller: CallerContext = Depends(require_roles(*AUDIT_LOG_VIEWERS)),
    limit: int = Query(AuditLogService.DEFAULT_LIMIT, ge=1, le=500),
) -> AuditLogListResponse:
    """
    Newest audit entries first, with actor e-mails resolved.

    Requires super admin or hospital admin role.
    """
    service = AuditLogService(db)
    return await service.list_recent(limit=limit)

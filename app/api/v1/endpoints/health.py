"""Liveness and readiness probes."""

from typing import Literal

from fastapi import APIRouter, Request, status
from pydantic import BaseModel

from app.config import settings
from app.core.redis_client import check_redis_connection
from app.database import check_database_connection

router = APIRouter()

ComponentState = Literal["healthy", "unhealthy"]


class HealthResponse(BaseModel):
    status: str
    version: str
    environment: str


class DetailedHealthResponse(HealthResponse):
    """Readiness including backing services and the background sweep."""

    database: ComponentState
    redis: ComponentState
    overdue_sweep: Literal["running", "stopped", "disabled"]


def _sweep_state(request: Request) -> Literal["running", "stopped", "disabled"]:
    if not settings.overdue_sweep_enabled:
        return "disabled"
    scheduler = getattr(request.app.state, "sweep_scheduler", None)
    return "running" if scheduler is not None and scheduler.is_running else "stopped"


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Liveness probe",
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        environment=settings.environment,
    )


@router.get(
    "/health/detailed",
    response_model=DetailedHealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Readiness probe",
)
async def detailed_health_check(request: Request) -> DetailedHealthResponse:
    """
    Report ``degraded`` when the database is unreachable.

    Redis only backs the profile cache, so its outage is reported per
    component without degrading the service.
    """
    db_healthy = await check_database_connection()
    redis_healthy = await check_redis_connection()

    return DetailedHealthResponse(
        status="healthy" if db_healthy else "degraded",
        version=settings.app_version,
        environment=settings.environment,
        database="healthy" if db_healthy else "unhealthy",
        redis="healthy" if redis_healthy else "unhealthy",
        overdue_sweep=_sweep_state(request),
    )


@router.get("/ping", status_code=status.HTTP_200_OK, summary="Simple ping")
async def ping() -> dict[str, str]:
    return {"message": "pong"}

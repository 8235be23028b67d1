"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from app.api.v1.router import api_router
from app.config import settings
from app.core.redis_client import check_redis_connection, close_redis_connection
from app.database import check_database_connection, engine
from app.middleware.error_handler import register_exception_handlers
from app.middleware.logging import LoggingMiddleware, configure_logging
from app.services.overdue_sweep import OverdueSweepScheduler

configure_logging()
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Check backing services, then run the overdue sweep while the process is up.

    A missing database or Redis is logged but does not stop startup: health
    checks report it, and without Redis profiles are simply not cached.
    """
    logger.info("application_startup", environment=settings.environment)

    if await check_database_connection():
        logger.info("database_connected")
    else:
        logger.error("database_connection_failed")

    if await check_redis_connection():
        logger.info("redis_connected")
    else:
        logger.warning("redis_unavailable", effect="profile caching disabled")

    scheduler: OverdueSweepScheduler | None = None
    if settings.overdue_sweep_enabled:
        scheduler = OverdueSweepScheduler()
        await scheduler.start()
    app.state.sweep_scheduler = scheduler

    yield

    logger.info("application_shutdown")
    if scheduler is not None:
        await scheduler.stop()
    await engine.dispose()
    close_redis_connection()


def create_app() -> FastAPI:
    """Assemble middleware, error handlers, routes and metrics."""
    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Appointment scheduling, status lifecycle and audit trail for hospitals",
        lifespan=lifespan,
    )
    application.state.sweep_scheduler = None

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(LoggingMiddleware)
    register_exception_handlers(application)

    application.include_router(api_router, prefix=settings.api_v1_prefix)

    Instrumentator(
        should_group_status_codes=True,
        excluded_handlers=["/metrics", "/docs", "/redoc", "/openapi.json"],
    ).instrument(application).expose(application, endpoint="/metrics", include_in_schema=False)

    @application.get("/", tags=["Root"], include_in_schema=False)
    async def root() -> dict[str, str]:
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs",
        }

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )

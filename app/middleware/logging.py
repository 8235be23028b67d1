"""Structured logging setup and the request logging middleware."""

import logging
import sys
import time
from collections.abc import Callable
from uuid import uuid4

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import settings

# Requests to these paths are logged at debug level
QUIET_PATH_SUFFIXES = ("/health", "/health/detailed", "/ping", "/metrics")


def configure_logging(log_level: str | None = None, log_format: str | None = None) -> None:
    """Route structlog through stdlib logging with a JSON or console renderer."""
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)
    renderer = (
        structlog.processors.JSONRenderer()
        if (log_format or settings.log_format) == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    # request_completed replaces the uvicorn access log
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line per request, tagged with a request id echoed in ``X-Request-ID``."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        logger = structlog.get_logger()
        request_id = request.headers.get("X-Request-ID") or uuid4().hex
        path = request.url.path
        quiet = path.endswith(QUIET_PATH_SUFFIXES)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "request_failed",
                method=request.method,
                path=path,
                error=str(e),
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            raise

        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        if response.status_code >= 500:
            log = logger.warning
        elif quiet:
            log = logger.debug
        else:
            log = logger.info
        log(
            "request_completed",
            method=request.method,
            path=path,
            status_code=response.status_code,
            duration_ms=duration_ms,
            client=request.client.host if request.client else None,
        )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{duration_ms / 1000:.4f}"
        return response

"""Exception handlers rendering every error as ``{error, message, path}``."""

from typing import Any

import structlog
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exceptions import AppException

logger = structlog.get_logger()


def _error_response(
    request: Request,
    status_code: int,
    error: str,
    message: Any,
    details: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = {"error": error, "message": message, "path": request.url.path}
    if details is not None:
        body["details"] = jsonable_encoder(details)
    return JSONResponse(status_code=status_code, content=body, headers=headers)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handle application exceptions.

    Storage and upstream failures are logged; client errors are not, they
    are already visible in the request log.
    """
    if exc.status_code >= 500:
        logger.warning(
            "request_error",
            error=type(exc).__name__,
            message=exc.message,
            path=request.url.path,
        )
    return _error_response(
        request, exc.status_code, type(exc).__name__, exc.message, exc.details
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Handle HTTP exceptions raised by auth dependencies and routing."""
    return _error_response(
        request,
        exc.status_code,
        "HTTPException",
        exc.detail,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    return _error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "ValidationError",
        "Request validation failed",
        exc.errors(),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log and hide the internals."""
    logger.error(
        "unhandled_exception",
        error=type(exc).__name__,
        detail=str(exc),
        path=request.url.path,
    )
    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "InternalServerError",
        "An unexpected error occurred",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers above, most specific first."""
    app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, general_exception_handler)

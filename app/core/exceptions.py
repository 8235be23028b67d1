"""Application exceptions mapped to HTTP status codes by the error handlers."""

from typing import Any


class AppException(Exception):
    """
    Base application exception.

    Subclasses set ``status_code`` and a default message; ``details`` carries
    structured context that is rendered next to the message.
    """

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class BadRequestException(AppException):
    """Malformed input, such as an unknown status token."""

    status_code = 400
    default_message = "Bad request"


class ForbiddenException(AppException):
    """Caller's role or scope does not cover the resource."""

    status_code = 403
    default_message = "Forbidden"


class NotFoundException(AppException):
    status_code = 404
    default_message = "Resource not found"


class ConflictException(AppException):
    """Request conflicts with the current state, e.g. an invalid status transition."""

    status_code = 409
    default_message = "Conflict"


class ExternalServiceException(AppException):
    """Failure reported by a third-party collaborator."""

    status_code = 502
    default_message = "External service failed"


class PersistenceException(AppException):
    """Storage layer failure (connectivity loss, rejected write)."""

    status_code = 503
    default_message = "Storage unavailable"

"""Service-level exceptions mapped onto HTTP status codes in app.main."""
from typing import Any


class ServiceError(Exception):
    """Base exception for approval and activity service errors."""

    status_code = 500
    error_code = "SERVER_ERROR"

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ValidationError(ServiceError):
    """Malformed or missing input, rejected before any mutation (400)."""

    status_code = 400
    error_code = "VALIDATION_ERROR"


class AuthError(ServiceError):
    """Missing, malformed, unknown or revoked credential (401)."""

    status_code = 401
    error_code = "AUTH_ERROR"


class NotFoundError(ServiceError):
    """Unknown record id (404)."""

    status_code = 404
    error_code = "NOT_FOUND"


class ConflictError(ServiceError):
    """Requested status is not reachable from the stored status (409)."""

    status_code = 409
    error_code = "CONFLICT"


class ServerError(ServiceError):
    """Store backend failure, rendered by the store exception handler (500)."""

    pass

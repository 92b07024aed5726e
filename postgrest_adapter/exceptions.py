"""Custom exceptions for the PostgREST store adapter."""

from __future__ import annotations

from typing import Any


class PostgRESTError(Exception):
    """Base exception for store adapter errors."""

    def __init__(self, message: str, details: Any = None, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.details = details
        self.status_code = status_code

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class PostgRESTAuthError(PostgRESTError):
    """Authentication/authorization error (401/403)."""

    pass


class PostgRESTNotFoundError(PostgRESTError):
    """Unknown table or route (404)."""

    pass


class PostgRESTValidationError(PostgRESTError):
    """Malformed request or filter rejected by the server (400/422)."""

    pass


class PostgRESTConflictError(PostgRESTError):
    """Unique or foreign key violation (409)."""

    pass


class PostgRESTRateLimitError(PostgRESTError):
    """Rate limit exceeded error (429)."""

    pass


class PostgRESTServerError(PostgRESTError):
    """Server-side error (5xx)."""

    pass


class PostgRESTNetworkError(PostgRESTError):
    """Network connectivity error."""

    pass


class FilterSyntaxError(PostgRESTError):
    """Filter string that does not follow the column=op.value grammar."""

    pass

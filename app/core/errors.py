"""
Application error hierarchy.

Every error maps to a fixed HTTP status and a short machine-readable code.
The API error handlers turn these into response envelopes; the message is the
only text that reaches the client, so it must never contain internal detail.
"""

from typing import Any, Optional


class AppError(Exception):
    """Base class for errors that map to an HTTP response."""

    http_status: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, detail: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_error(self) -> Any:
        """Value placed in the envelope's `error` field."""
        if self.detail is not None:
            return {"code": self.code, "message": self.message, "details": self.detail}
        return self.message


class NotFoundError(AppError):
    """Entity absent."""
    http_status = 404
    code = "NOT_FOUND"


class ConflictError(AppError):
    """Uniqueness or referential-integrity violation."""
    http_status = 400
    code = "CONFLICT"


class ValidationError(AppError):
    """Schema or shape violation, surfaced field-by-field in `detail`."""
    http_status = 422
    code = "VALIDATION_ERROR"


class UnauthorizedError(AppError):
    """Missing or invalid principal."""
    http_status = 401
    code = "UNAUTHORIZED"


class ForbiddenError(AppError):
    """Principal lacks the required role or ownership."""
    http_status = 403
    code = "FORBIDDEN"

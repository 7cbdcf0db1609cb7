"""
Service Errors

Base exception for domain failures raised by service functions. Routers
turn these into HTTP responses with an ``{error, details?}`` body.
"""

from typing import Any


class UnifyServiceError(Exception):
    """Base exception for service errors."""

    def __init__(
        self,
        message: str,
        error_code: str,
        status_code: int = 400,
        details: Any = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details
        super().__init__(message)

    def to_detail(self) -> dict[str, Any]:
        detail: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            detail["details"] = self.details
        return detail


class NotFoundError(UnifyServiceError):
    """A referenced record does not exist."""

    def __init__(self, message: str, error_code: str = "NOT_FOUND"):
        super().__init__(message, error_code, 404)


class AccessDeniedError(UnifyServiceError):
    """The caller may not act on the requested record."""

    def __init__(self, message: str, error_code: str = "ACCESS_DENIED"):
        super().__init__(message, error_code, 403)


class ValidationError(UnifyServiceError):
    """Request is well-formed but not allowed in the current state."""

    def __init__(self, message: str, error_code: str = "VALIDATION_ERROR", details: Any = None):
        super().__init__(message, error_code, 400, details)


class ConflictError(UnifyServiceError):
    """A record with the same identity already exists."""

    def __init__(self, message: str, error_code: str = "CONFLICT"):
        super().__init__(message, error_code, 409)

from typing import Any


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Resource not found."""

    def __init__(self, resource: str, identifier: Any = None):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} with id={identifier} not found"
        super().__init__(message=message, status_code=404)


class ValidationError(AppException):
    """Validation error."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message=message, status_code=422, details=details)


class InvalidArgumentError(ValidationError):
    """Caller passed a missing or malformed identifier. Not retryable."""


class TenantRequiredError(AppException):
    """Request carries no tenant."""

    def __init__(self, message: str = "X-Tenant-ID header is required"):
        super().__init__(message=message, status_code=400, details={"field": "X-Tenant-ID"})


class PersistenceError(AppException):
    """Storage unreachable or the write could not be committed."""

    def __init__(self, message: str = "Could not persist changes, please retry"):
        super().__init__(message=message, status_code=503)

from src.core.exceptions.base import (
    AppException,
    NotFoundError,
    ValidationError,
    InvalidArgumentError,
    TenantRequiredError,
    PersistenceError,
)

__all__ = [
    "AppException",
    "NotFoundError",
    "ValidationError",
    "InvalidArgumentError",
    "TenantRequiredError",
    "PersistenceError",
]

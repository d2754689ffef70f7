"""Error handling module with RFC 7807 Problem Details."""

from flagaccess.core.errors.exceptions import (
    AppException,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnknownPermissionError,
    ValidationError,
)
from flagaccess.core.errors.handlers import (
    ProblemDetail,
    register_exception_handlers,
)


__all__ = [
    # Exceptions
    "AppException",
    "ConflictError",
    "ForbiddenError",
    "NotFoundError",
    "UnknownPermissionError",
    "ValidationError",
    # Handlers
    "ProblemDetail",
    "register_exception_handlers",
]

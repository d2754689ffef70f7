"""Domain exceptions for the access core.

These exceptions represent caller mistakes and missing entities. They are
never retried internally and are converted to RFC 7807 Problem Details
responses by the exception handlers when raised inside a FastAPI app.
"""

from typing import Any


class AppException(Exception):
    """Base exception for all application errors.

    All domain exceptions should inherit from this class.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for clients
        status_code: HTTP status code for the response
        details: Additional error details
    """

    message: str = "An unexpected error occurred"
    error_code: str = "internal_error"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Raised when a referenced role, user, or permission does not exist.

    Example:
        raise NotFoundError("Role not found", resource="role", resource_id=str(role_id))
    """

    message = "Resource not found"
    error_code = "not_found"
    status_code = 404

    def __init__(
        self,
        message: str | None = None,
        resource: str | None = None,
        resource_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if resource:
            details["resource"] = resource
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message=message, details=details, **kwargs)


class UnknownPermissionError(NotFoundError):
    """Raised when a permission name outside the catalog is referenced."""

    error_code = "unknown_permission"

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Unknown permission: {name}",
            resource="permission",
            resource_id=name,
        )
        self.name = name


class ConflictError(AppException):
    """Raised when there's a conflict with existing data.

    Example:
        raise ConflictError("Role name already in use", details={"name": name})
    """

    message = "Resource conflict"
    error_code = "conflict"
    status_code = 409


class ValidationError(AppException):
    """Raised when the caller supplies an invalid combination of arguments.

    The message is part of the public contract and is surfaced verbatim.

    Example:
        raise ValidationError("ProjectId cannot be empty")
    """

    message = "Validation error"
    error_code = "validation_error"
    status_code = 422

    def __init__(
        self,
        message: str | None = None,
        errors: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if errors:
            details["errors"] = errors
        super().__init__(message=message, details=details, **kwargs)


class ForbiddenError(AppException):
    """Raised by the route guards when a user lacks a permission.

    Example:
        raise ForbiddenError(
            "Missing required permission",
            details={"required_permissions": ["UPDATE_PROJECT"]}
        )
    """

    message = "Access forbidden"
    error_code = "forbidden"
    status_code = 403

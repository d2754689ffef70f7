"""Problem details for access errors.

The access core itself never builds responses. A FastAPI host calls
``register_exception_handlers`` so that catalog lookups, binding
validation and route-guard denials reach clients as RFC 7807 bodies
carrying the fields a client needs to react: which resource was missing,
which permission name was rejected, which permissions a guard required.

See: https://tools.ietf.org/html/rfc7807
"""

from typing import TYPE_CHECKING, Any, cast

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from flagaccess.core.errors.exceptions import (
    AppException,
    ForbiddenError,
    UnknownPermissionError,
)


if TYPE_CHECKING:
    from starlette.types import ExceptionHandler


logger = structlog.get_logger()

ERROR_TYPE_PREFIX = "urn:flagaccess:error:"


class ProblemDetail(BaseModel):
    """Problem body returned for every access error.

    Attributes:
        type: ``urn:flagaccess:error:<error_code>``
        title: Error code in title case
        status: HTTP status code
        detail: The exception message, verbatim
        instance: Request path
        resource: Kind of entity that was not found (role, user, permission)
        resource_id: Identifier that was looked up
        permission: Permission name outside the catalog
        required_permissions: Permissions a route guard asked for
        role_id: Role the rejected operation targeted
        details: Any remaining context attached to the exception
    """

    type: str
    title: str
    status: int
    detail: str
    instance: str | None = None
    resource: str | None = None
    resource_id: str | None = None
    permission: str | None = None
    required_permissions: list[str] | None = None
    role_id: str | None = None
    details: dict[str, Any] | None = None


_TYPED_FIELDS = ("resource", "resource_id", "permission", "required_permissions", "role_id")


def build_problem(exc: AppException, instance: str | None = None, **fields: Any) -> ProblemDetail:
    """Lift known keys out of ``exc.details`` into typed problem fields."""
    remaining = dict(exc.details)
    for key in _TYPED_FIELDS:
        if key in remaining and key not in fields:
            fields[key] = remaining.pop(key)

    return ProblemDetail(
        type=f"{ERROR_TYPE_PREFIX}{exc.error_code}",
        title=exc.error_code.replace("_", " ").title(),
        status=exc.status_code,
        detail=exc.message,
        instance=instance,
        details=remaining or None,
        **fields,
    )


def _respond(problem: ProblemDetail) -> JSONResponse:
    return JSONResponse(
        status_code=problem.status,
        content=problem.model_dump(exclude_none=True),
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Validation, lookup and conflict errors raised by the services."""
    problem = build_problem(exc, instance=request.url.path)
    logger.info(
        "access_error",
        error_code=exc.error_code,
        status_code=exc.status_code,
        path=request.url.path,
    )
    return _respond(problem)


async def unknown_permission_handler(
    request: Request, exc: UnknownPermissionError
) -> JSONResponse:
    """A permission name outside the catalog; the name is echoed back."""
    problem = build_problem(exc, instance=request.url.path, permission=exc.name)
    logger.warning("unknown_permission", permission=exc.name, path=request.url.path)
    return _respond(problem)


async def forbidden_handler(request: Request, exc: ForbiddenError) -> JSONResponse:
    """Route-guard denials. The guard has already logged the user and scope."""
    return _respond(build_problem(exc, instance=request.url.path))


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything else. Logged with its traceback, never echoed to the client."""
    logger.exception(
        "unhandled_exception",
        path=request.url.path,
        error_type=type(exc).__name__,
    )
    problem = ProblemDetail(
        type=f"{ERROR_TYPE_PREFIX}internal_error",
        title="Internal Error",
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="An unexpected error occurred",
        instance=request.url.path,
    )
    return _respond(problem)


def register_exception_handlers(app: FastAPI) -> None:
    """Register the access error handlers with a FastAPI app.

    Starlette picks the handler for the most specific class in the
    exception's MRO, so unknown permissions and denials get their own
    handlers ahead of the ``AppException`` fallback.
    """
    app.add_exception_handler(
        UnknownPermissionError, cast("ExceptionHandler", unknown_permission_handler)
    )
    app.add_exception_handler(ForbiddenError, cast("ExceptionHandler", forbidden_handler))
    app.add_exception_handler(AppException, cast("ExceptionHandler", app_exception_handler))
    app.add_exception_handler(Exception, generic_exception_handler)

"""Permission decorators for route protection.

This module provides decorators that can be applied to FastAPI routes to
require catalog permissions. Authentication is not handled here: the
route must receive an already resolved ``current_user`` and an ``access``
service as keyword arguments. Optional ``project_id`` and ``environment``
route arguments scope the check.
"""

from collections.abc import Awaitable, Callable, Sequence
from functools import wraps
from typing import TYPE_CHECKING, Any, ParamSpec, TypeVar, cast

import structlog

from flagaccess.core.errors import ForbiddenError
from flagaccess.core.permissions import registry
from flagaccess.core.permissions.checker import PermissionChecker
from flagaccess.core.permissions.registry import Permission


if TYPE_CHECKING:
    from flagaccess.modules.access.services import AccessService
    from flagaccess.modules.users.models import User


logger = structlog.get_logger()

P = ParamSpec("P")
R = TypeVar("R")


def _get_context(
    kwargs: dict[str, Any],
) -> tuple["User | None", "AccessService | None", str | None, str | None]:
    """Extract user, access service, and scope from route kwargs."""
    user = cast("User | None", kwargs.get("current_user"))
    access = cast("AccessService | None", kwargs.get("access"))
    project_id = cast("str | None", kwargs.get("project_id"))
    environment = cast("str | None", kwargs.get("environment"))
    return user, access, project_id, environment


def _guard(
    permissions: Sequence[str | Permission],
    require_all: bool,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    # Resolve at decoration time so a typo fails on import, not per request.
    required = [registry.resolve(permission) for permission in permissions]

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            user, access, project_id, environment = _get_context(kwargs)

            if not user:
                raise ForbiddenError(
                    "Authentication required",
                    error_code="auth_required",
                )

            if not access:
                raise ForbiddenError(
                    "Permission check failed",
                    error_code="permission_check_failed",
                )

            checker = PermissionChecker(access)
            if require_all:
                allowed = await checker.has_all_permissions(
                    user, required, project_id, environment
                )
            else:
                allowed = await checker.has_any_permission(
                    user, required, project_id, environment
                )

            if not allowed:
                names = [str(permission) for permission in required]
                logger.warning(
                    "permission_denied",
                    user_id=str(user.id),
                    permissions=names,
                    project_id=project_id,
                    environment=environment,
                )
                joiner = "all of" if require_all else "one of"
                raise ForbiddenError(
                    f"Missing required permission. Need {joiner}: {', '.join(names)}",
                    error_code="permission_denied",
                    details={"required_permissions": names},
                )

            return await func(*args, **kwargs)

        return wrapper

    return decorator


def require_permission(
    permission: str | Permission,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that requires a specific permission to access a route.

    Usage:
        @router.put("/projects/{project_id}")
        @require_permission(Permission.UPDATE_PROJECT)
        async def update_project(project_id: str, current_user: CurrentUser, access: AccessSvc):
            ...

    Raises:
        ForbiddenError: If user lacks the required permission
    """
    return _guard([permission], require_all=False)


def require_any_permission(
    permissions: Sequence[str | Permission],
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that requires any one of the specified permissions."""
    return _guard(permissions, require_all=False)


def require_all_permissions(
    permissions: Sequence[str | Permission],
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that requires all of the specified permissions."""
    return _guard(permissions, require_all=True)

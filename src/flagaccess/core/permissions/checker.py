"""Permission checking logic.

This module answers "may this user do this here?" by combining the
user's role assignments with the bindings attached to those roles.
Nothing is cached: every check reads what is currently committed.
"""

from collections.abc import Sequence
from typing import TYPE_CHECKING
from uuid import UUID

from flagaccess.core.permissions import registry
from flagaccess.core.permissions.models import RolePermissionBinding
from flagaccess.core.permissions.registry import Permission, ScopeLevel


if TYPE_CHECKING:
    from flagaccess.modules.access.services import AccessService
    from flagaccess.modules.users.models import User


def _user_id(user: "User | UUID") -> UUID:
    return user if isinstance(user, UUID) else user.id


def binding_matches(
    binding: RolePermissionBinding,
    permission: Permission,
    project_id: str | None = None,
    environment: str | None = None,
) -> bool:
    """Check a single binding against a request.

    Root permissions match on name alone. Project permissions also need the
    binding's project scope to cover ``project_id``. Environment
    permissions additionally need the environment scope to cover
    ``environment`` when one is given.
    """
    if binding.permission != permission:
        return False

    level = registry.describe(permission)
    if level is ScopeLevel.ROOT:
        return True

    if not binding.project_scope.matches(project_id):
        return False

    if level is ScopeLevel.ENVIRONMENT and environment is not None:
        return binding.environment_scope.matches(environment)
    return True


class PermissionChecker:
    """Service for checking user permissions.

    A root role bound to ADMIN grants everything. Otherwise a permission is
    granted when any eligible role carries a binding that matches the
    requested project and environment.
    """

    def __init__(self, access: "AccessService") -> None:
        self.access = access

    async def _load(
        self, user: "User | UUID", project_id: str | None
    ) -> tuple[bool, list[RolePermissionBinding]]:
        roles = await self.access.get_effective_roles(_user_id(user), project_id)
        if not roles:
            return False, []

        bindings = await self.access.get_bindings_for_roles([role.id for role in roles])
        root_ids = {role.id for role in roles if role.is_root}
        is_admin = any(
            binding.role_id in root_ids and binding.permission == Permission.ADMIN
            for binding in bindings
        )
        return is_admin, bindings

    async def has_permission(
        self,
        user: "User | UUID",
        permission: str | Permission,
        project_id: str | None = None,
        environment: str | None = None,
    ) -> bool:
        """Check if a user has a specific permission.

        Args:
            user: The user (or user UUID) to check
            permission: Permission name from the catalog
            project_id: Project the action targets, if any
            environment: Environment the action targets, if any

        Returns:
            True if the user has the permission, False otherwise

        Raises:
            UnknownPermissionError: If the permission is not in the catalog
        """
        return await self.has_any_permission(user, [permission], project_id, environment)

    async def has_any_permission(
        self,
        user: "User | UUID",
        permissions: Sequence[str | Permission],
        project_id: str | None = None,
        environment: str | None = None,
    ) -> bool:
        """Check if a user has any of the specified permissions.

        Returns:
            True if the user has at least one permission
        """
        requested = [registry.resolve(permission) for permission in permissions]
        is_admin, bindings = await self._load(user, project_id)
        if is_admin:
            return True

        for permission in requested:
            if registry.is_admin(permission):
                continue
            if any(
                binding_matches(binding, permission, project_id, environment)
                for binding in bindings
            ):
                return True
        return False

    async def has_all_permissions(
        self,
        user: "User | UUID",
        permissions: Sequence[str | Permission],
        project_id: str | None = None,
        environment: str | None = None,
    ) -> bool:
        """Check if a user has all of the specified permissions.

        Returns:
            True if the user has all permissions
        """
        requested = [registry.resolve(permission) for permission in permissions]
        is_admin, bindings = await self._load(user, project_id)
        if is_admin:
            return True

        for permission in requested:
            if registry.is_admin(permission):
                return False
            if not any(
                binding_matches(binding, permission, project_id, environment)
                for binding in bindings
            ):
                return False
        return True


async def check_permission(
    user: "User | UUID",
    permission: str | Permission,
    access: "AccessService",
    project_id: str | None = None,
    environment: str | None = None,
) -> bool:
    """Convenience function to check a user's permission.

    For use in route handlers when you need a simple permission check.
    """
    checker = PermissionChecker(access)
    return await checker.has_permission(user, permission, project_id, environment)

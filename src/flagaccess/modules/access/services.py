"""Assignment manager: who holds which role, and what each role grants."""

from collections.abc import Sequence
from uuid import UUID

import structlog

from flagaccess.core.errors import NotFoundError, ValidationError
from flagaccess.core.permissions import registry
from flagaccess.core.permissions.models import Role, RolePermissionBinding
from flagaccess.core.permissions.registry import Permission, ScopeLevel
from flagaccess.core.permissions.scopes import (
    ALL_ENVIRONMENTS,
    ALL_PROJECTS,
    Scope,
    Specific,
    coerce_scope,
)
from flagaccess.core.permissions.stores import AccessStore, RoleStore, UserStore
from flagaccess.modules.roles.schemas import RoleData, RoleRead, RoleWithUsers
from flagaccess.modules.users.models import User
from flagaccess.modules.users.schemas import UserRead


logger = structlog.get_logger()


def _assignment_scope(project: Scope | str | None) -> Scope:
    if project is None:
        return ALL_PROJECTS
    scope = coerce_scope(project)
    if scope is None:
        raise ValidationError("ProjectId cannot be empty")
    return scope


class AccessService:
    """Service for role assignments and role/permission bindings.

    Every mutation is idempotent. Replacing a user's root role, through
    ``set_user_root_role`` or by assigning a root role, is the only
    operation that touches more than one row and relies on the store to do
    it atomically.
    """

    def __init__(
        self,
        roles: RoleStore,
        access: AccessStore,
        users: UserStore,
    ) -> None:
        self.roles = roles
        self.access = access
        self.users = users

    async def _get_role(self, role_id: UUID) -> Role:
        role = await self.roles.get_by_id(role_id)
        if role is None:
            raise NotFoundError(
                "Role not found",
                resource="role",
                resource_id=str(role_id),
            )
        return role

    async def _get_user(self, user_id: UUID) -> User:
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError(
                "User not found",
                resource="user",
                resource_id=str(user_id),
            )
        return user

    # Assignments

    async def add_user_to_role(
        self,
        user_id: UUID,
        role_id: UUID,
        project: Scope | str | None = ALL_PROJECTS,
    ) -> None:
        """Assign a role to a user.

        A root role is platform-wide and a user holds at most one, so
        assigning one replaces the user's current root role.

        Args:
            user_id: The user's UUID
            role_id: The role's UUID
            project: Project the assignment is limited to (default: all)

        Raises:
            NotFoundError: If the user or role does not exist
            ValidationError: If the project is blank, or a root role is
                limited to a single project
        """
        await self._get_user(user_id)
        role = await self._get_role(role_id)
        scope = _assignment_scope(project)

        if role.is_root:
            if isinstance(scope, Specific):
                raise ValidationError(
                    f"Root role {role.name} cannot be limited to project {scope}",
                    details={"role_id": str(role.id)},
                )
            await self.access.replace_root_role(user_id, role.id)
        else:
            await self.access.add_user_to_role(user_id, role.id, scope)
        logger.info(
            "user_added_to_role",
            user_id=str(user_id),
            role=role.name,
            project=str(scope),
        )

    async def remove_user_from_role(
        self,
        user_id: UUID,
        role_id: UUID,
        project: Scope | str | None = ALL_PROJECTS,
    ) -> None:
        """Remove one assignment. Removing an absent assignment is a no-op."""
        scope = _assignment_scope(project)
        await self.access.remove_user_from_role(user_id, role_id, scope)
        logger.info(
            "user_removed_from_role",
            user_id=str(user_id),
            role_id=str(role_id),
            project=str(scope),
        )

    async def set_user_root_role(self, user_id: UUID, role_id: UUID) -> None:
        """Replace the user's root role with ``role_id``.

        Raises:
            NotFoundError: If the user or role does not exist
            ValidationError: If the role is not a root role
        """
        await self._get_user(user_id)
        role = await self._get_role(role_id)
        if not role.is_root:
            raise ValidationError(
                f"Role {role.name} is not a root role",
                details={"role_id": str(role.id), "type": str(role.type)},
            )

        await self.access.replace_root_role(user_id, role.id)
        logger.info("user_root_role_set", user_id=str(user_id), role=role.name)

    async def get_user_root_role(self, user_id: UUID) -> Role | None:
        """Return the user's root role, if any."""
        assignments = await self.access.list_assignments_for_user(user_id)
        for assignment in assignments:
            if assignment.role.is_root:
                return assignment.role
        return None

    async def get_roles_for_user(self, user_id: UUID) -> list[Role]:
        """Distinct roles the user holds across root and project scopes."""
        assignments = await self.access.list_assignments_for_user(user_id)
        roles: dict[UUID, Role] = {}
        for assignment in assignments:
            roles.setdefault(assignment.role.id, assignment.role)
        return list(roles.values())

    async def get_effective_roles(
        self, user_id: UUID, project_id: str | None = None
    ) -> list[Role]:
        """Roles that take part in a permission check.

        The root role always counts. Other assignments count when they cover
        all projects or exactly ``project_id``.
        """
        assignments = await self.access.list_assignments_for_user(user_id)
        roles: dict[UUID, Role] = {}
        for assignment in assignments:
            if assignment.role.is_root or assignment.project_scope.matches(project_id):
                roles.setdefault(assignment.role.id, assignment.role)
        return list(roles.values())

    async def get_users_for_role(self, role_id: UUID) -> list[User]:
        await self._get_role(role_id)
        return await self.access.list_users_for_role(role_id)

    async def get_role(self, role_id: UUID) -> RoleWithUsers:
        """Return a role with every user holding it.

        Raises:
            NotFoundError: If the role does not exist
        """
        role = await self._get_role(role_id)
        users = await self.access.list_users_for_role(role.id)
        return RoleWithUsers(
            role=RoleRead.model_validate(role),
            users=[UserRead.model_validate(user) for user in users],
        )

    async def get_role_data(self, role_id: UUID) -> RoleData:
        """Return a role, its distinct permission names, and its users.

        Raises:
            NotFoundError: If the role does not exist
        """
        role = await self._get_role(role_id)
        bindings = await self.access.list_bindings_for_roles([role.id])
        users = await self.access.list_users_for_role(role.id)
        permissions = dict.fromkeys(
            registry.resolve(binding.permission) for binding in bindings
        )
        return RoleData(
            role=RoleRead.model_validate(role),
            permissions=list(permissions),
            users=[UserRead.model_validate(user) for user in users],
        )

    # Bindings

    def _binding_scopes(
        self,
        permission: str | Permission,
        project: Scope | str | None,
        environment: Scope | str | None,
    ) -> tuple[Permission, Scope | None, Scope | None]:
        resolved = registry.resolve(permission)
        level = registry.describe(resolved)
        if level is ScopeLevel.ROOT:
            return resolved, None, None

        project_scope = coerce_scope(project)
        if project_scope is None:
            raise ValidationError(f"ProjectId cannot be empty for permission={resolved}")

        if level is ScopeLevel.ENVIRONMENT:
            environment_scope = coerce_scope(environment)
            if environment_scope is None:
                environment_scope = ALL_ENVIRONMENTS
            return resolved, project_scope, environment_scope
        return resolved, project_scope, None

    async def add_permission_to_role(
        self,
        role_id: UUID,
        permission: str | Permission,
        project: Scope | str | None = None,
        environment: Scope | str | None = None,
    ) -> None:
        """Bind a permission to a role.

        Project and environment permissions need a project scope, either a
        project id or ``ALL_PROJECTS``. Environment permissions without an
        environment apply to all environments.

        Raises:
            UnknownPermissionError: If the permission is not in the catalog
            ValidationError: If a required project scope is missing
            NotFoundError: If the role does not exist
        """
        resolved, project_scope, environment_scope = self._binding_scopes(
            permission, project, environment
        )
        role = await self._get_role(role_id)

        await self.access.add_permissions_to_role(
            role.id, [resolved], project_scope, environment_scope
        )
        logger.info(
            "role_permission_added",
            role=role.name,
            permission=str(resolved),
            project=str(project_scope) if project_scope else None,
            environment=str(environment_scope) if environment_scope else None,
        )

    async def remove_permission_from_role(
        self,
        role_id: UUID,
        permission: str | Permission,
        project: Scope | str | None = None,
        environment: Scope | str | None = None,
    ) -> None:
        """Remove a binding from a role. Validation matches ``add_permission_to_role``."""
        resolved, project_scope, environment_scope = self._binding_scopes(
            permission, project, environment
        )
        role = await self._get_role(role_id)

        await self.access.remove_permission_from_role(
            role.id, resolved, project_scope, environment_scope
        )
        logger.info(
            "role_permission_removed",
            role=role.name,
            permission=str(resolved),
            project=str(project_scope) if project_scope else None,
            environment=str(environment_scope) if environment_scope else None,
        )

    async def get_bindings_for_roles(
        self, role_ids: Sequence[UUID]
    ) -> list[RolePermissionBinding]:
        return await self.access.list_bindings_for_roles(role_ids)

    async def get_permissions_for_user(self, user_id: UUID) -> list[RolePermissionBinding]:
        """Every binding reachable through any of the user's assignments."""
        roles = await self.get_roles_for_user(user_id)
        return await self.access.list_bindings_for_roles([role.id for role in roles])

    async def remove_project_access(
        self, project_id: str, role_ids: Sequence[UUID]
    ) -> tuple[int, int]:
        """Drop the given roles' bindings and all assignments for one project.

        Returns:
            Tuple of (bindings removed, assignments removed)
        """
        project = Specific(project_id)
        bindings = await self.access.remove_project_bindings(role_ids, project)
        assignments = await self.access.remove_project_assignments(project)
        return bindings, assignments

"""Role catalog: built-in roles, custom roles, and per-project defaults."""

from uuid import UUID

import structlog

from flagaccess.config import Settings, settings as default_settings
from flagaccess.core.errors import ConflictError, NotFoundError, ValidationError
from flagaccess.core.permissions.models import Role, RoleName, RoleType
from flagaccess.core.permissions.scopes import Specific
from flagaccess.core.permissions.stores import AccessStore, RoleStore
from flagaccess.modules.roles.defaults import (
    ADMIN_PERMISSIONS,
    EDITOR_ROOT_PERMISSIONS,
    FEATURE_LIFECYCLE_PERMISSIONS,
    MEMBER_PROJECT_PERMISSIONS,
    OWNER_PROJECT_PERMISSIONS,
    PROJECT_ADMIN_PERMISSIONS,
    STRATEGY_PERMISSIONS,
)
from flagaccess.modules.roles.schemas import RoleCreate
from flagaccess.modules.users.models import User


logger = structlog.get_logger()

ROOT_ROLE_DESCRIPTIONS: dict[RoleName, str] = {
    RoleName.ADMIN: "Users with the root admin role have superuser access",
    RoleName.EDITOR: "Users with the root editor role have access to most features",
    RoleName.VIEWER: "Users with the root viewer role can only read root resources",
}

PROJECT_ROLE_DESCRIPTIONS: dict[RoleName, str] = {
    RoleName.OWNER: "Users with this role have full control over the project",
    RoleName.MEMBER: "Users with this role can manage feature toggles in the project",
}


class RoleService:
    """Service for role definitions.

    Owns the three root roles, the Owner/Member project templates, and
    administrator-defined custom roles.
    """

    def __init__(
        self,
        roles: RoleStore,
        access: AccessStore,
        settings: Settings | None = None,
    ) -> None:
        self.roles = roles
        self.access = access
        self.settings = settings or default_settings

    async def get_root_roles(self) -> list[Role]:
        """Return the root roles (Admin, Editor, Viewer)."""
        return await self.roles.list_by_type(RoleType.ROOT)

    async def get_project_roles(self) -> list[Role]:
        """Return the project role templates (Owner, Member) created so far."""
        return await self.roles.list_by_type(RoleType.PROJECT)

    async def get_role_by_name(self, name: str) -> Role:
        """Get a role by name.

        Raises:
            NotFoundError: If no role has that name
        """
        role = await self.roles.get_by_name(name)
        if role is None:
            raise NotFoundError(
                f"Could not find role with name {name}",
                resource="role",
                resource_id=name,
            )
        return role

    async def get_role_by_id(self, role_id: UUID) -> Role:
        """Get a role by ID.

        Raises:
            NotFoundError: If the role does not exist
        """
        role = await self.roles.get_by_id(role_id)
        if role is None:
            raise NotFoundError(
                "Role not found",
                resource="role",
                resource_id=str(role_id),
            )
        return role

    async def create_role(self, data: RoleCreate) -> Role:
        """Create a custom role with no bindings.

        Raises:
            ConflictError: If the name is already taken
        """
        if await self.roles.get_by_name(data.name) is not None:
            raise ConflictError(
                "Role name already in use",
                error_code="role_exists",
                details={"name": data.name},
            )
        role = await self.roles.create(data.name, RoleType.CUSTOM, data.description)
        logger.info("role_created", role_id=str(role.id), name=role.name, type=role.type)
        return role

    async def delete_role(self, role_id: UUID) -> None:
        """Delete a custom role once its bindings have been removed.

        Raises:
            NotFoundError: If the role does not exist
            ValidationError: If the role is built in or still has bindings
        """
        role = await self.get_role_by_id(role_id)
        if RoleType(role.type) is not RoleType.CUSTOM:
            raise ValidationError(f"Only custom roles can be deleted, {role.name} is {role.type}")

        remaining = await self.access.count_bindings_for_role(role.id)
        if remaining:
            raise ValidationError(
                f"Role {role.name} still has {remaining} permission(s) bound",
                details={"role_id": str(role.id)},
            )

        await self.roles.delete(role)
        logger.info("role_deleted", role_id=str(role_id), name=role.name)

    async def ensure_root_roles(self) -> list[Role]:
        """Create any missing root role together with its default bindings.

        Existing root roles are left untouched so that bindings changed by an
        administrator survive a re-run.

        Returns:
            The root roles
        """
        default_project = Specific(self.settings.default_project)
        default_environment = Specific(self.settings.default_environment)
        created: list[str] = []

        admin, is_new = await self._get_or_create(RoleName.ADMIN, RoleType.ROOT)
        if is_new:
            await self.access.add_permissions_to_role(admin.id, ADMIN_PERMISSIONS)
            created.append(admin.name)

        editor, is_new = await self._get_or_create(RoleName.EDITOR, RoleType.ROOT)
        if is_new:
            await self.access.add_permissions_to_role(editor.id, EDITOR_ROOT_PERMISSIONS)
            await self.access.add_permissions_to_role(
                editor.id,
                PROJECT_ADMIN_PERMISSIONS + FEATURE_LIFECYCLE_PERMISSIONS,
                default_project,
            )
            await self.access.add_permissions_to_role(
                editor.id,
                STRATEGY_PERMISSIONS,
                default_project,
                default_environment,
            )
            created.append(editor.name)

        viewer, is_new = await self._get_or_create(RoleName.VIEWER, RoleType.ROOT)
        if is_new:
            created.append(viewer.name)

        if created:
            logger.info("root_roles_bootstrapped", created=created)
        return await self.get_root_roles()

    async def create_default_project_roles(
        self, creator: User, project_id: str | None = None
    ) -> None:
        """Bind the Owner and Member defaults to a project and make
        ``creator`` its owner.

        Args:
            creator: User who created the project
            project_id: The new project's identifier

        Raises:
            ValidationError: If ``project_id`` is empty
        """
        if not project_id or not project_id.strip():
            raise ValidationError("ProjectId cannot be empty")

        project = Specific(project_id)
        environment = Specific(self.settings.default_environment)

        owner, _ = await self._get_or_create(RoleName.OWNER, RoleType.PROJECT)
        await self.access.add_permissions_to_role(owner.id, OWNER_PROJECT_PERMISSIONS, project)
        await self.access.add_permissions_to_role(
            owner.id, STRATEGY_PERMISSIONS, project, environment
        )

        member, _ = await self._get_or_create(RoleName.MEMBER, RoleType.PROJECT)
        await self.access.add_permissions_to_role(member.id, MEMBER_PROJECT_PERMISSIONS, project)
        await self.access.add_permissions_to_role(
            member.id, STRATEGY_PERMISSIONS, project, environment
        )

        await self.access.add_user_to_role(creator.id, owner.id, project)
        logger.info(
            "default_project_roles_created",
            project_id=project_id,
            owner_id=str(creator.id),
        )

    async def _get_or_create(
        self, name: RoleName, role_type: RoleType
    ) -> tuple[Role, bool]:
        role = await self.roles.get_by_name(name)
        if role is not None:
            return role, False

        if role_type is RoleType.ROOT:
            description = ROOT_ROLE_DESCRIPTIONS[name]
        else:
            description = PROJECT_ROLE_DESCRIPTIONS[name]
        role = await self.roles.create(name, role_type, description)
        logger.info("role_created", role_id=str(role.id), name=role.name, type=role.type)
        return role, True

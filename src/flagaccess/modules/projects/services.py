"""Default role provisioning driven by project lifecycle events."""

import structlog

from flagaccess.core.errors import ValidationError
from flagaccess.core.permissions.models import RoleName
from flagaccess.modules.access.services import AccessService
from flagaccess.modules.roles.services import RoleService
from flagaccess.modules.users.models import User


logger = structlog.get_logger()


class ProjectRolesService:
    """Reacts to projects being created and deleted elsewhere.

    Creation gives the project its Owner and Member bindings and makes the
    creator the owner. Deletion removes them again along with every
    assignment scoped to the project.
    """

    def __init__(self, roles: RoleService, access: AccessService) -> None:
        self.roles = roles
        self.access = access

    async def on_project_created(self, creator: User, project_id: str | None) -> None:
        """Provision default roles for a new project.

        Raises:
            ValidationError: If ``project_id`` is empty
        """
        await self.roles.create_default_project_roles(creator, project_id)

    async def on_project_deleted(self, project_id: str | None) -> None:
        """Remove the project's default bindings and scoped assignments.

        Raises:
            ValidationError: If ``project_id`` is empty
        """
        if not project_id or not project_id.strip():
            raise ValidationError("ProjectId cannot be empty")

        defaults = {RoleName.OWNER, RoleName.MEMBER}
        role_ids = [
            role.id for role in await self.roles.get_project_roles() if role.name in defaults
        ]

        bindings, assignments = await self.access.remove_project_access(project_id, role_ids)
        logger.info(
            "default_project_roles_removed",
            project_id=project_id,
            bindings_removed=bindings,
            assignments_removed=assignments,
        )

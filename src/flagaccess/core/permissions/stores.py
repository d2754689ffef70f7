"""Storage contracts consumed by the access services.

The services only ever talk to these protocols. The SQLAlchemy
repositories in ``flagaccess.modules`` implement them; any other
transactional store can be swapped in as long as ``replace_root_role``
stays atomic and serialised per user.
"""

from collections.abc import Sequence
from typing import Protocol
from uuid import UUID

from flagaccess.core.permissions.models import (
    Role,
    RolePermissionBinding,
    RoleType,
    UserRoleAssignment,
)
from flagaccess.core.permissions.scopes import Scope
from flagaccess.modules.users.models import User


class UserStore(Protocol):
    async def get_by_id(self, user_id: UUID) -> User | None: ...


class RoleStore(Protocol):
    async def get_by_name(self, name: str) -> Role | None: ...

    async def get_by_id(self, role_id: UUID) -> Role | None: ...

    async def create(
        self, name: str, role_type: RoleType, description: str | None = None
    ) -> Role: ...

    async def list_by_type(self, role_type: RoleType) -> list[Role]: ...

    async def delete(self, role: Role) -> None: ...


class AccessStore(Protocol):
    async def add_permissions_to_role(
        self,
        role_id: UUID,
        permissions: Sequence[str],
        project: Scope | None = None,
        environment: Scope | None = None,
    ) -> None: ...

    async def remove_permission_from_role(
        self,
        role_id: UUID,
        permission: str,
        project: Scope | None = None,
        environment: Scope | None = None,
    ) -> None: ...

    async def list_bindings_for_roles(
        self, role_ids: Sequence[UUID]
    ) -> list[RolePermissionBinding]: ...

    async def count_bindings_for_role(self, role_id: UUID) -> int: ...

    async def remove_project_bindings(
        self, role_ids: Sequence[UUID], project: Scope
    ) -> int: ...

    async def add_user_to_role(
        self, user_id: UUID, role_id: UUID, project: Scope
    ) -> None: ...

    async def remove_user_from_role(
        self, user_id: UUID, role_id: UUID, project: Scope
    ) -> None: ...

    async def list_assignments_for_user(
        self, user_id: UUID
    ) -> list[UserRoleAssignment]: ...

    async def list_users_for_role(self, role_id: UUID) -> list[User]: ...

    async def remove_project_assignments(self, project: Scope) -> int: ...

    async def replace_root_role(self, user_id: UUID, role_id: UUID) -> None:
        """Delete every root assignment of the user and insert ``role_id``.

        Both writes share one transaction, and concurrent replaces for the
        same user must be serialised. The SQLAlchemy store takes a
        ``SELECT ... FOR UPDATE`` lock on the user row before deleting, so
        under READ COMMITTED the second replace waits for the first to
        commit and then deletes its insert.
        """

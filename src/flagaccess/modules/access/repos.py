"""Binding and assignment repository for database operations."""

from collections.abc import Sequence
from typing import Any
from uuid import UUID

from sqlalchemy import ColumnElement, Select, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from flagaccess.core.permissions.models import (
    Role,
    RolePermissionBinding,
    RoleType,
    UserRoleAssignment,
)
from flagaccess.core.permissions.scopes import Scope, to_column
from flagaccess.modules.users.models import User


def lock_user(user_id: UUID) -> Select[tuple[UUID]]:
    """Row lock on one user, held until the transaction ends.

    Dialects without row locks (SQLite) drop the FOR UPDATE clause; SQLite
    already serialises writers.
    """
    return select(User.id).where(User.id == user_id).with_for_update()


def _matches_column(column: Any, value: str | None) -> ColumnElement[bool]:
    """Equality that treats NULL (the wildcard) as a value of its own."""
    if value is None:
        return column.is_(None)
    return column == value


class AccessRepository:
    """Repository for role/permission bindings and user/role assignments.

    Inserts are idempotent: an identical row is never written twice.
    Deletes remove every identical row and succeed when there is none.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # Bindings

    async def add_permissions_to_role(
        self,
        role_id: UUID,
        permissions: Sequence[str],
        project: Scope | None = None,
        environment: Scope | None = None,
    ) -> None:
        """Bind permissions to a role under one project/environment scope.

        Args:
            role_id: The role's UUID
            permissions: Permission names to bind
            project: Project scope, None or the wildcard for all projects
            environment: Environment scope, None or the wildcard for all
        """
        project_value = to_column(project)
        environment_value = to_column(environment)

        for permission in permissions:
            stmt = select(RolePermissionBinding.id).where(
                RolePermissionBinding.role_id == role_id,
                RolePermissionBinding.permission == str(permission),
                _matches_column(RolePermissionBinding.project, project_value),
                _matches_column(RolePermissionBinding.environment, environment_value),
            )
            result = await self.session.execute(stmt.limit(1))
            if result.scalar_one_or_none() is not None:
                continue
            self.session.add(
                RolePermissionBinding(
                    role_id=role_id,
                    permission=str(permission),
                    project=project_value,
                    environment=environment_value,
                )
            )

        await self.session.flush()

    async def remove_permission_from_role(
        self,
        role_id: UUID,
        permission: str,
        project: Scope | None = None,
        environment: Scope | None = None,
    ) -> None:
        """Remove one binding from a role. No-op if it does not exist."""
        stmt = delete(RolePermissionBinding).where(
            RolePermissionBinding.role_id == role_id,
            RolePermissionBinding.permission == str(permission),
            _matches_column(RolePermissionBinding.project, to_column(project)),
            _matches_column(RolePermissionBinding.environment, to_column(environment)),
        )
        await self.session.execute(stmt)
        await self.session.flush()

    async def list_bindings_for_roles(
        self, role_ids: Sequence[UUID]
    ) -> list[RolePermissionBinding]:
        """List every binding attached to any of the given roles."""
        if not role_ids:
            return []
        stmt = (
            select(RolePermissionBinding)
            .where(RolePermissionBinding.role_id.in_(list(role_ids)))
            .order_by(RolePermissionBinding.permission)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_bindings_for_role(self, role_id: UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(RolePermissionBinding)
            .where(RolePermissionBinding.role_id == role_id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def remove_project_bindings(
        self, role_ids: Sequence[UUID], project: Scope
    ) -> int:
        """Remove the bindings of the given roles scoped to one project.

        Returns:
            Number of bindings removed
        """
        if not role_ids:
            return 0
        stmt = delete(RolePermissionBinding).where(
            RolePermissionBinding.role_id.in_(list(role_ids)),
            _matches_column(RolePermissionBinding.project, to_column(project)),
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount or 0

    # Assignments

    async def add_user_to_role(
        self, user_id: UUID, role_id: UUID, project: Scope
    ) -> None:
        """Assign a role to a user under a project scope. Idempotent."""
        project_value = to_column(project)
        stmt = select(UserRoleAssignment.id).where(
            UserRoleAssignment.user_id == user_id,
            UserRoleAssignment.role_id == role_id,
            _matches_column(UserRoleAssignment.project, project_value),
        )
        result = await self.session.execute(stmt.limit(1))
        if result.scalar_one_or_none() is not None:
            return

        self.session.add(
            UserRoleAssignment(user_id=user_id, role_id=role_id, project=project_value)
        )
        await self.session.flush()

    async def remove_user_from_role(
        self, user_id: UUID, role_id: UUID, project: Scope
    ) -> None:
        """Remove one assignment. No-op if it does not exist."""
        stmt = delete(UserRoleAssignment).where(
            UserRoleAssignment.user_id == user_id,
            UserRoleAssignment.role_id == role_id,
            _matches_column(UserRoleAssignment.project, to_column(project)),
        )
        await self.session.execute(stmt)
        await self.session.flush()

    async def list_assignments_for_user(
        self, user_id: UUID
    ) -> list[UserRoleAssignment]:
        """List every assignment held by a user, with roles loaded."""
        stmt = (
            select(UserRoleAssignment)
            .where(UserRoleAssignment.user_id == user_id)
            .order_by(UserRoleAssignment.created_at)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_users_for_role(self, role_id: UUID) -> list[User]:
        """Distinct users holding a role under any project scope."""
        stmt = (
            select(User)
            .join(UserRoleAssignment, UserRoleAssignment.user_id == User.id)
            .where(UserRoleAssignment.role_id == role_id)
            .distinct()
            .order_by(User.email)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def remove_project_assignments(self, project: Scope) -> int:
        """Remove every assignment scoped to one project.

        Returns:
            Number of assignments removed
        """
        stmt = delete(UserRoleAssignment).where(
            _matches_column(UserRoleAssignment.project, to_column(project))
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount or 0

    async def replace_root_role(self, user_id: UUID, role_id: UUID) -> None:
        """Swap whatever root role a user holds for ``role_id``.

        The user row is locked first, so two replaces for the same user run
        one after the other and the second one's delete sees the first
        one's insert. The delete and the insert are issued in the session's
        current transaction, so both become visible to other readers
        together on commit or neither does.
        """
        await self.session.execute(lock_user(user_id))
        root_role_ids = select(Role.id).where(Role.type == RoleType.ROOT.value)
        await self.session.execute(
            delete(UserRoleAssignment).where(
                UserRoleAssignment.user_id == user_id,
                UserRoleAssignment.role_id.in_(root_role_ids),
            )
        )
        self.session.add(
            UserRoleAssignment(user_id=user_id, role_id=role_id, project=None)
        )
        await self.session.flush()

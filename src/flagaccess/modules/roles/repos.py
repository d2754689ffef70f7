"""Role repository for database operations."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from flagaccess.core.permissions.models import Role, RoleType


class RoleRepository:
    """Repository for Role database operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(
        self,
        name: str,
        role_type: RoleType,
        description: str | None = None,
    ) -> Role:
        """Create a new role.

        Args:
            name: Unique role name
            role_type: Root, project, or custom
            description: Optional description

        Returns:
            The created role with ID populated
        """
        role = Role(name=name, type=role_type.value, description=description)
        self.session.add(role)
        await self.session.flush()
        await self.session.refresh(role)
        return role

    async def get_by_id(self, role_id: UUID) -> Role | None:
        """Get a role by ID.

        Returns:
            Role if found, None otherwise
        """
        return await self.session.get(Role, role_id)

    async def get_by_name(self, name: str) -> Role | None:
        """Get a role by its unique name.

        Returns:
            Role if found, None otherwise
        """
        stmt = select(Role).where(Role.name == name)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_type(self, role_type: RoleType) -> list[Role]:
        """List all roles of one type, ordered by name."""
        stmt = select(Role).where(Role.type == role_type.value).order_by(Role.name)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete(self, role: Role) -> None:
        """Delete a role.

        Args:
            role: Role instance to delete
        """
        await self.session.delete(role)
        await self.session.flush()

"""User repository for database operations."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from flagaccess.modules.users.models import User
from flagaccess.modules.users.schemas import UserCreate


class UserRepository:
    """Repository for User database operations.

    The access core only looks users up; ``create`` exists for seeding
    and tests.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, data: UserCreate) -> User:
        """Insert a new user.

        Args:
            data: Identity attributes

        Returns:
            The created user with ID populated
        """
        user = User(name=data.name, email=data.email)
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def get_by_id(self, user_id: UUID) -> User | None:
        """Get a user by ID.

        Returns:
            User if found, None otherwise
        """
        return await self.session.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        """Get a user by email address.

        Returns:
            User if found, None otherwise
        """
        stmt = select(User).where(User.email == email)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

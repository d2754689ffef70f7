"""Table creation for scripts and tests.

Importing this module registers every model on ``Base.metadata``.
"""

from sqlalchemy.ext.asyncio import AsyncEngine

from flagaccess.core.database.base import Base
from flagaccess.core.permissions import models as access_models  # noqa: F401
from flagaccess.modules.users import models as user_models  # noqa: F401


async def create_tables(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_tables(engine: AsyncEngine) -> None:
    """Drop all tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

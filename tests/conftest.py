"""Pytest configuration and shared fixtures.

Each test gets its own in-memory SQLite database with every table created
and the root roles bootstrapped on demand.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from flagaccess.config import Settings
from flagaccess.core.database.schema import create_tables
from flagaccess.core.permissions.checker import PermissionChecker
from flagaccess.core.permissions.models import Role, RoleName
from flagaccess.core.permissions.scopes import ALL_PROJECTS
from flagaccess.modules.access.repos import AccessRepository
from flagaccess.modules.access.services import AccessService
from flagaccess.modules.projects.services import ProjectRolesService
from flagaccess.modules.roles.repos import RoleRepository
from flagaccess.modules.roles.services import RoleService
from flagaccess.modules.users.models import User
from flagaccess.modules.users.repos import UserRepository
from tests.factories.user import UserCreateFactory


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create an in-memory database with all tables."""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a session that is rolled back after the test."""
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def settings() -> Settings:
    """Settings with the stock default project and environment."""
    return Settings(_env_file=None, default_project="default", default_environment="development")


@pytest.fixture
def role_service(db: AsyncSession, settings: Settings) -> RoleService:
    return RoleService(RoleRepository(db), AccessRepository(db), settings)


@pytest.fixture
def access_service(db: AsyncSession) -> AccessService:
    return AccessService(RoleRepository(db), AccessRepository(db), UserRepository(db))


@pytest.fixture
def checker(access_service: AccessService) -> PermissionChecker:
    return PermissionChecker(access_service)


@pytest.fixture
def project_roles(
    role_service: RoleService, access_service: AccessService
) -> ProjectRolesService:
    return ProjectRolesService(role_service, access_service)


@pytest.fixture
async def root_roles(role_service: RoleService) -> dict[str, Role]:
    """Bootstrap Admin, Editor and Viewer and index them by name."""
    roles = await role_service.ensure_root_roles()
    return {role.name: role for role in roles}


@pytest.fixture
def make_user(db: AsyncSession) -> Callable[[], Awaitable[User]]:
    """Return a coroutine function that inserts a fresh user."""
    repo = UserRepository(db)

    async def _make_user() -> User:
        return await repo.create(UserCreateFactory.build())

    return _make_user


@pytest.fixture
async def editor_user(
    make_user: Callable[[], Awaitable[User]],
    access_service: AccessService,
    root_roles: dict[str, Role],
) -> User:
    """A user holding the Editor root role on all projects."""
    user = await make_user()
    await access_service.add_user_to_role(user.id, root_roles[RoleName.EDITOR].id, ALL_PROJECTS)
    return user


@pytest.fixture
async def admin_user(
    make_user: Callable[[], Awaitable[User]],
    access_service: AccessService,
    root_roles: dict[str, Role],
) -> User:
    """A user holding the Admin root role."""
    user = await make_user()
    await access_service.set_user_root_role(user.id, root_roles[RoleName.ADMIN].id)
    return user


@pytest.fixture
async def viewer_user(
    make_user: Callable[[], Awaitable[User]],
    access_service: AccessService,
    root_roles: dict[str, Role],
) -> User:
    """A user holding the Viewer root role."""
    user = await make_user()
    await access_service.set_user_root_role(user.id, root_roles[RoleName.VIEWER].id)
    return user

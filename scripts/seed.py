#!/usr/bin/env python
"""
Create tables and bootstrap root roles, optionally with demo data.
"""

import argparse
import asyncio
import sys

import structlog


# Add src to path for imports
sys.path.insert(0, "src")

from flagaccess.core.database import get_engine, session_scope
from flagaccess.core.database.schema import create_tables
from flagaccess.core.logging import configure_logging
from flagaccess.core.permissions.models import RoleName
from flagaccess.modules.access.repos import AccessRepository
from flagaccess.modules.access.services import AccessService
from flagaccess.modules.roles.repos import RoleRepository
from flagaccess.modules.roles.services import RoleService
from flagaccess.modules.users.repos import UserRepository
from flagaccess.modules.users.schemas import UserCreate


logger = structlog.get_logger()


async def seed_default() -> None:
    """Create tables and the Admin/Editor/Viewer root roles."""
    await create_tables(get_engine())
    async with session_scope() as session:
        roles = RoleService(RoleRepository(session), AccessRepository(session))
        root_roles = await roles.ensure_root_roles()
        logger.info("seed_default_done", roles=[role.name for role in root_roles])


async def seed_demo() -> None:
    """Create demo users holding each root role plus one demo project."""
    await seed_default()
    async with session_scope() as session:
        users = UserRepository(session)
        role_repo = RoleRepository(session)
        access_repo = AccessRepository(session)
        roles = RoleService(role_repo, access_repo)
        access = AccessService(role_repo, access_repo, users)

        demo_users = [
            ("Alice Admin", "admin@example.com", RoleName.ADMIN),
            ("Bob Editor", "editor@example.com", RoleName.EDITOR),
            ("Carol Viewer", "viewer@example.com", RoleName.VIEWER),
        ]
        for name, email, role_name in demo_users:
            user = await users.get_by_email(email)
            if user is None:
                user = await users.create(UserCreate(name=name, email=email))
            role = await roles.get_role_by_name(role_name)
            await access.set_user_root_role(user.id, role.id)

        editor = await users.get_by_email("editor@example.com")
        if editor is not None:
            await roles.create_default_project_roles(editor, "demo-project")
        logger.info("seed_demo_done", users=len(demo_users))


async def main(scenario: str) -> None:
    """Run the seeding based on scenario."""
    configure_logging()
    if scenario == "default":
        await seed_default()
    elif scenario == "demo":
        await seed_demo()
    else:
        print(f"Unknown scenario: {scenario}")
        print("Available scenarios: default, demo")
        sys.exit(1)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed database with roles and demo data")
    parser.add_argument(
        "--scenario",
        "-s",
        default="default",
        help="Seed scenario to run (default, demo)",
    )
    args = parser.parse_args()

    asyncio.run(main(args.scenario))

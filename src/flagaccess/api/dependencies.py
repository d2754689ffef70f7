"""Shared API dependencies for the surrounding FastAPI layer."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from flagaccess.core.database import get_db
from flagaccess.modules.access.repos import AccessRepository
from flagaccess.modules.access.services import AccessService
from flagaccess.modules.projects.services import ProjectRolesService
from flagaccess.modules.roles.repos import RoleRepository
from flagaccess.modules.roles.services import RoleService
from flagaccess.modules.users.repos import UserRepository


# Type alias for database session dependency
DBSession = Annotated[AsyncSession, Depends(get_db)]


def get_role_service(db: DBSession) -> RoleService:
    return RoleService(RoleRepository(db), AccessRepository(db))


def get_access_service(db: DBSession) -> AccessService:
    return AccessService(RoleRepository(db), AccessRepository(db), UserRepository(db))


RoleSvc = Annotated[RoleService, Depends(get_role_service)]
AccessSvc = Annotated[AccessService, Depends(get_access_service)]


def get_project_roles_service(roles: RoleSvc, access: AccessSvc) -> ProjectRolesService:
    return ProjectRolesService(roles, access)


ProjectRolesSvc = Annotated[ProjectRolesService, Depends(get_project_roles_service)]

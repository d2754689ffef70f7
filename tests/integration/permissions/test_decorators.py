"""Integration tests for the route guards.

These tests mount guarded endpoints on a FastAPI app backed by the test
session and check:
- require_permission
- require_any_permission
- require_all_permissions
"""

from collections.abc import AsyncGenerator
from typing import Annotated
from uuid import UUID

import pytest
from fastapi import APIRouter, Depends, FastAPI, Header
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from flagaccess.api.dependencies import AccessSvc, DBSession
from flagaccess.core.database import get_db
from flagaccess.core.errors import ForbiddenError, UnknownPermissionError, register_exception_handlers
from flagaccess.core.permissions.decorators import (
    require_all_permissions,
    require_any_permission,
    require_permission,
)
from flagaccess.core.permissions.registry import Permission
from flagaccess.modules.access.services import AccessService
from flagaccess.modules.users.models import User
from flagaccess.modules.users.repos import UserRepository


pytestmark = pytest.mark.integration


async def get_current_user(db: DBSession, x_user_id: Annotated[str, Header()]) -> User | None:
    """Stand-in for the host application's authentication."""
    return await UserRepository(db).get_by_id(UUID(x_user_id))


CurrentUser = Annotated[User | None, Depends(get_current_user)]

guarded_router = APIRouter()


@guarded_router.post("/addons")
@require_permission(Permission.CREATE_ADDON)
async def create_addon(current_user: CurrentUser, access: AccessSvc):
    return {"status": "ok"}


@guarded_router.put("/projects/{project_id}")
@require_any_permission([Permission.UPDATE_PROJECT, Permission.ADMIN])
async def update_project(project_id: str, current_user: CurrentUser, access: AccessSvc):
    return {"status": "ok", "project_id": project_id}


@guarded_router.post("/projects/{project_id}/environments/{environment}/strategies")
@require_all_permissions([Permission.UPDATE_FEATURE, Permission.CREATE_FEATURE_STRATEGY])
async def add_strategy(
    project_id: str, environment: str, current_user: CurrentUser, access: AccessSvc
):
    return {"status": "ok", "environment": environment}


class TestRouteGuards:
    @pytest.fixture
    def app(self, db: AsyncSession) -> FastAPI:
        app = FastAPI()
        register_exception_handlers(app)
        app.include_router(guarded_router, prefix="/test")

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield db

        app.dependency_overrides[get_db] = override_get_db
        return app

    @pytest.fixture
    async def client(self, app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as client:
            yield client

    async def test_root_permission_allowed(self, client: AsyncClient, editor_user: User):
        response = await client.post("/test/addons", headers={"x-user-id": str(editor_user.id)})

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    async def test_root_permission_denied(self, client: AsyncClient, viewer_user: User):
        response = await client.post("/test/addons", headers={"x-user-id": str(viewer_user.id)})

        assert response.status_code == 403
        body = response.json()
        assert body["type"] == "urn:flagaccess:error:permission_denied"
        assert body["required_permissions"] == ["CREATE_ADDON"]
        assert body["detail"] == "Missing required permission. Need one of: CREATE_ADDON"

    async def test_project_scope_taken_from_path(self, client: AsyncClient, editor_user: User):
        headers = {"x-user-id": str(editor_user.id)}

        allowed = await client.put("/test/projects/default", headers=headers)
        denied = await client.put("/test/projects/other", headers=headers)

        assert allowed.status_code == 200
        assert allowed.json()["project_id"] == "default"
        assert denied.status_code == 403

    async def test_admin_passes_every_guard(self, client: AsyncClient, admin_user: User):
        headers = {"x-user-id": str(admin_user.id)}

        response = await client.post(
            "/test/projects/anything/environments/production/strategies", headers=headers
        )

        assert response.status_code == 200

    async def test_require_all_checks_environment(self, client: AsyncClient, editor_user: User):
        headers = {"x-user-id": str(editor_user.id)}

        allowed = await client.post(
            "/test/projects/default/environments/development/strategies", headers=headers
        )
        denied = await client.post(
            "/test/projects/default/environments/production/strategies", headers=headers
        )

        assert allowed.status_code == 200
        assert denied.status_code == 403
        assert denied.json()["detail"] == (
            "Missing required permission. Need all of: UPDATE_FEATURE, CREATE_FEATURE_STRATEGY"
        )

    async def test_unknown_user_is_rejected(self, client: AsyncClient, root_roles):
        response = await client.post(
            "/test/addons", headers={"x-user-id": "00000000-0000-0000-0000-000000000000"}
        )

        assert response.status_code == 403
        assert response.json()["type"] == "urn:flagaccess:error:auth_required"


class TestGuardWithoutRouting:
    """The guards only rely on keyword arguments, not on FastAPI itself."""

    async def test_missing_access_service(self, editor_user: User):
        @require_permission(Permission.CREATE_ADDON)
        async def handler(current_user: User, access: AccessService | None = None):
            return "ok"

        with pytest.raises(ForbiddenError) as exc_info:
            await handler(current_user=editor_user, access=None)

        assert exc_info.value.error_code == "permission_check_failed"

    async def test_direct_call_with_access(self, editor_user: User, access_service: AccessService):
        @require_permission("CREATE_PROJECT")
        async def handler(current_user: User, access: AccessService):
            return "ok"

        assert await handler(current_user=editor_user, access=access_service) == "ok"

    def test_unknown_permission_fails_at_decoration(self):
        with pytest.raises(UnknownPermissionError):
            require_permission("FLY_TO_MOON")

"""Integration tests for the role catalog."""

from collections.abc import Awaitable, Callable
from uuid import uuid4

import pytest

from flagaccess.core.errors import ConflictError, NotFoundError, ValidationError
from flagaccess.core.permissions.checker import PermissionChecker
from flagaccess.core.permissions.models import Role, RoleName, RoleType
from flagaccess.core.permissions.registry import Permission
from flagaccess.modules.access.services import AccessService
from flagaccess.modules.roles.schemas import RoleCreate
from flagaccess.modules.roles.services import RoleService
from flagaccess.modules.users.models import User


pytestmark = pytest.mark.integration

MakeUser = Callable[[], Awaitable[User]]


class TestRootRoles:
    async def test_root_roles_are_bootstrapped(self, role_service: RoleService):
        roles = await role_service.ensure_root_roles()

        assert sorted(role.name for role in roles) == ["Admin", "Editor", "Viewer"]
        assert all(role.is_root for role in roles)

    async def test_ensure_root_roles_is_idempotent(
        self, role_service: RoleService, access_service: AccessService
    ):
        first = await role_service.ensure_root_roles()
        editor = next(role for role in first if role.name == RoleName.EDITOR)
        before = await access_service.get_bindings_for_roles([editor.id])

        second = await role_service.ensure_root_roles()
        after = await access_service.get_bindings_for_roles([editor.id])

        assert {role.id for role in first} == {role.id for role in second}
        assert len(before) == len(after)

    async def test_rerun_keeps_administrator_changes(
        self, role_service: RoleService, access_service: AccessService, root_roles: dict[str, Role]
    ):
        editor = root_roles[RoleName.EDITOR]
        await access_service.remove_permission_from_role(editor.id, Permission.CREATE_ADDON)

        await role_service.ensure_root_roles()

        data = await access_service.get_role_data(editor.id)
        assert Permission.CREATE_ADDON not in data.permissions

    async def test_admin_holds_only_admin(
        self, access_service: AccessService, root_roles: dict[str, Role]
    ):
        data = await access_service.get_role_data(root_roles[RoleName.ADMIN].id)

        assert data.permissions == [Permission.ADMIN]

    async def test_viewer_has_no_bindings(
        self, access_service: AccessService, root_roles: dict[str, Role]
    ):
        data = await access_service.get_role_data(root_roles[RoleName.VIEWER].id)

        assert data.permissions == []

    async def test_editor_bindings_use_configured_defaults(
        self, access_service: AccessService, root_roles: dict[str, Role]
    ):
        bindings = await access_service.get_bindings_for_roles([root_roles[RoleName.EDITOR].id])
        scoped = {(b.permission, b.project, b.environment) for b in bindings if b.project is not None}

        assert (Permission.UPDATE_PROJECT, "default", None) in scoped
        assert (Permission.CREATE_FEATURE_STRATEGY, "default", "development") in scoped


class TestLookups:
    async def test_get_role_by_name(self, role_service: RoleService, root_roles: dict[str, Role]):
        role = await role_service.get_role_by_name("Viewer")

        assert role.id == root_roles[RoleName.VIEWER].id

    async def test_get_role_by_unknown_name(self, role_service: RoleService):
        with pytest.raises(NotFoundError) as exc_info:
            await role_service.get_role_by_name("Nobody")

        assert exc_info.value.message == "Could not find role with name Nobody"

    async def test_get_role_by_unknown_id(self, role_service: RoleService):
        with pytest.raises(NotFoundError):
            await role_service.get_role_by_id(uuid4())

    async def test_project_roles_appear_after_first_project(
        self, role_service: RoleService, editor_user: User
    ):
        assert await role_service.get_project_roles() == []

        await role_service.create_default_project_roles(editor_user, "proj-x")
        await role_service.create_default_project_roles(editor_user, "proj-y")

        names = [role.name for role in await role_service.get_project_roles()]
        assert names == ["Member", "Owner"]


class TestCustomRoles:
    async def test_create_role(self, role_service: RoleService):
        role = await role_service.create_role(
            RoleCreate(name="  Power user ", description="Strategy access in production")
        )

        assert role.name == "Power user"
        assert RoleType(role.type) is RoleType.CUSTOM
        assert role.is_root is False

    async def test_create_role_duplicate_name(
        self, role_service: RoleService, root_roles: dict[str, Role]
    ):
        with pytest.raises(ConflictError) as exc_info:
            await role_service.create_role(RoleCreate(name="Editor"))

        assert exc_info.value.error_code == "role_exists"

    async def test_delete_custom_role(self, role_service: RoleService):
        role = await role_service.create_role(RoleCreate(name="Temporary"))

        await role_service.delete_role(role.id)

        with pytest.raises(NotFoundError):
            await role_service.get_role_by_name("Temporary")

    async def test_delete_role_with_bindings(
        self, role_service: RoleService, access_service: AccessService
    ):
        role = await role_service.create_role(RoleCreate(name="Bound"))
        await access_service.add_permission_to_role(role.id, Permission.CREATE_TAG_TYPE)

        with pytest.raises(ValidationError):
            await role_service.delete_role(role.id)

    async def test_delete_builtin_role(self, role_service: RoleService, root_roles: dict[str, Role]):
        with pytest.raises(ValidationError):
            await role_service.delete_role(root_roles[RoleName.VIEWER].id)


class TestDefaultProjectRoles:
    @pytest.mark.parametrize("project_id", ["", None, "   "])
    async def test_empty_project_id(
        self, role_service: RoleService, editor_user: User, project_id: str | None
    ):
        with pytest.raises(ValidationError) as exc_info:
            await role_service.create_default_project_roles(editor_user, project_id)

        assert exc_info.value.message == "ProjectId cannot be empty"

    async def test_creator_becomes_owner(
        self, role_service: RoleService, checker: PermissionChecker, make_user: MakeUser
    ):
        creator = await make_user()

        await role_service.create_default_project_roles(creator, "proj-x")

        assert await checker.has_permission(creator, Permission.UPDATE_PROJECT, "proj-x") is True
        assert await checker.has_permission(creator, Permission.DELETE_PROJECT, "proj-x") is True
        assert (
            await checker.has_permission(creator, Permission.UPDATE_FEATURE_STRATEGY, "proj-x", "development")
            is True
        )
        assert await checker.has_permission(creator, Permission.UPDATE_PROJECT, "proj-y") is False

    async def test_member_cannot_administer_project(
        self,
        role_service: RoleService,
        access_service: AccessService,
        checker: PermissionChecker,
        make_user: MakeUser,
    ):
        creator = await make_user()
        member = await make_user()
        await role_service.create_default_project_roles(creator, "proj-x")
        member_role = await role_service.get_role_by_name(RoleName.MEMBER)

        await access_service.add_user_to_role(member.id, member_role.id, "proj-x")

        assert await checker.has_permission(member, Permission.UPDATE_PROJECT, "proj-x") is False
        assert await checker.has_permission(member, Permission.UPDATE_FEATURE, "proj-x") is True

    async def test_repeat_provisioning_is_idempotent(
        self, role_service: RoleService, access_service: AccessService, make_user: MakeUser
    ):
        creator = await make_user()

        await role_service.create_default_project_roles(creator, "proj-x")
        owner = await role_service.get_role_by_name(RoleName.OWNER)
        before = await access_service.get_bindings_for_roles([owner.id])
        await role_service.create_default_project_roles(creator, "proj-x")
        after = await access_service.get_bindings_for_roles([owner.id])

        assert len(before) == len(after)
        assert [u.id for u in await access_service.get_users_for_role(owner.id)] == [creator.id]

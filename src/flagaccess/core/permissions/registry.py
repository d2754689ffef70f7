"""Permission catalog.

Every permission the platform knows about, together with the scope level
a binding of that permission must carry. The catalog is fixed at import
time and never mutated.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType

from flagaccess.core.errors import UnknownPermissionError


class ScopeLevel(StrEnum):
    """Where a permission applies."""

    ROOT = "root"
    PROJECT = "project"
    ENVIRONMENT = "environment"


class Permission(StrEnum):
    ADMIN = "ADMIN"

    # Root
    CREATE_STRATEGY = "CREATE_STRATEGY"
    UPDATE_STRATEGY = "UPDATE_STRATEGY"
    DELETE_STRATEGY = "DELETE_STRATEGY"
    UPDATE_APPLICATION = "UPDATE_APPLICATION"
    CREATE_CONTEXT_FIELD = "CREATE_CONTEXT_FIELD"
    UPDATE_CONTEXT_FIELD = "UPDATE_CONTEXT_FIELD"
    DELETE_CONTEXT_FIELD = "DELETE_CONTEXT_FIELD"
    CREATE_PROJECT = "CREATE_PROJECT"
    CREATE_ADDON = "CREATE_ADDON"
    UPDATE_ADDON = "UPDATE_ADDON"
    DELETE_ADDON = "DELETE_ADDON"
    READ_ROLE = "READ_ROLE"
    UPDATE_ROLE = "UPDATE_ROLE"
    CREATE_API_TOKEN = "CREATE_API_TOKEN"
    UPDATE_API_TOKEN = "UPDATE_API_TOKEN"
    DELETE_API_TOKEN = "DELETE_API_TOKEN"
    CREATE_TAG_TYPE = "CREATE_TAG_TYPE"
    UPDATE_TAG_TYPE = "UPDATE_TAG_TYPE"
    DELETE_TAG_TYPE = "DELETE_TAG_TYPE"
    CREATE_ENVIRONMENT = "CREATE_ENVIRONMENT"
    UPDATE_ENVIRONMENT = "UPDATE_ENVIRONMENT"
    DELETE_ENVIRONMENT = "DELETE_ENVIRONMENT"

    # Project
    UPDATE_PROJECT = "UPDATE_PROJECT"
    DELETE_PROJECT = "DELETE_PROJECT"
    CREATE_FEATURE = "CREATE_FEATURE"
    UPDATE_FEATURE = "UPDATE_FEATURE"
    DELETE_FEATURE = "DELETE_FEATURE"
    MOVE_FEATURE_TOGGLE = "MOVE_FEATURE_TOGGLE"

    # Environment
    CREATE_FEATURE_STRATEGY = "CREATE_FEATURE_STRATEGY"
    UPDATE_FEATURE_STRATEGY = "UPDATE_FEATURE_STRATEGY"
    DELETE_FEATURE_STRATEGY = "DELETE_FEATURE_STRATEGY"
    UPDATE_FEATURE_ENVIRONMENT = "UPDATE_FEATURE_ENVIRONMENT"


_PROJECT_PERMISSIONS = frozenset(
    {
        Permission.UPDATE_PROJECT,
        Permission.DELETE_PROJECT,
        Permission.CREATE_FEATURE,
        Permission.UPDATE_FEATURE,
        Permission.DELETE_FEATURE,
        Permission.MOVE_FEATURE_TOGGLE,
    }
)

_ENVIRONMENT_PERMISSIONS = frozenset(
    {
        Permission.CREATE_FEATURE_STRATEGY,
        Permission.UPDATE_FEATURE_STRATEGY,
        Permission.DELETE_FEATURE_STRATEGY,
        Permission.UPDATE_FEATURE_ENVIRONMENT,
    }
)


def _scope_level_for(permission: Permission) -> ScopeLevel:
    if permission in _ENVIRONMENT_PERMISSIONS:
        return ScopeLevel.ENVIRONMENT
    if permission in _PROJECT_PERMISSIONS:
        return ScopeLevel.PROJECT
    return ScopeLevel.ROOT


PERMISSION_REGISTRY: Mapping[Permission, ScopeLevel] = MappingProxyType(
    {permission: _scope_level_for(permission) for permission in Permission}
)


@dataclass(frozen=True, slots=True)
class PermissionDescription:
    """A catalog entry as exposed to callers."""

    name: Permission
    scope_level: ScopeLevel

    @property
    def requires_project(self) -> bool:
        return self.scope_level is not ScopeLevel.ROOT


def resolve(name: str | Permission) -> Permission:
    """Map a permission name onto the catalog.

    Raises:
        UnknownPermissionError: If the name is not in the catalog
    """
    if isinstance(name, Permission):
        return name
    try:
        return Permission(name)
    except ValueError:
        raise UnknownPermissionError(str(name)) from None


def describe(name: str | Permission) -> ScopeLevel:
    """Return the scope level a binding of ``name`` must carry.

    Raises:
        UnknownPermissionError: If the name is not in the catalog
    """
    return PERMISSION_REGISTRY[resolve(name)]


def is_admin(name: str | Permission) -> bool:
    """True only for the permission that administers everything."""
    return resolve(name) is Permission.ADMIN


def requires_project(name: str | Permission) -> bool:
    """True when bindings of ``name`` must name a project scope."""
    return describe(name) is not ScopeLevel.ROOT


def list_permissions() -> list[PermissionDescription]:
    """All catalog entries in declaration order."""
    return [
        PermissionDescription(name=permission, scope_level=level)
        for permission, level in PERMISSION_REGISTRY.items()
    ]

"""Permission catalog, scopes, and the permission checker."""

from flagaccess.core.permissions.registry import (
    Permission,
    PermissionDescription,
    ScopeLevel,
    describe,
    is_admin,
    list_permissions,
)
from flagaccess.core.permissions.scopes import (
    ALL_ENVIRONMENTS,
    ALL_PROJECTS,
    All,
    Scope,
    Specific,
)


__all__ = [
    "ALL_ENVIRONMENTS",
    "ALL_PROJECTS",
    "All",
    "Permission",
    "PermissionDescription",
    "Scope",
    "ScopeLevel",
    "Specific",
    "describe",
    "is_admin",
    "list_permissions",
]

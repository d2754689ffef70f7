"""Default permission sets for the built-in roles."""

from flagaccess.core.permissions.registry import (
    PERMISSION_REGISTRY,
    Permission,
    ScopeLevel,
)


ADMIN_PERMISSIONS: tuple[Permission, ...] = (Permission.ADMIN,)

# Every root-level permission except ADMIN.
EDITOR_ROOT_PERMISSIONS: tuple[Permission, ...] = tuple(
    permission
    for permission, level in PERMISSION_REGISTRY.items()
    if level is ScopeLevel.ROOT and permission is not Permission.ADMIN
)

FEATURE_LIFECYCLE_PERMISSIONS: tuple[Permission, ...] = (
    Permission.CREATE_FEATURE,
    Permission.UPDATE_FEATURE,
    Permission.DELETE_FEATURE,
)

PROJECT_ADMIN_PERMISSIONS: tuple[Permission, ...] = (
    Permission.UPDATE_PROJECT,
    Permission.DELETE_PROJECT,
    Permission.MOVE_FEATURE_TOGGLE,
)

STRATEGY_PERMISSIONS: tuple[Permission, ...] = (
    Permission.CREATE_FEATURE_STRATEGY,
    Permission.UPDATE_FEATURE_STRATEGY,
    Permission.DELETE_FEATURE_STRATEGY,
    Permission.UPDATE_FEATURE_ENVIRONMENT,
)

OWNER_PROJECT_PERMISSIONS = PROJECT_ADMIN_PERMISSIONS + FEATURE_LIFECYCLE_PERMISSIONS
MEMBER_PROJECT_PERMISSIONS = FEATURE_LIFECYCLE_PERMISSIONS

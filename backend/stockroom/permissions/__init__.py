# Overview: Permission system package.
# Re-exports all public APIs for backwards-compatible imports.

from .categories import PermissionResource, PermissionAction
from .definitions import (
    PERMISSION_DEFINITIONS,
    TEAM_PERMISSIONS,
    USER_PERMISSIONS,
    STORE_PERMISSIONS,
    PRODUCT_PERMISSIONS,
    CART_PERMISSIONS,
    CART_ITEM_PERMISSIONS,
    ORDER_PERMISSIONS,
    REPORT_PERMISSIONS,
    GRAPHIC_PERMISSIONS,
    HISTORY_PERMISSIONS,
    permission_code,
)
from .roles import DEFAULT_ROLE_PERMISSIONS, UserRole
from .helpers import (
    get_all_permission_codes,
    get_permissions_by_resource,
    get_permission_definition,
    get_role_permission_codes,
    has_permission,
    validate_permission_code,
)

__all__ = [
    "PermissionResource",
    "PermissionAction",
    "PERMISSION_DEFINITIONS",
    "TEAM_PERMISSIONS",
    "USER_PERMISSIONS",
    "STORE_PERMISSIONS",
    "PRODUCT_PERMISSIONS",
    "CART_PERMISSIONS",
    "CART_ITEM_PERMISSIONS",
    "ORDER_PERMISSIONS",
    "REPORT_PERMISSIONS",
    "GRAPHIC_PERMISSIONS",
    "HISTORY_PERMISSIONS",
    "DEFAULT_ROLE_PERMISSIONS",
    "UserRole",
    "permission_code",
    "get_all_permission_codes",
    "get_permissions_by_resource",
    "get_permission_definition",
    "get_role_permission_codes",
    "has_permission",
    "validate_permission_code",
]

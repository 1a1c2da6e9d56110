# Overview: All permission definitions, one per resource and action.
# Each permission is defined as: (code, name, description, resource)

from .categories import PermissionAction, PermissionResource


_RESOURCE_LABELS = {
    PermissionResource.TEAMS: "Teams",
    PermissionResource.USERS: "Users",
    PermissionResource.STORES: "Stores",
    PermissionResource.PRODUCTS: "Products",
    PermissionResource.CARTS: "Carts",
    PermissionResource.CART_ITEMS: "Cart Items",
    PermissionResource.ORDERS: "Orders",
    PermissionResource.REPORTS: "Reports",
    PermissionResource.GRAPHICS: "Graphics",
    PermissionResource.HISTORIES: "Inventory Histories",
}

_ACTION_VERBS = {
    PermissionAction.CREATE: ("Create", "Create new"),
    PermissionAction.READ: ("View", "List and view"),
    PermissionAction.UPDATE: ("Edit", "Edit existing"),
    PermissionAction.DELETE: ("Delete", "Delete"),
}


def permission_code(resource: str, action: str) -> str:
    """Build the canonical "<resource>.<action>" code."""
    return f"{resource}.{action}"


def _definitions_for(resource: str) -> list[tuple[str, str, str, str]]:
    label = _RESOURCE_LABELS[resource]
    return [
        (
            permission_code(resource, action),
            f"{_ACTION_VERBS[action][0]} {label}",
            f"{_ACTION_VERBS[action][1]} {label.lower()} within the caller's team",
            resource,
        )
        for action in PermissionAction.ALL
    ]


TEAM_PERMISSIONS = _definitions_for(PermissionResource.TEAMS)
USER_PERMISSIONS = _definitions_for(PermissionResource.USERS)
STORE_PERMISSIONS = _definitions_for(PermissionResource.STORES)
PRODUCT_PERMISSIONS = _definitions_for(PermissionResource.PRODUCTS)
CART_PERMISSIONS = _definitions_for(PermissionResource.CARTS)
CART_ITEM_PERMISSIONS = _definitions_for(PermissionResource.CART_ITEMS)
ORDER_PERMISSIONS = _definitions_for(PermissionResource.ORDERS)
REPORT_PERMISSIONS = _definitions_for(PermissionResource.REPORTS)
GRAPHIC_PERMISSIONS = _definitions_for(PermissionResource.GRAPHICS)
HISTORY_PERMISSIONS = _definitions_for(PermissionResource.HISTORIES)


PERMISSION_DEFINITIONS = (
    TEAM_PERMISSIONS
    + USER_PERMISSIONS
    + STORE_PERMISSIONS
    + PRODUCT_PERMISSIONS
    + CART_PERMISSIONS
    + CART_ITEM_PERMISSIONS
    + ORDER_PERMISSIONS
    + REPORT_PERMISSIONS
    + GRAPHIC_PERMISSIONS
    + HISTORY_PERMISSIONS
)

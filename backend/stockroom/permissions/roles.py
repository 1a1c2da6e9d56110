# Overview: Static role -> permission policy table, loaded once at import.
#
# Entries are exact codes ("orders.read"), resource wildcards ("orders.*"),
# or the global wildcard ("*").

from .categories import PermissionResource as R


class UserRole:
    ADMIN = "admin"
    MANAGER = "manager"
    CLERK = "clerk"

    ALL = (ADMIN, MANAGER, CLERK)


DEFAULT_ROLE_PERMISSIONS: dict[str, tuple[str, ...]] = {
    # Full access inside the team
    UserRole.ADMIN: ("*",),
    # Runs stores day to day; cannot manage the team itself or delete users
    UserRole.MANAGER: (
        f"{R.TEAMS}.read",
        f"{R.USERS}.read",
        f"{R.USERS}.update",
        f"{R.STORES}.*",
        f"{R.PRODUCTS}.*",
        f"{R.CARTS}.*",
        f"{R.CART_ITEMS}.*",
        f"{R.ORDERS}.*",
        f"{R.REPORTS}.*",
        f"{R.GRAPHICS}.*",
        f"{R.HISTORIES}.read",
    ),
    # Shop floor: carts and orders, own profile, read-only elsewhere
    UserRole.CLERK: (
        f"{R.TEAMS}.read",
        f"{R.USERS}.read",
        f"{R.USERS}.update",
        f"{R.STORES}.read",
        f"{R.PRODUCTS}.read",
        f"{R.CARTS}.*",
        f"{R.CART_ITEMS}.*",
        f"{R.ORDERS}.create",
        f"{R.ORDERS}.read",
        f"{R.REPORTS}.read",
        f"{R.GRAPHICS}.read",
        f"{R.HISTORIES}.read",
    ),
}

# Overview: Resource and action constants for the permission policy table.


class PermissionResource:
    """Resources a permission can target. Values match the public permission codes."""
    TEAMS = "teams"
    USERS = "users"
    STORES = "stores"
    PRODUCTS = "products"
    CARTS = "carts"
    CART_ITEMS = "cartItems"
    ORDERS = "orders"
    REPORTS = "reports"
    GRAPHICS = "graphics"
    HISTORIES = "histories"

    ALL = (
        TEAMS,
        USERS,
        STORES,
        PRODUCTS,
        CARTS,
        CART_ITEMS,
        ORDERS,
        REPORTS,
        GRAPHICS,
        HISTORIES,
    )


class PermissionAction:
    """CRUD actions; the wildcard grants every action on a resource."""
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    WILDCARD = "*"

    ALL = (CREATE, READ, UPDATE, DELETE)

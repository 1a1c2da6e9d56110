# Overview: Flask API routes for stores, their products and the caller's cart per store.

"""
Store management routes with multi-tenant support.

MULTI-TENANT: every store id in the path is checked against g.team_id;
stores of other teams answer 404.

SECURITY:
- Store update/delete and product creation are reserved to the store owner
- Product reads and cart operations only need the role permission
"""
from flask import Blueprint, request, g

from ..decorators import require_auth, require_permission
from ..models import Product, Store
from ..services import cart_service, products_service, store_service
from ..services.tenant_service import require_store_in_team, require_team_context
from ..validation import (
    ModelValidationPolicy,
    ValidationError,
    enforce_rules_product,
    validate_payload,
)

STORE_POLICY = ModelValidationPolicy(
    writable_fields={
        "name",
        "description",
        "address_line1",
        "address_line2",
        "address_country",
        "address_state",
        "address_city",
        "is_active",
        "picture",
    },
    required_on_create={"name"},
    length_rules={"name": (6, 120), "description": (6, 100)},
)

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description", "quantity", "min_quantity", "unit_price_cents", "picture"},
    required_on_create={"name", "quantity", "unit_price_cents"},
    length_rules={"name": (1, 100), "description": (0, 500)},
)

stores_bp = Blueprint("stores", __name__, url_prefix="/api/stores")


def _store_payload() -> dict:
    """Request body with the nested address object flattened to address_* columns."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")
    data = dict(data)
    address = data.pop("address", None)
    if address is not None and not isinstance(address, dict):
        raise ValidationError("The field address must be an object")
    data.update(store_service.flatten_address(address))
    return data


# =============================================================================
# STORES
# =============================================================================

@stores_bp.get("")
@require_auth
@require_permission("stores", "read")
def list_stores_route():
    team_id = require_team_context()
    stores = store_service.list_stores(team_id)
    return {"stores": [s.to_dict() for s in stores], "count": len(stores)}


@stores_bp.post("")
@require_auth
@require_permission("stores", "create")
def create_store_route():
    team_id = require_team_context()
    patch = validate_payload(model=Store, payload=_store_payload(), policy=STORE_POLICY, partial=False)
    store = store_service.create_store(team_id=team_id, owner=g.current_user, patch=patch)
    return {"store": store.to_dict()}, 201


@stores_bp.get("/<int:store_id>")
@require_auth
@require_permission("stores", "read")
def get_store_route(store_id: int):
    team_id = require_team_context()
    return {"store": store_service.get_store(store_id, team_id).to_dict()}


@stores_bp.patch("/<int:store_id>")
@require_auth
@require_permission("stores", "update")
def update_store_route(store_id: int):
    team_id = require_team_context()
    patch = validate_payload(model=Store, payload=_store_payload(), policy=STORE_POLICY, partial=True)
    store = store_service.update_store(store_id, team_id=team_id, user=g.current_user, patch=patch)
    return {"store": store.to_dict()}


@stores_bp.delete("/<int:store_id>")
@require_auth
@require_permission("stores", "delete")
def delete_store_route(store_id: int):
    team_id = require_team_context()
    store_service.delete_store(store_id, team_id=team_id, user=g.current_user)
    return {"ok": True}


# =============================================================================
# PRODUCTS
# =============================================================================

@stores_bp.get("/<int:store_id>/products")
@require_auth
@require_permission("products", "read")
def list_products_route(store_id: int):
    """
    List store products with optional pagination.

    Query params:
    - page: int (optional) - page number (1-indexed). If omitted, returns all items.
    - per_page: int (optional) - items per page (default 20, max 100)
    """
    team_id = require_team_context()
    return products_service.list_store_products(
        store_id,
        team_id=team_id,
        page=request.args.get("page", type=int),
        per_page=request.args.get("per_page", type=int),
    )


@stores_bp.get("/<int:store_id>/products/low-stock")
@require_auth
@require_permission("products", "read")
def low_stock_route(store_id: int):
    team_id = require_team_context()
    products = products_service.list_low_stock(store_id, team_id=team_id)
    return {"items": [p.to_dict() for p in products], "count": len(products)}


@stores_bp.post("/<int:store_id>/products")
@require_auth
@require_permission("products", "create")
def create_product_route(store_id: int):
    """Create a product in the store (store owner only); its quantity starts the History."""
    team_id = require_team_context()
    store_service.require_store_owner(store_id, team_id, g.current_user)

    patch = validate_payload(
        model=Product, payload=request.get_json(silent=True), policy=PRODUCT_POLICY, partial=False
    )
    enforce_rules_product(patch)

    product = products_service.create_product(
        patch=patch, store_id=store_id, team_id=team_id, owner=g.current_user
    )
    return {"product": product.to_dict()}, 201


@stores_bp.get("/<int:store_id>/products/<int:product_id>")
@require_auth
@require_permission("products", "read")
def get_product_route(store_id: int, product_id: int):
    team_id = require_team_context()
    require_store_in_team(store_id, team_id)
    product = products_service.get_product(product_id, store_id=store_id, team_id=team_id)
    return {"product": product.to_dict()}


@stores_bp.patch("/<int:store_id>/products/<int:product_id>")
@require_auth
@require_permission("products", "update")
def update_product_route(store_id: int, product_id: int):
    team_id = require_team_context()
    require_store_in_team(store_id, team_id)

    patch = validate_payload(
        model=Product, payload=request.get_json(silent=True), policy=PRODUCT_POLICY, partial=True
    )
    enforce_rules_product(patch)

    product = products_service.update_product(
        product_id, store_id=store_id, team_id=team_id, user=g.current_user, patch=patch
    )
    return {"product": product.to_dict()}


@stores_bp.delete("/<int:store_id>/products/<int:product_id>")
@require_auth
@require_permission("products", "delete")
def delete_product_route(store_id: int, product_id: int):
    team_id = require_team_context()
    require_store_in_team(store_id, team_id)
    products_service.delete_product(product_id, store_id=store_id, team_id=team_id)
    return {"ok": True}


# =============================================================================
# CART (one per store and user)
# =============================================================================

@stores_bp.post("/<int:store_id>/cart")
@require_auth
@require_permission("carts", "create")
def create_cart_route(store_id: int):
    team_id = require_team_context()
    require_store_in_team(store_id, team_id)
    cart = cart_service.create_cart(store_id=store_id, user_id=g.current_user.id)
    return {"cart": cart}, 201


@stores_bp.get("/<int:store_id>/cart")
@require_auth
@require_permission("carts", "read")
def get_store_cart_route(store_id: int):
    team_id = require_team_context()
    require_store_in_team(store_id, team_id)
    cart = cart_service.get_cart(store_id=store_id, user_id=g.current_user.id)
    return {"cart": cart}

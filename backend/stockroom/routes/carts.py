# Overview: Flask API routes for cart operations; every response carries freshly aggregated totals.

"""
Cart routes.

Carts are private: a cart id that belongs to another user answers 404.
Every mutating route returns the re-fetched cart passed through the
pricing aggregator (items[].total_price_cents, total_prices_cents).
"""
from flask import Blueprint, request, g

from ..decorators import require_auth, require_permission
from ..services import cart_service, order_service
from ..services.tenant_service import require_store_in_team, require_team_context
from ..validation import require_positive_int, validate_line_items

carts_bp = Blueprint("carts", __name__, url_prefix="/api/carts")


def _require_own_cart(cart_id: int) -> int:
    """Cart must be the caller's and in the caller's team. Returns team_id."""
    team_id = require_team_context()
    cart = cart_service.require_cart_owner(cart_id, g.current_user.id)
    require_store_in_team(cart.store_id, team_id)
    return team_id


@carts_bp.get("/<int:cart_id>")
@require_auth
@require_permission("carts", "read")
def get_cart_route(cart_id: int):
    _require_own_cart(cart_id)
    return {"cart": cart_service.get_cart(cart_id=cart_id)}


@carts_bp.delete("/<int:cart_id>")
@require_auth
@require_permission("carts", "delete")
def delete_cart_route(cart_id: int):
    _require_own_cart(cart_id)
    removed = cart_service.delete_cart(cart_id)
    return {"ok": True, "items_removed": removed}


@carts_bp.post("/<int:cart_id>/items")
@require_auth
@require_permission("cartItems", "create")
def add_items_route(cart_id: int):
    """
    Add products to the cart.

    Body: {"items": [{"product_id": int, "quantity": int}, ...]}
    or a single {"product_id": int, "quantity": int}.
    A product already in the cart has its quantity incremented by one.
    """
    _require_own_cart(cart_id)
    data = request.get_json(silent=True) or {}

    if "items" in data:
        cart = cart_service.add_products(cart_id, validate_line_items(data.get("items")))
    else:
        cart = cart_service.add_product(
            cart_id,
            require_positive_int(data.get("product_id"), "product_id"),
            require_positive_int(data.get("quantity"), "quantity"),
        )
    return {"cart": cart}, 201


@carts_bp.patch("/<int:cart_id>/items/<int:cart_item_id>")
@require_auth
@require_permission("cartItems", "update")
def update_item_route(cart_id: int, cart_item_id: int):
    _require_own_cart(cart_id)
    data = request.get_json(silent=True) or {}
    quantity = data.get("quantity")
    if quantity is not None:
        quantity = require_positive_int(quantity, "quantity")
    cart = cart_service.update_cart_item(cart_id, cart_item_id, quantity)
    return {"cart": cart}


@carts_bp.delete("/<int:cart_id>/items/<int:cart_item_id>")
@require_auth
@require_permission("cartItems", "delete")
def delete_item_route(cart_id: int, cart_item_id: int):
    _require_own_cart(cart_id)
    return {"cart": cart_service.delete_cart_item(cart_id, cart_item_id)}


@carts_bp.post("/<int:cart_id>/checkout")
@require_auth
@require_permission("orders", "create")
def checkout_route(cart_id: int):
    """Turn the cart into an order; the cart is deleted in the same transaction."""
    team_id = _require_own_cart(cart_id)
    order = order_service.checkout_cart(cart_id, user=g.current_user, team_id=team_id)
    return {"order": order.to_dict()}, 201

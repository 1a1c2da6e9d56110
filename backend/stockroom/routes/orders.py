# Overview: Flask API routes for orders; parses input and returns JSON responses.

from flask import Blueprint, request, g

from ..decorators import require_auth, require_permission
from ..services import order_service
from ..services.tenant_service import require_team_context
from ..validation import require_positive_int, validate_line_items

orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


@orders_bp.get("")
@require_auth
@require_permission("orders", "read")
def list_orders_route():
    """Team orders, newest first. Query params: store_id (optional)."""
    team_id = require_team_context()
    orders = order_service.list_orders(team_id, store_id=request.args.get("store_id", type=int))
    return {"orders": [o.to_dict() for o in orders], "count": len(orders)}


@orders_bp.post("")
@require_auth
@require_permission("orders", "create")
def create_order_route():
    """
    Create an order directly.

    Body: {"store_id": int, "items": [{"product_id": int, "quantity": int}, ...]}.
    Product details and prices are taken from the store's products, never
    from the body.
    """
    team_id = require_team_context()
    data = request.get_json(silent=True) or {}
    order = order_service.create_order(
        team_id=team_id,
        store_id=require_positive_int(data.get("store_id"), "store_id"),
        user_id=g.current_user.id,
        lines=validate_line_items(data.get("items")),
    )
    return {"order": order.to_dict()}, 201


@orders_bp.get("/<int:order_id>")
@require_auth
@require_permission("orders", "read")
def get_order_route(order_id: int):
    team_id = require_team_context()
    return {"order": order_service.get_order(order_id, team_id).to_dict()}


@orders_bp.patch("/<int:order_id>")
@require_auth
@require_permission("orders", "update")
def update_order_route(order_id: int):
    """Replace the order lines. Body: {"items": [...]}."""
    team_id = require_team_context()
    data = request.get_json(silent=True) or {}
    order = order_service.update_order(
        order_id, team_id=team_id, lines=validate_line_items(data.get("items"))
    )
    return {"order": order.to_dict()}


@orders_bp.delete("/<int:order_id>")
@require_auth
@require_permission("orders", "delete")
def delete_order_route(order_id: int):
    team_id = require_team_context()
    order_service.delete_order(order_id, team_id=team_id)
    return {"ok": True}

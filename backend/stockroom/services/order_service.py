"""
Order Service - snapshot orders and cart checkout

WHY: An order freezes what was bought and at which price. Lines are
snapshotted server side from the live products when the order is written;
later price changes never move an order's total.

CHECKOUT: the order is built from the aggregated cart, then the cart and its
items are deleted. Both happen in one transaction, so a failed checkout
leaves the cart intact and a successful one leaves no cart behind.

STOCK: orders do not change product quantities.
"""

from __future__ import annotations

from flask import current_app

from ..errors import BadRequestError, NotFoundError
from ..extensions import db
from ..models import Order, Product, ReportOrder, User
from . import pricing
from .cart_service import delete_cart, load_cart, require_cart_owner
from .concurrency import run_with_retry
from .document_service import next_order_number
from .tenant_service import require_in_team, require_store_in_team


def snapshot_lines(store_id: int, lines: list[dict]) -> list[dict]:
    """
    Freeze [{product_id, quantity}] into order lines carrying product_details.

    Every product must belong to the store.
    """
    product_ids = [line["product_id"] for line in lines]
    products = {
        p.id: p
        for p in db.session.query(Product)
        .filter(Product.id.in_(product_ids), Product.store_id == store_id)
        .all()
    }
    missing = [pid for pid in product_ids if pid not in products]
    if missing:
        raise NotFoundError(
            f"Products {missing} not found in store {store_id}",
            "Product not found",
            details={"product_ids": missing},
        )
    return [
        {
            "product_id": line["product_id"],
            "quantity": line["quantity"],
            "product_details": products[line["product_id"]].details(),
        }
        for line in lines
    ]


def _insert_order(*, team_id: int, store_id: int, user_id: int, items: list[dict]) -> Order:
    order = Order(
        team_id=team_id,
        store_id=store_id,
        ordered_by_id=user_id,
        order_number=next_order_number(store_id),
        items=items,
        total_price_cents=pricing.order_total(items),
    )
    db.session.add(order)
    db.session.flush()
    return order


def create_order(*, team_id: int, store_id: int, user_id: int, lines: list[dict]) -> Order:
    """Create an order from validated [{product_id, quantity}] lines."""
    require_store_in_team(store_id, team_id)
    if not lines:
        raise BadRequestError("Order without lines", "Please provide at least one product")

    def _op() -> Order:
        items = snapshot_lines(store_id, lines)
        order = _insert_order(team_id=team_id, store_id=store_id, user_id=user_id, items=items)
        db.session.commit()
        return order

    order = run_with_retry(_op)
    current_app.logger.info(
        "Created order %s (%s) store_id=%s total_cents=%s",
        order.id,
        order.order_number,
        store_id,
        order.total_price_cents,
    )
    return order


def checkout_cart(cart_id: int, *, user: User, team_id: int) -> Order:
    """
    Turn the caller's cart into an order and delete the cart.

    The order lines are the aggregated cart items with their live product
    details at checkout time.
    """
    def _op() -> Order:
        cart = require_cart_owner(cart_id, user.id)
        require_store_in_team(cart.store_id, team_id)

        payload = load_cart(cart)
        if not payload["items"]:
            raise BadRequestError(f"Cart {cart_id} is empty", "Cannot check out an empty cart")

        items = [
            {
                "product_id": item["product_id"],
                "quantity": item["quantity"],
                "product_details": item["product_details"],
            }
            for item in payload["items"]
        ]
        order = _insert_order(team_id=team_id, store_id=cart.store_id, user_id=user.id, items=items)
        delete_cart(cart_id, commit=False)
        db.session.commit()
        return order

    order = run_with_retry(_op)
    current_app.logger.info(
        "Checked out cart %s into order %s (%s)", cart_id, order.id, order.order_number
    )
    return order


def list_orders(team_id: int, store_id: int | None = None) -> list[Order]:
    query = db.session.query(Order).filter(Order.team_id == team_id)
    if store_id is not None:
        require_store_in_team(store_id, team_id)
        query = query.filter(Order.store_id == store_id)
    return query.order_by(Order.id.desc()).all()


def list_user_orders(user_id: int) -> list[Order]:
    return (
        db.session.query(Order)
        .filter(Order.ordered_by_id == user_id)
        .order_by(Order.id.desc())
        .all()
    )


def get_order(order_id: int, team_id: int) -> Order:
    return require_in_team(db.session.get(Order, order_id), team_id, "Order")


def update_order(order_id: int, *, team_id: int, lines: list[dict]) -> Order:
    """Replace the order lines, re-snapshot them and recompute the total."""
    order = get_order(order_id, team_id)
    if not lines:
        raise BadRequestError("Order without lines", "Please provide at least one product")
    items = snapshot_lines(order.store_id, lines)
    order.items = items
    order.total_price_cents = pricing.order_total(items)
    db.session.commit()
    return order


def delete_order(order_id: int, *, team_id: int) -> None:
    """Delete an order; reports that listed it drop the reference."""
    order = get_order(order_id, team_id)
    unlinked = (
        db.session.query(ReportOrder)
        .filter(ReportOrder.order_id == order.id)
        .delete(synchronize_session=False)
    )
    db.session.delete(order)
    db.session.commit()
    current_app.logger.info("Deleted order id=%s (unlinked from %s report(s))", order_id, unlinked)

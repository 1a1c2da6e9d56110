# Overview: Service-layer operations for carts; every read goes through the pricing aggregator.

"""
Cart Service

WHY: One cart per (store, user). Cart totals are derived data: every read
joins the cart's items to the live products and runs
pricing.aggregate_cart, so clients never see a stale total.

ADDING PRODUCTS:
- A product not yet in the cart becomes a new CartItem with the requested
  quantity and a cached line total
- A product already in the cart has its existing CartItem incremented by
  REPEAT_ADD_INCREMENT, whatever quantity was requested
- Creating a CartItem and linking it to its cart is one INSERT (cart_id is
  a column of the item), committed together with the cart version bump

CONCURRENCY: mutations lock the cart row where supported, bump the cart's
version_id, and run under run_with_retry. A concurrent duplicate line for
the same (cart, product) is rejected by uq_cart_items_cart_product.

DELETION: deleting a cart removes its items only when the cart delete
actually removed a row.
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..errors import BadRequestError, ConflictError, NotFoundError
from ..extensions import db
from ..models import Cart, CartItem, Product
from ..time_utils import utcnow
from . import pricing
from .concurrency import lock_for_update, run_with_retry

# Quantity added to an existing line when the same product is added again.
REPEAT_ADD_INCREMENT = 1


def _get_cart_or_404(cart_id: int, *, lock: bool = False) -> Cart:
    query = db.session.query(Cart).filter(Cart.id == cart_id)
    if lock:
        query = lock_for_update(query)
    cart = query.first()
    if not cart:
        raise NotFoundError(f"Cart {cart_id} not found", "Cart not found")
    return cart


def _touch(cart: Cart) -> None:
    # Bumps version_id so concurrent writers on the same cart conflict
    cart.updated_at = utcnow()


def require_cart_owner(cart_id: int, user_id: int) -> Cart:
    """Cart must exist and belong to user_id; other users' carts read as missing."""
    cart = _get_cart_or_404(cart_id)
    if cart.user_id != user_id:
        raise NotFoundError(f"Cart {cart_id} does not belong to user {user_id}", "Cart not found")
    return cart


def serialize_cart(cart: Cart) -> dict:
    """
    Cart with items joined to their products, before aggregation.

    Each item carries product_details (name, description, unit_price_cents,
    picture) taken from the live product row.
    """
    payload = cart.to_dict()
    items = (
        db.session.query(CartItem, Product)
        .join(Product, Product.id == CartItem.product_id)
        .filter(CartItem.cart_id == cart.id)
        .order_by(CartItem.id.asc())
        .all()
    )
    payload["items"] = [
        {**item.to_dict(), "product_details": product.details()}
        for item, product in items
    ]
    return payload


def load_cart(cart: Cart) -> dict:
    """Joined and aggregated cart payload."""
    return pricing.aggregate_cart(serialize_cart(cart))


def create_cart(*, store_id: int, user_id: int) -> dict:
    existing = db.session.query(Cart).filter_by(store_id=store_id, user_id=user_id).first()
    if existing:
        raise ConflictError(
            f"Cart already exists for store {store_id} / user {user_id}",
            "A cart already exists for this store",
        )

    cart = Cart(store_id=store_id, user_id=user_id)
    db.session.add(cart)
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise ConflictError(
            f"Concurrent cart creation for store {store_id} / user {user_id}",
            "A cart already exists for this store",
        ) from exc
    return load_cart(cart)


def get_cart(*, cart_id: int | None = None, store_id: int | None = None, user_id: int | None = None) -> dict:
    """Fetch by id, or by (store, user)."""
    if cart_id is not None:
        cart = _get_cart_or_404(cart_id)
    elif store_id is not None and user_id is not None:
        cart = db.session.query(Cart).filter_by(store_id=store_id, user_id=user_id).first()
        if not cart:
            raise NotFoundError(f"No cart for store {store_id} / user {user_id}", "Cart not found")
    else:
        raise BadRequestError(
            "get_cart needs cart_id or (store_id, user_id)",
            "Please provide a cart id or a store",
        )
    return load_cart(cart)


def _store_products(cart: Cart, product_ids: list[int]) -> dict[int, Product]:
    products = (
        db.session.query(Product)
        .filter(Product.id.in_(product_ids), Product.store_id == cart.store_id)
        .all()
    )
    found = {p.id: p for p in products}
    missing = [pid for pid in product_ids if pid not in found]
    if missing:
        raise NotFoundError(
            f"Products {missing} not found in store {cart.store_id}",
            "Product not found",
            details={"product_ids": missing},
        )
    return found


def _merge_line(cart: Cart, product: Product, quantity: int) -> CartItem | None:
    """
    Add one product line. Returns the new CartItem, or None when an
    existing line was incremented instead.
    """
    existing = (
        db.session.query(CartItem)
        .filter_by(cart_id=cart.id, product_id=product.id)
        .first()
    )
    if existing:
        existing.quantity += REPEAT_ADD_INCREMENT
        existing.total_price_cents = pricing.line_total(existing.quantity, product.unit_price_cents)
        return None

    item = CartItem(
        cart_id=cart.id,
        product_id=product.id,
        quantity=quantity,
        total_price_cents=pricing.line_total(quantity, product.unit_price_cents),
    )
    db.session.add(item)
    return item


def add_products(cart_id: int, lines: list[dict]) -> dict:
    """
    Add several products at once: lines = [{"product_id": 1, "quantity": 2}, ...].

    All products must belong to the cart's store. Returns the re-fetched,
    aggregated cart.
    """
    if not lines:
        raise BadRequestError("No products to add", "Please provide at least one product")

    def _op() -> dict:
        cart = _get_cart_or_404(cart_id, lock=True)
        products = _store_products(cart, [line["product_id"] for line in lines])

        created = []
        for line in lines:
            item = _merge_line(cart, products[line["product_id"]], line["quantity"])
            if item is not None:
                db.session.flush()
                created.append(item)

        _touch(cart)
        db.session.commit()
        if created:
            current_app.logger.info(
                "Cart %s: added %s new line(s) %s",
                cart.id,
                len(created),
                [item.id for item in created],
            )
        return load_cart(cart)

    return run_with_retry(_op)


def add_product(cart_id: int, product_id: int, quantity: int) -> dict:
    """Single-product add; same merge rule as add_products."""
    return add_products(cart_id, [{"product_id": product_id, "quantity": quantity}])


def _get_item_or_404(cart: Cart, cart_item_id: int) -> CartItem:
    item = db.session.query(CartItem).filter_by(id=cart_item_id, cart_id=cart.id).first()
    if not item:
        raise NotFoundError(
            f"Cart item {cart_item_id} not found in cart {cart.id}",
            "Cart item not found",
        )
    return item


def update_cart_item(cart_id: int, cart_item_id: int, quantity: int | None) -> dict:
    if quantity is None:
        raise BadRequestError("Missing quantity", "Please provide a quantity")

    def _op() -> dict:
        cart = _get_cart_or_404(cart_id, lock=True)
        item = _get_item_or_404(cart, cart_item_id)
        product = db.session.get(Product, item.product_id)
        item.quantity = quantity
        item.total_price_cents = pricing.line_total(quantity, product.unit_price_cents if product else 0)
        _touch(cart)
        db.session.commit()
        return load_cart(cart)

    return run_with_retry(_op)


def delete_cart_item(cart_id: int, cart_item_id: int) -> dict:
    def _op() -> dict:
        cart = _get_cart_or_404(cart_id, lock=True)
        item = _get_item_or_404(cart, cart_item_id)
        db.session.delete(item)
        _touch(cart)
        db.session.commit()
        return load_cart(cart)

    return run_with_retry(_op)


def delete_cart(cart_id: int, *, commit: bool = True) -> int:
    """
    Delete a cart and its items. Returns the number of items removed.

    Raises NotFoundError (and deletes nothing) when the cart does not exist.
    Items and cart go in one transaction; if the cart row is already gone
    when the delete runs, nothing is kept from the item delete either.
    """
    cart = db.session.get(Cart, cart_id)
    if not cart:
        raise NotFoundError(f"Cart {cart_id} not found", "Non existing cart")

    removed = db.session.query(CartItem).filter(CartItem.cart_id == cart_id).delete()
    deleted = db.session.query(Cart).filter(Cart.id == cart_id).delete()
    if deleted == 0:
        db.session.rollback()
        raise NotFoundError(f"Cart {cart_id} deleted concurrently", "Non existing cart")

    if commit:
        db.session.commit()
    else:
        db.session.flush()
    current_app.logger.info("Deleted cart %s with %s item(s)", cart_id, removed)
    return removed

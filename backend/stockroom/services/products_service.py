# backend/stockroom/services/products_service.py
"""
Products Service with Multi-Tenant Support

MULTI-TENANT: All product operations are team-scoped.
- the store must belong to the caller's team
- products are looked up through (store, team), never by id alone

STOCK HISTORY: creating a product, and every update that carries a
quantity, writes the new quantity to the product's History in the same
transaction (history_service.record_quantity with commit=False).
"""
from __future__ import annotations

from flask import current_app

from ..errors import NotFoundError
from ..extensions import db
from ..models import CartItem, History, Product, User
from . import history_service
from .concurrency import run_with_retry
from .tenant_service import require_store_in_team

PRODUCT_MUTABLE_FIELDS = {"name", "description", "quantity", "min_quantity", "unit_price_cents", "picture"}


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def get_product(product_id: int, *, store_id: int, team_id: int) -> Product:
    product = db.session.get(Product, product_id)
    if not product or product.store_id != store_id or product.team_id != team_id:
        raise NotFoundError(
            f"Product {product_id} not found in store {store_id} / team {team_id}",
            "Product not found",
        )
    return product


def list_store_products(
    store_id: int,
    *,
    team_id: int,
    page: int | None = None,
    per_page: int | None = None,
) -> dict:
    """
    Store product listing with optional pagination.

    Returns:
        Dict with 'items', 'count', and pagination metadata if paginated.
    """
    require_store_in_team(store_id, team_id)

    base_query = (
        db.session.query(Product)
        .filter(Product.store_id == store_id, Product.team_id == team_id)
        .order_by(Product.name.asc(), Product.id.asc())
    )

    if page is None:
        products = base_query.all()
        return {
            "items": [p.to_dict() for p in products],
            "count": len(products),
        }

    per_page = min(per_page or 20, 100)  # Default 20, max 100
    page = max(page, 1)

    total = base_query.count()
    total_pages = (total + per_page - 1) // per_page if total > 0 else 1

    products = base_query.offset((page - 1) * per_page).limit(per_page).all()

    return {
        "items": [p.to_dict() for p in products],
        "count": len(products),
        "pagination": {
            "page": page,
            "per_page": per_page,
            "total": total,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        },
    }


def list_low_stock(store_id: int, *, team_id: int) -> list[Product]:
    """Products at or below their minimum quantity."""
    require_store_in_team(store_id, team_id)
    return (
        db.session.query(Product)
        .filter(
            Product.store_id == store_id,
            Product.team_id == team_id,
            Product.quantity <= Product.min_quantity,
        )
        .order_by(Product.quantity.asc(), Product.id.asc())
        .all()
    )


def create_product(*, patch: dict, store_id: int, team_id: int, owner: User) -> Product:
    """
    Create product using a validated patch dict and record its first quantity.
    """
    store = require_store_in_team(store_id, team_id)

    p = Product(store_id=store.id, team_id=team_id, owner_id=owner.id)
    apply_product_patch(p, patch)
    db.session.add(p)
    db.session.flush()  # ensure p.id exists before the history write

    history_service.record_quantity(
        product_id=p.id,
        store_id=store.id,
        team_id=team_id,
        user_id=owner.id,
        quantity=p.quantity,
        commit=False,
    )

    db.session.commit()
    current_app.logger.info("Created product id=%s store_id=%s", p.id, store.id)
    return p


def update_product(product_id: int, *, store_id: int, team_id: int, user: User, patch: dict) -> Product:
    """
    Apply a validated patch. A patch carrying quantity records it in History.
    """
    def _op() -> Product:
        p = get_product(product_id, store_id=store_id, team_id=team_id)
        apply_product_patch(p, patch)
        db.session.flush()

        if "quantity" in patch:
            history_service.record_quantity(
                product_id=p.id,
                store_id=p.store_id,
                team_id=p.team_id,
                user_id=user.id,
                quantity=p.quantity,
                commit=False,
            )

        db.session.commit()
        return p

    return run_with_retry(_op)


def delete_product(product_id: int, *, store_id: int, team_id: int) -> None:
    """
    Delete a product.

    Cart lines holding it are removed; its History is kept and detached
    (product_name stays readable). Orders are snapshots and are untouched.
    """
    p = get_product(product_id, store_id=store_id, team_id=team_id)

    removed_lines = (
        db.session.query(CartItem)
        .filter(CartItem.product_id == p.id)
        .delete(synchronize_session=False)
    )
    db.session.query(History).filter(History.product_id == p.id).update(
        {History.product_id: None}, synchronize_session=False
    )
    db.session.delete(p)
    db.session.commit()
    current_app.logger.info("Deleted product id=%s (removed %s cart line(s))", product_id, removed_lines)

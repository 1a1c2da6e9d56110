# Overview: Service-layer operations for stores; encapsulates business logic and database work.

from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..errors import ConflictError, ForbiddenError
from ..extensions import db
from ..models import Cart, CartItem, Graphic, History, Order, Product, Report, Store, User
from .tenant_service import require_store_in_team

ADDRESS_FIELDS = ("line1", "line2", "country", "state", "city")


def flatten_address(address: dict | None) -> dict:
    """{"line1": ...} -> {"address_line1": ...}, unknown keys ignored."""
    if not address:
        return {}
    return {f"address_{key}": address.get(key) for key in ADDRESS_FIELDS if key in address}


def require_store_owner(store_id: int, team_id: int, user: User) -> Store:
    store = require_store_in_team(store_id, team_id)
    if store.owner_id != user.id:
        raise ForbiddenError(
            f"User {user.id} does not own store {store_id}",
            "Only the store owner can do this",
        )
    return store


def create_store(*, team_id: int, owner: User, patch: dict) -> Store:
    store = Store(team_id=team_id, owner_id=owner.id, **patch)
    db.session.add(store)
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise ConflictError(
            f"Store name {patch.get('name')!r} already used in team {team_id}",
            "A store with this name already exists",
        ) from exc
    current_app.logger.info("Created store id=%s team_id=%s", store.id, team_id)
    return store


def list_stores(team_id: int) -> list[Store]:
    return db.session.query(Store).filter_by(team_id=team_id).order_by(Store.name).all()


def get_store(store_id: int, team_id: int) -> Store:
    return require_store_in_team(store_id, team_id)


def update_store(store_id: int, *, team_id: int, user: User, patch: dict) -> Store:
    store = require_store_owner(store_id, team_id, user)
    for key, value in patch.items():
        setattr(store, key, value)
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise ConflictError(
            f"Store name {patch.get('name')!r} already used in team {team_id}",
            "A store with this name already exists",
        ) from exc
    return store


def delete_store(store_id: int, *, team_id: int, user: User) -> None:
    """
    Delete an empty store.

    Stores with products or orders are kept (ConflictError). Carts, histories,
    graphics and reports of the store are removed with it.
    """
    store = require_store_owner(store_id, team_id, user)
    product_count = db.session.query(Product).filter_by(store_id=store.id).count()
    if product_count:
        raise ConflictError(
            f"Store {store_id} still has {product_count} product(s)",
            "Delete the store's products first",
        )
    order_count = db.session.query(Order).filter_by(store_id=store.id).count()
    if order_count:
        raise ConflictError(
            f"Store {store_id} still has {order_count} order(s)",
            "Stores with orders cannot be deleted",
        )

    cart_ids = [cart_id for (cart_id,) in db.session.query(Cart.id).filter_by(store_id=store.id)]
    if cart_ids:
        db.session.query(CartItem).filter(CartItem.cart_id.in_(cart_ids)).delete(synchronize_session=False)
        db.session.query(Cart).filter(Cart.id.in_(cart_ids)).delete(synchronize_session=False)
    for graphic in db.session.query(Graphic).filter_by(store_id=store.id).all():
        db.session.delete(graphic)
    for report in db.session.query(Report).filter_by(store_id=store.id).all():
        db.session.delete(report)
    db.session.flush()
    db.session.query(History).filter_by(store_id=store.id).delete(synchronize_session=False)

    db.session.delete(store)
    db.session.commit()
    current_app.logger.info("Deleted store id=%s", store_id)

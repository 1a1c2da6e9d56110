from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class Order(db.Model):
    """
    Immutable snapshot of purchased lines.

    WHY: Orders must not move when product prices change later. Each line in
    items freezes the product details at checkout:
        {"product_id": 1, "quantity": 2,
         "product_details": {"name", "description", "unit_price_cents", "picture"}}

    order_number is allocated per store from DocumentSequence.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.Index("ix_orders_team_store", "team_id", "store_id"),
        db.UniqueConstraint("store_id", "order_number", name="uq_orders_store_number"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False, index=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)
    ordered_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    order_number = db.Column(db.String(32), nullable=False, index=True)
    items = db.Column(db.JSON, nullable=False, default=list)
    total_price_cents = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    store = db.relationship("Store")
    ordered_by = db.relationship("User")

    def __repr__(self) -> str:
        return f"<Order id={self.id} number={self.order_number!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "team_id": self.team_id,
            "store_id": self.store_id,
            "ordered_by": self.ordered_by_id,
            "order_number": self.order_number,
            "items": list(self.items or []),
            "total_price_cents": self.total_price_cents,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class DocumentSequence(db.Model):
    """
    Atomic per-store document sequences.

    WHY: Prevent race conditions when generating order numbers.
    """
    __tablename__ = "document_sequences"
    __table_args__ = (
        db.UniqueConstraint("store_id", "document_type", name="uq_doc_sequences_store_type"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)
    document_type = db.Column(db.String(32), nullable=False, index=True)
    next_number = db.Column(db.Integer, nullable=False, default=1)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "document_type": self.document_type,
            "next_number": self.next_number,
            "updated_at": to_utc_z(self.updated_at),
        }

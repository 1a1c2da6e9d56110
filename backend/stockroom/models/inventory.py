from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class Product(db.Model):
    """
    Product master data and current stock level.

    MULTI-TENANT: Products are scoped to a store and carry the store's team_id
    so team-scoped queries never need a join.

    STOCK: quantity is the live stock level. Every change to it is mirrored
    into the product's History record (see history_service.record_quantity).
    Prices are stored in cents.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_store_name", "store_id", "name"),
        db.Index("ix_products_team_store", "team_id", "store_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False, index=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)
    owner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)

    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(500), nullable=True)

    quantity = db.Column(db.Integer, nullable=False, default=0)
    min_quantity = db.Column(db.Integer, nullable=False, default=0)

    # Authoritative storage in cents (frontend may only format for display)
    unit_price_cents = db.Column(db.Integer, nullable=False)

    picture = db.Column(db.String(2000), nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    store = db.relationship("Store", backref=db.backref("products", lazy=True))
    owner = db.relationship("User", foreign_keys=[owner_id])

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} store_id={self.store_id}>"

    def details(self) -> dict:
        """Price-bearing projection joined into cart items and frozen into orders."""
        return {
            "name": self.name,
            "description": self.description,
            "unit_price_cents": self.unit_price_cents,
            "picture": self.picture,
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "team_id": self.team_id,
            "store_id": self.store_id,
            "owner_id": self.owner_id,
            "name": self.name,
            "description": self.description,
            "quantity": self.quantity,
            "min_quantity": self.min_quantity,
            "unit_price_cents": self.unit_price_cents,
            "picture": self.picture,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class History(db.Model):
    """
    Per-(product, store, team) inventory time series.

    WHY: Graphics render quantity-over-time charts from these records.

    DESIGN:
    - evolutions is an ordered JSON list of
      {"date": UTC ISO timestamp ending in Z, "date_key": "YYYY-MM-DD", "quantity": n, "collected_by": user_id}
    - At most one evolution per date_key (same-day readings overwrite)
    - The list is always reassigned as a new object so SQLAlchemy sees the change
    - Entries are not guaranteed to be sorted by date
    """
    __tablename__ = "histories"
    __table_args__ = (
        db.UniqueConstraint("product_id", "store_id", "team_id", name="uq_histories_product_store_team"),
        db.Index("ix_histories_team_store", "team_id", "store_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    # Set to NULL when the product is deleted; the time series is kept
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=True, index=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False)
    team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False)

    # Copied at creation so histories stay readable after the product is deleted
    product_name = db.Column(db.String(100), nullable=False)

    evolutions = db.Column(db.JSON, nullable=False, default=list)

    version_id = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<History id={self.id} product_id={self.product_id} evolutions={len(self.evolutions or [])}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "store_id": self.store_id,
            "team_id": self.team_id,
            "product_name": self.product_name,
            "evolutions": list(self.evolutions or []),
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }

from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class Report(db.Model):
    """
    Named collection of orders for a team+store.

    Orders are linked through ReportOrder rows; link id order is the
    presentation order.
    """
    __tablename__ = "reports"
    __table_args__ = (
        db.Index("ix_reports_team_store", "team_id", "store_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(500), nullable=True)
    team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False)
    generated_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)

    version_id = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    order_links = db.relationship(
        "ReportOrder",
        back_populates="report",
        order_by="ReportOrder.id",
        cascade="all, delete-orphan",
        lazy=True,
    )
    store = db.relationship("Store")
    generated_by = db.relationship("User")

    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "team_id": self.team_id,
            "store_id": self.store_id,
            "generated_by": self.generated_by_id,
            "orders": [link.order_id for link in self.order_links],
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class ReportOrder(db.Model):
    """Report-Order association."""
    __tablename__ = "report_orders"
    __table_args__ = (
        db.UniqueConstraint("report_id", "order_id", name="uq_report_orders"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    report_id = db.Column(db.Integer, db.ForeignKey("reports.id"), nullable=False, index=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)

    report = db.relationship("Report", back_populates="order_links")
    order = db.relationship("Order")


class Graphic(db.Model):
    """
    Named chart definition referencing histories for a team+store.

    Histories are linked through GraphicHistory rows; link id order is the
    presentation order.
    """
    __tablename__ = "graphics"
    __table_args__ = (
        db.Index("ix_graphics_team_store", "team_id", "store_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(500), nullable=True)
    team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False)
    generated_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)

    version_id = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    history_links = db.relationship(
        "GraphicHistory",
        back_populates="graphic",
        order_by="GraphicHistory.id",
        cascade="all, delete-orphan",
        lazy=True,
    )
    store = db.relationship("Store")
    generated_by = db.relationship("User")

    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "team_id": self.team_id,
            "store_id": self.store_id,
            "generated_by": self.generated_by_id,
            "histories": [link.history_id for link in self.history_links],
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class GraphicHistory(db.Model):
    """Graphic-History association."""
    __tablename__ = "graphic_histories"
    __table_args__ = (
        db.UniqueConstraint("graphic_id", "history_id", name="uq_graphic_histories"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    graphic_id = db.Column(db.Integer, db.ForeignKey("graphics.id"), nullable=False, index=True)
    history_id = db.Column(db.Integer, db.ForeignKey("histories.id"), nullable=False, index=True)

    graphic = db.relationship("Graphic", back_populates="history_links")
    history = db.relationship("History")

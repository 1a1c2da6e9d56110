from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class Team(db.Model):
    """
    Multi-tenant root: every tenant is a Team.

    WHY: Stores, products, carts, orders, histories, reports and graphics all
    belong to exactly one team. No data may cross team boundaries.

    DESIGN:
    - A team has exactly one owner (User), and an owner owns at most one team
    - Members reference the team through User.team_id
    - owner_id uses use_alter because users.team_id points back here
    """
    __tablename__ = "teams"
    __table_args__ = (
        db.UniqueConstraint("owner_id", name="uq_teams_owner_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(500), nullable=True)
    owner_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", use_alter=True, name="fk_teams_owner_id_users"),
        nullable=False,
        index=True,
    )

    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    owner = db.relationship("User", foreign_keys=[owner_id])

    def __repr__(self) -> str:
        return f"<Team id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "owner_id": self.owner_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Store(db.Model):
    """
    Store within a team.

    MULTI-TENANT: Stores are scoped to teams via team_id.
    Store names are unique within a team, not globally.
    """
    __tablename__ = "stores"
    __table_args__ = (
        db.UniqueConstraint("team_id", "name", name="uq_stores_team_name"),
        db.Index("ix_stores_team_owner", "team_id", "owner_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False, index=True)
    owner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.String(100), nullable=True)

    # Postal address, flattened
    address_line1 = db.Column(db.String(500), nullable=True)
    address_line2 = db.Column(db.String(500), nullable=True)
    address_country = db.Column(db.String(100), nullable=True)
    address_state = db.Column(db.String(100), nullable=True)
    address_city = db.Column(db.String(100), nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    picture = db.Column(db.String(2000), nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    team = db.relationship("Team", backref=db.backref("stores", lazy=True))
    owner = db.relationship("User", foreign_keys=[owner_id])

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Store id={self.id} name={self.name!r} team_id={self.team_id}>"

    def address(self) -> dict:
        return {
            "line1": self.address_line1,
            "line2": self.address_line2,
            "country": self.address_country,
            "state": self.address_state,
            "city": self.address_city,
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "team_id": self.team_id,
            "owner_id": self.owner_id,
            "name": self.name,
            "description": self.description,
            "address": self.address(),
            "is_active": self.is_active,
            "picture": self.picture,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }

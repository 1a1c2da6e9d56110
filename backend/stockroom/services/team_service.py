# Overview: Service-layer operations for teams; creation, ownership checks and membership.

"""
Team Service

WHY: The team is the tenant boundary. Creating a team makes the caller its
owner and its first member in one transaction, so there is never a team
whose owner is not attached to it.

RULES:
- An owner owns at most one team (ConflictError on a second one)
- Only the owner may update or delete the team, or add members
- A team with stores cannot be deleted; members are detached on delete
"""

from __future__ import annotations

from flask import current_app

from ..errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from ..extensions import db
from ..models import Team, User


def get_team_or_404(team_id: int) -> Team:
    team = db.session.get(Team, team_id)
    if not team:
        raise NotFoundError(f"Team {team_id} not found", "Team not found")
    return team


def require_team_owner(team_id: int, user: User) -> Team:
    """Team must exist and be owned by user, else NotFound / Forbidden."""
    team = get_team_or_404(team_id)
    if team.owner_id != user.id:
        raise ForbiddenError(
            f"User {user.id} is not the owner of team {team_id}",
            "Only the team owner can do this",
        )
    return team


def create_team(*, owner: User, name: str, description: str | None = None) -> Team:
    existing = db.session.query(Team).filter_by(owner_id=owner.id).first()
    if existing:
        raise ConflictError(
            f"User {owner.id} already owns team {existing.id}",
            "You already own a team",
        )
    if owner.team_id is not None:
        raise ConflictError(
            f"User {owner.id} already belongs to team {owner.team_id}",
            "You already belong to a team",
        )

    team = Team(name=name, description=description, owner_id=owner.id)
    db.session.add(team)
    db.session.flush()
    owner.team_id = team.id
    db.session.commit()

    current_app.logger.info("Created team id=%s owner_id=%s", team.id, owner.id)
    return team


def list_teams(*, user: User) -> list[Team]:
    """Teams visible to the caller: their own team only."""
    if user.team_id is None:
        return []
    return db.session.query(Team).filter_by(id=user.team_id).all()


def get_team(team_id: int, *, user: User) -> dict:
    """Team payload with owner details, visible to members only."""
    team = get_team_or_404(team_id)
    if user.team_id != team.id:
        raise NotFoundError(f"User {user.id} is not a member of team {team_id}", "Team not found")
    payload = team.to_dict()
    payload["owner_details"] = team.owner.to_public_dict() if team.owner else None
    return payload


def update_team(team_id: int, *, user: User, patch: dict) -> Team:
    team = require_team_owner(team_id, user)
    for key, value in patch.items():
        setattr(team, key, value)
    db.session.commit()
    return team


def delete_team(team_id: int, *, user: User) -> None:
    team = require_team_owner(team_id, user)
    if team.stores:
        raise ConflictError(
            f"Team {team_id} still has {len(team.stores)} store(s)",
            "Delete the team's stores first",
        )
    for member in list(team.members):
        member.team_id = None
    db.session.flush()
    db.session.delete(team)
    db.session.commit()
    current_app.logger.info("Deleted team id=%s", team_id)


def list_members(team_id: int, *, user: User) -> list[User]:
    team = get_team_or_404(team_id)
    if user.team_id != team.id:
        raise NotFoundError(f"User {user.id} is not a member of team {team_id}", "Team not found")
    return db.session.query(User).filter_by(team_id=team_id).order_by(User.id).all()


def add_member(team_id: int, *, user: User, email: str) -> User:
    """Attach an existing user without a team to the owner's team."""
    require_team_owner(team_id, user)
    if not isinstance(email, str) or not email.strip():
        raise BadRequestError("Missing member email", "The field email is required")
    member = db.session.query(User).filter_by(email=email.strip().lower()).first()
    if not member:
        raise NotFoundError(f"No user with email {email}", "User not found")
    if member.team_id == team_id:
        return member
    if member.team_id is not None:
        raise ConflictError(
            f"User {member.id} already belongs to team {member.team_id}",
            "User already belongs to a team",
        )
    member.team_id = team_id
    db.session.commit()
    return member

# Overview: Service-layer operations for users; team-scoped listing, profile edits and account removal.

"""
User Service

MULTI-TENANT: users are visible to members of the same team only. A user
without a team sees themself and nobody else.

PROFILE EDITS:
- A user edits their own profile; admins may edit any member of their team
- Changing the password requires the current password (self edits)
- Only admins change roles

DELETION: users are referenced by orders, products, reports and graphics,
so a deleted account is deactivated rather than removed: it leaves its team,
its sessions are revoked and its carts are dropped. Team owners cannot be
deleted while they own the team.
"""

from __future__ import annotations

from flask import current_app

from ..errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from ..extensions import db
from ..models import Cart, CartItem, Team, User
from ..permissions import UserRole
from . import auth_service, session_service

USER_MUTABLE_FIELDS = {"email", "username", "picture", "role"}


def list_users(team_id: int) -> list[User]:
    return (
        db.session.query(User)
        .filter(User.team_id == team_id, User.is_active.is_(True))
        .order_by(User.id)
        .all()
    )


def get_user(user_id: int, *, actor: User) -> User:
    user = db.session.get(User, user_id)
    visible = user is not None and user.is_active and (
        user.id == actor.id or (actor.team_id is not None and user.team_id == actor.team_id)
    )
    if not visible:
        raise NotFoundError(f"User {user_id} not visible to user {actor.id}", "User not found")
    return user


def _require_can_edit(target: User, actor: User) -> None:
    if target.id == actor.id:
        return
    if actor.role == UserRole.ADMIN and target.team_id == actor.team_id:
        return
    raise ForbiddenError(
        f"User {actor.id} cannot edit user {target.id}",
        "You can only edit your own profile",
    )


def update_user(
    user_id: int,
    *,
    actor: User,
    patch: dict,
    password: str | None = None,
    current_password: str | None = None,
) -> User:
    """
    Apply a validated profile patch, and optionally a new password.

    Raises:
        BadRequestError: wrong or missing current password, invalid role
        ConflictError: email already used by another account
        ForbiddenError: editing someone else without being an admin
    """
    user = get_user(user_id, actor=actor)
    _require_can_edit(user, actor)

    if not patch and password is None:
        raise BadRequestError("Empty user patch", "Please add valid fields to your request body")

    if "role" in patch:
        if actor.role != UserRole.ADMIN:
            raise ForbiddenError(f"User {actor.id} cannot change roles", "Only admins can change roles")
        if patch["role"] not in UserRole.ALL:
            raise BadRequestError(f"Invalid role {patch['role']!r}", "Please enter a valid role")

    if "email" in patch:
        email = auth_service.normalize_email(patch["email"])
        taken = db.session.query(User).filter(User.email == email, User.id != user.id).first()
        if taken:
            raise ConflictError(f"Email {email} already registered", "This email is already in use")
        patch = {**patch, "email": email}

    if password is not None:
        if user.id == actor.id:
            if not current_password:
                raise BadRequestError("Missing current password", "The field current password is required")
            if not auth_service.verify_password(current_password, user.password_hash):
                raise BadRequestError("Wrong current password", "The current password is incorrect")
        user.password_hash = auth_service.hash_password(password)

    for key, value in patch.items():
        if key in USER_MUTABLE_FIELDS:
            setattr(user, key, value)

    db.session.commit()
    if password is not None:
        current_app.logger.info("Password changed for user id=%s by user id=%s", user.id, actor.id)
    return user


def delete_user(user_id: int, *, actor: User) -> int:
    """Deactivate and detach a user. Returns the number of revoked sessions."""
    user = get_user(user_id, actor=actor)
    if user.id != actor.id and actor.role != UserRole.ADMIN:
        raise ForbiddenError(f"User {actor.id} cannot delete user {user.id}", "Permission denied")

    owned = db.session.query(Team).filter_by(owner_id=user.id).first()
    if owned:
        raise ConflictError(
            f"User {user.id} owns team {owned.id}",
            "Team owners cannot be deleted, delete the team first",
        )

    cart_ids = [cart_id for (cart_id,) in db.session.query(Cart.id).filter_by(user_id=user.id)]
    if cart_ids:
        db.session.query(CartItem).filter(CartItem.cart_id.in_(cart_ids)).delete(synchronize_session=False)
        db.session.query(Cart).filter(Cart.id.in_(cart_ids)).delete(synchronize_session=False)

    user.is_active = False
    user.team_id = None
    db.session.commit()

    revoked = session_service.revoke_all_user_sessions(user.id, reason="Account deleted")
    current_app.logger.info("Deleted user id=%s by user id=%s", user.id, actor.id)
    return revoked

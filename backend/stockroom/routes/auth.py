# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

"""
Authentication API routes

- Self sign-up creates an account (admin, manager or clerk) without a team
- Login issues an opaque bearer token (see session_service)
- Admins can revoke every session of a user (invalidate-token)
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_auth, require_admin
from ..errors import BadRequestError, NotFoundError
from ..extensions import db
from ..models import User
from ..services import auth_service, session_service, permission_service


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _session_payload(user: User, session, token: str) -> dict:
    return {
        "user": user.to_dict(),
        "permissions": sorted(permission_service.get_role_permissions(user.role)),
        "token": token,
        "session": session.to_dict(),
        "team_id": user.team_id,
    }


@auth_bp.post("/signup")
def signup_route():
    """
    Create an account and log it in.

    Body: {"email", "password", "role", "username"?}. New accounts have no
    team; they create one or are added to one by its owner.
    """
    data = request.get_json(silent=True) or {}
    role = data.get("role")
    if not role:
        raise BadRequestError("Missing role", "The field role is required")
    username = data.get("username")
    if username is not None and (not isinstance(username, str) or len(username.strip()) > 60):
        raise BadRequestError("Invalid username", "The field username must have 60 characters maximum")

    user = auth_service.create_user(
        email=data.get("email"),
        password=data.get("password"),
        role=role,
        username=username.strip() if username else None,
    )
    session, token = session_service.create_session(
        user_id=user.id,
        user_agent=request.headers.get("User-Agent"),
        ip_address=request.remote_addr,
    )
    return jsonify({**_session_payload(user, session, token), "message": "Signup successful"}), 201


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and create session token.

    Token must be included in Authorization header for protected routes.
    """
    data = request.get_json(silent=True) or {}
    email = data.get("email")
    password = data.get("password")

    if not email or not password:
        return jsonify({"error": "email and password required"}), 400

    user = auth_service.authenticate(email, password)
    if not user:
        current_app.logger.warning("Failed login for %s from %s", email, request.remote_addr)
        return jsonify({"error": "Invalid credentials"}), 401

    session, token = session_service.create_session(
        user_id=user.id,
        user_agent=request.headers.get("User-Agent"),
        ip_address=request.remote_addr,
    )
    return jsonify({**_session_payload(user, session, token), "message": "Login successful"}), 200


@auth_bp.post("/logout")
@require_auth
def logout_route():
    """
    Revoke the current session token.

    WHY: Explicit logout prevents token reuse.
    """
    token = request.headers["Authorization"].split(" ", 1)[1].strip()
    session_service.revoke_session(token, reason="User logout")
    return jsonify({"message": "Logout successful"}), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    """Current user, team context and permission codes (for UI filtering)."""
    user = g.current_user
    return jsonify({
        "user": user.to_dict(),
        "permissions": sorted(permission_service.get_role_permissions(user.role)),
        "team_id": g.team_id,
        "role": g.role,
    }), 200


@auth_bp.post("/invalidate-token")
@require_auth
@require_admin
def invalidate_token_route():
    """Revoke all sessions of a user. Body: {"user_id": int}."""
    data = request.get_json(silent=True) or {}
    user_id = data.get("user_id")
    if not isinstance(user_id, int) or isinstance(user_id, bool):
        raise BadRequestError("Missing user_id", "The field user_id is required")

    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError(f"User {user_id} not found", "User not found")

    revoked = session_service.revoke_all_user_sessions(user.id, reason=f"Invalidated by admin {g.current_user.id}")
    current_app.logger.info("Admin %s revoked %s session(s) of user %s", g.current_user.id, revoked, user.id)
    return jsonify({"message": "Sessions revoked", "sessions_revoked": revoked}), 200

# Overview: Flask API routes for users; team-scoped user listing and profile edits.

from flask import Blueprint, request, g

from ..decorators import require_auth, require_permission
from ..models import User
from ..services import order_service, user_service
from ..services.tenant_service import require_team_context
from ..validation import ModelValidationPolicy, validate_payload

USER_POLICY = ModelValidationPolicy(
    writable_fields={"email", "username", "picture", "role"},
    length_rules={"username": (1, 60), "role": (5, 13)},
)

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("")
@require_auth
@require_permission("users", "read")
def list_users_route():
    team_id = require_team_context()
    users = user_service.list_users(team_id)
    return {"users": [u.to_dict() for u in users], "count": len(users)}


@users_bp.get("/me/orders")
@require_auth
@require_permission("orders", "read")
def my_orders_route():
    orders = order_service.list_user_orders(g.current_user.id)
    return {"orders": [o.to_dict() for o in orders], "count": len(orders)}


@users_bp.get("/<int:user_id>")
@require_auth
@require_permission("users", "read")
def get_user_route(user_id: int):
    return {"user": user_service.get_user(user_id, actor=g.current_user).to_dict()}


@users_bp.patch("/<int:user_id>")
@require_auth
@require_permission("users", "update")
def update_user_route(user_id: int):
    """
    Update a profile.

    Body: any of email, username, picture, role, plus password and
    current_password to change the password.
    """
    data = dict(request.get_json(silent=True) or {})
    password = data.pop("password", None)
    current_password = data.pop("current_password", None)

    patch = validate_payload(model=User, payload=data, policy=USER_POLICY, partial=True) if data else {}
    user = user_service.update_user(
        user_id,
        actor=g.current_user,
        patch=patch,
        password=password,
        current_password=current_password,
    )
    return {"user": user.to_dict()}


@users_bp.delete("/<int:user_id>")
@require_auth
@require_permission("users", "delete")
def delete_user_route(user_id: int):
    revoked = user_service.delete_user(user_id, actor=g.current_user)
    return {"ok": True, "sessions_revoked": revoked}

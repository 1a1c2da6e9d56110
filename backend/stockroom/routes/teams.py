# Overview: Flask API routes for teams; team CRUD and membership.

"""
Team routes.

MULTI-TENANT: a caller only ever sees their own team. Writes (update,
delete, add member) are reserved to the team owner.
"""
from flask import Blueprint, request, g

from ..decorators import require_auth, require_permission
from ..models import Team
from ..services import team_service
from ..validation import ModelValidationPolicy, validate_payload

TEAM_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description"},
    required_on_create={"name"},
    length_rules={"name": (3, 100), "description": (6, 500)},
)

teams_bp = Blueprint("teams", __name__, url_prefix="/api/teams")


@teams_bp.get("")
@require_auth
@require_permission("teams", "read")
def list_teams_route():
    teams = team_service.list_teams(user=g.current_user)
    return {"teams": [t.to_dict() for t in teams], "count": len(teams)}


@teams_bp.post("")
@require_auth
@require_permission("teams", "create")
def create_team_route():
    """Create a team owned by the caller; the caller joins it."""
    patch = validate_payload(
        model=Team, payload=request.get_json(silent=True), policy=TEAM_POLICY, partial=False
    )
    team = team_service.create_team(
        owner=g.current_user,
        name=patch["name"],
        description=patch.get("description"),
    )
    return {"team": team.to_dict()}, 201


@teams_bp.get("/<int:team_id>")
@require_auth
@require_permission("teams", "read")
def get_team_route(team_id: int):
    return {"team": team_service.get_team(team_id, user=g.current_user)}


@teams_bp.patch("/<int:team_id>")
@require_auth
@require_permission("teams", "update")
def update_team_route(team_id: int):
    patch = validate_payload(
        model=Team, payload=request.get_json(silent=True), policy=TEAM_POLICY, partial=True
    )
    team = team_service.update_team(team_id, user=g.current_user, patch=patch)
    return {"team": team.to_dict()}


@teams_bp.delete("/<int:team_id>")
@require_auth
@require_permission("teams", "delete")
def delete_team_route(team_id: int):
    team_service.delete_team(team_id, user=g.current_user)
    return {"ok": True}


@teams_bp.get("/<int:team_id>/members")
@require_auth
@require_permission("users", "read")
def list_members_route(team_id: int):
    members = team_service.list_members(team_id, user=g.current_user)
    return {"members": [m.to_public_dict() for m in members], "count": len(members)}


@teams_bp.post("/<int:team_id>/members")
@require_auth
@require_permission("teams", "update")
def add_member_route(team_id: int):
    """Attach an existing user by email. Body: {"email": str}."""
    data = request.get_json(silent=True) or {}
    member = team_service.add_member(team_id, user=g.current_user, email=data.get("email"))
    return {"member": member.to_public_dict()}, 201

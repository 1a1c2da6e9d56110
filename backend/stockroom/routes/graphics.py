# Overview: Flask API routes for graphics; assembled payloads join each graphic to its histories.

from flask import Blueprint, request, g

from ..decorators import require_auth, require_permission
from ..errors import BadRequestError
from ..models import Graphic
from ..services import reporting_service
from ..services.tenant_service import require_team_context
from ..validation import (
    ModelValidationPolicy,
    ValidationError,
    require_positive_int,
    validate_id_list,
    validate_payload,
)

GRAPHIC_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description"},
    required_on_create={"name"},
    length_rules={"name": (3, 100), "description": (6, 500)},
)

graphics_bp = Blueprint("graphics", __name__, url_prefix="/api/graphics")


@graphics_bp.get("")
@require_auth
@require_permission("graphics", "read")
def list_graphics_route():
    """Store graphics joined to their histories. Query params: store_id (required)."""
    team_id = require_team_context()
    store_id = request.args.get("store_id", type=int)
    if not store_id:
        raise BadRequestError("Missing store_id", "store_id is required")
    graphics = reporting_service.assemble_graphics(team_id, store_id)
    return {"graphics": graphics, "count": len(graphics)}


@graphics_bp.post("")
@require_auth
@require_permission("graphics", "create")
def create_graphic_route():
    """Body: {"store_id": int, "name": str, "description": str, "products": [product ids]}."""
    team_id = require_team_context()
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")
    fields = {k: v for k, v in data.items() if k not in ("store_id", "products")}
    patch = validate_payload(model=Graphic, payload=fields, policy=GRAPHIC_POLICY, partial=False)

    graphic = reporting_service.create_graphic(
        team_id=team_id,
        store_id=require_positive_int(data.get("store_id"), "store_id"),
        user_id=g.current_user.id,
        name=patch["name"],
        description=patch.get("description"),
        product_ids=validate_id_list(data.get("products"), "products"),
    )
    return {"graphic_id": graphic.id}, 201


@graphics_bp.get("/<int:graphic_id>")
@require_auth
@require_permission("graphics", "read")
def get_graphic_route(graphic_id: int):
    team_id = require_team_context()
    return {"graphic": reporting_service.assemble_one_graphic(graphic_id, team_id)}


@graphics_bp.patch("/<int:graphic_id>")
@require_auth
@require_permission("graphics", "update")
def update_graphic_route(graphic_id: int):
    team_id = require_team_context()
    patch = validate_payload(
        model=Graphic, payload=request.get_json(silent=True), policy=GRAPHIC_POLICY, partial=True
    )
    graphic = reporting_service.update_graphic(graphic_id, team_id=team_id, patch=patch)
    return {"graphic": graphic}


@graphics_bp.delete("/<int:graphic_id>")
@require_auth
@require_permission("graphics", "delete")
def delete_graphic_route(graphic_id: int):
    """Query params: store_id (optional); a graphic outside that store answers 403."""
    team_id = require_team_context()
    reporting_service.delete_graphic(
        graphic_id, team_id=team_id, store_id=request.args.get("store_id", type=int)
    )
    return {"ok": True}

# Overview: Flask API routes for inventory histories (read only; histories are written by product changes).

from flask import Blueprint, request

from ..decorators import require_auth, require_permission
from ..services import history_service
from ..services.tenant_service import require_store_in_team, require_team_context

histories_bp = Blueprint("histories", __name__, url_prefix="/api/histories")


def _history_payload(history, *, chronological: bool) -> dict:
    payload = history.to_dict()
    if chronological:
        payload["evolutions"] = history_service.sorted_evolutions(history)
    return payload


@histories_bp.get("")
@require_auth
@require_permission("histories", "read")
def list_histories_route():
    """
    Team histories.

    Query params:
    - store_id: int (optional)
    - product_id: int (optional)
    - sorted: bool (default false) - evolutions in date_key order instead of write order
    """
    team_id = require_team_context()
    store_id = request.args.get("store_id", type=int)
    if store_id is not None:
        require_store_in_team(store_id, team_id)
    chronological = request.args.get("sorted", "false").lower() == "true"

    histories = history_service.list_histories(
        team_id, store_id=store_id, product_id=request.args.get("product_id", type=int)
    )
    return {
        "histories": [_history_payload(h, chronological=chronological) for h in histories],
        "count": len(histories),
    }


@histories_bp.get("/<int:history_id>")
@require_auth
@require_permission("histories", "read")
def get_history_route(history_id: int):
    team_id = require_team_context()
    chronological = request.args.get("sorted", "false").lower() == "true"
    history = history_service.get_history(history_id, team_id)
    return {"history": _history_payload(history, chronological=chronological)}

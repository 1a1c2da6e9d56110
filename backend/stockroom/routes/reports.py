# Overview: Flask API routes for reports; assembled payloads join each report to its orders.

from flask import Blueprint, request, g

from ..decorators import require_auth, require_permission
from ..models import Report
from ..services import reporting_service
from ..services.tenant_service import require_team_context
from ..validation import (
    ModelValidationPolicy,
    ValidationError,
    require_positive_int,
    validate_id_list,
    validate_payload,
)

REPORT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description"},
    required_on_create={"name"},
    length_rules={"name": (3, 100), "description": (6, 500)},
)

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


def _split_body(keys: tuple[str, ...]) -> tuple[dict, dict]:
    """(extra, fields): pull the non-column keys out of the JSON body."""
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")
    data = dict(data)
    extra = {k: data.pop(k) for k in keys if k in data}
    return extra, data


@reports_bp.get("")
@require_auth
@require_permission("reports", "read")
def list_reports_route():
    """Team reports, each joined to its orders. Query params: store_id (optional)."""
    team_id = require_team_context()
    reports = reporting_service.assemble_reports(team_id, store_id=request.args.get("store_id", type=int))
    return {"reports": reports, "count": len(reports)}


@reports_bp.post("")
@require_auth
@require_permission("reports", "create")
def create_report_route():
    """Body: {"store_id": int, "name": str, "description": str, "orders": [order ids]}."""
    team_id = require_team_context()
    extra, fields = _split_body(("store_id", "orders"))
    patch = validate_payload(model=Report, payload=fields, policy=REPORT_POLICY, partial=False)

    report = reporting_service.create_report(
        team_id=team_id,
        store_id=require_positive_int(extra.get("store_id"), "store_id"),
        user_id=g.current_user.id,
        name=patch["name"],
        description=patch.get("description"),
        order_ids=validate_id_list(extra.get("orders"), "orders"),
    )
    return {"report_id": report.id}, 201


@reports_bp.get("/<int:report_id>")
@require_auth
@require_permission("reports", "read")
def get_report_route(report_id: int):
    team_id = require_team_context()
    return {"report": reporting_service.assemble_one_report(report_id, team_id)}


@reports_bp.patch("/<int:report_id>")
@require_auth
@require_permission("reports", "update")
def update_report_route(report_id: int):
    """Body: any of name, description, orders (replaces the linked orders)."""
    team_id = require_team_context()
    extra, fields = _split_body(("orders",))
    patch = validate_payload(model=Report, payload=fields, policy=REPORT_POLICY, partial=True) if fields else {}
    order_ids = validate_id_list(extra["orders"], "orders") if "orders" in extra else None

    report = reporting_service.update_report(report_id, team_id=team_id, patch=patch, order_ids=order_ids)
    return {"report": report}


@reports_bp.delete("/<int:report_id>")
@require_auth
@require_permission("reports", "delete")
def delete_report_route(report_id: int):
    team_id = require_team_context()
    reporting_service.delete_report(
        report_id, team_id=team_id, store_id=request.args.get("store_id", type=int)
    )
    return {"ok": True}

# Overview: Report/Graphic assembler; joins reports to orders and graphics to histories for responses.

"""
Reporting Service

WHY: Reports and graphics are stored as named lists of references (order
ids, history ids). Responses need the referenced rows themselves, so every
read goes through an assembler that joins them in and shapes the payload.

ASSEMBLY:
- Lists (assemble_graphics / assemble_reports) join each parent to its
  children in link order (insertion order, not date order)
- Single reads also join the generating user and the store, exposed as
  generated_by (id) + owner_details and store_id (id) + store_details
- Internal fields (STRIPPED_FIELDS) never leave this module

MULTI-TENANT: all lookups are scoped to the caller's team; store scope is
checked through tenant_service.require_store_in_team.
"""

from __future__ import annotations

from flask import current_app

from ..errors import BadRequestError, ForbiddenError, NotFoundError
from ..extensions import db
from ..models import Graphic, GraphicHistory, History, Order, Report, ReportOrder
from .tenant_service import require_store_in_team

STRIPPED_FIELDS = ("version_id", "password_hash")

GRAPHIC_MUTABLE_FIELDS = {"name", "description"}
REPORT_MUTABLE_FIELDS = {"name", "description"}


def strip_internal(payload: dict) -> dict:
    return {k: v for k, v in payload.items() if k not in STRIPPED_FIELDS}


def _with_details(payload: dict, parent) -> dict:
    """Add owner_details / store_details next to the generated_by / store_id ids."""
    payload["owner_details"] = (
        strip_internal(parent.generated_by.to_public_dict()) if parent.generated_by else None
    )
    payload["store_details"] = strip_internal(parent.store.to_dict()) if parent.store else None
    return payload


# ---------------------------------------------------------------------------
# Graphics
# ---------------------------------------------------------------------------


def _graphic_payload(graphic: Graphic) -> dict:
    payload = strip_internal(graphic.to_dict())
    payload["histories"] = [strip_internal(link.history.to_dict()) for link in graphic.history_links]
    return payload


def _get_graphic_in_scope(graphic_id: int, team_id: int, store_id: int | None = None) -> Graphic:
    graphic = db.session.get(Graphic, graphic_id)
    if not graphic:
        raise NotFoundError(f"No graphic found ({graphic_id})", "This graphic does not exist")
    if graphic.team_id != team_id or (store_id is not None and graphic.store_id != store_id):
        current_app.logger.warning(
            "Graphic %s out of scope for team_id=%s store_id=%s", graphic_id, team_id, store_id
        )
        raise ForbiddenError(
            f"Graphic {graphic_id} is outside team {team_id} / store {store_id}",
            "You cannot access this graphic",
        )
    return graphic


def create_graphic(
    *,
    team_id: int,
    store_id: int,
    user_id: int,
    name: str,
    description: str | None,
    product_ids: list[int],
) -> Graphic:
    """
    Create a graphic charting the histories of product_ids.

    Products without a history are skipped; if none of them has one the
    graphic is refused.
    """
    require_store_in_team(store_id, team_id)

    histories = (
        db.session.query(History)
        .filter(
            History.product_id.in_(product_ids),
            History.team_id == team_id,
            History.store_id == store_id,
        )
        .all()
    )
    if not histories:
        raise BadRequestError(
            f"No histories for products: {product_ids}",
            "Please, make sure all products have histories",
        )
    by_product = {h.product_id: h for h in histories}

    graphic = Graphic(
        name=name,
        description=description,
        team_id=team_id,
        store_id=store_id,
        generated_by_id=user_id,
    )
    db.session.add(graphic)
    db.session.flush()
    for product_id in product_ids:
        history = by_product.get(product_id)
        if history is not None:
            db.session.add(GraphicHistory(graphic_id=graphic.id, history_id=history.id))
    db.session.commit()

    current_app.logger.info(
        "Created graphic %s with %s history(ies) store_id=%s", graphic.id, len(by_product), store_id
    )
    return graphic


def assemble_graphics(team_id: int, store_id: int) -> list[dict]:
    require_store_in_team(store_id, team_id)
    graphics = (
        db.session.query(Graphic)
        .filter(Graphic.team_id == team_id, Graphic.store_id == store_id)
        .order_by(Graphic.id)
        .all()
    )
    return [_graphic_payload(g) for g in graphics]


def assemble_one_graphic(graphic_id: int, team_id: int) -> dict:
    graphic = _get_graphic_in_scope(graphic_id, team_id)
    return _with_details(_graphic_payload(graphic), graphic)


def update_graphic(graphic_id: int, *, team_id: int, patch: dict) -> dict:
    if not patch:
        raise BadRequestError("Empty graphic patch", "Please add valid fields to your request body")
    graphic = _get_graphic_in_scope(graphic_id, team_id)
    for key, value in patch.items():
        if key in GRAPHIC_MUTABLE_FIELDS:
            setattr(graphic, key, value)
    db.session.commit()
    return _with_details(_graphic_payload(graphic), graphic)


def delete_graphic(graphic_id: int, *, team_id: int, store_id: int | None = None) -> None:
    graphic = _get_graphic_in_scope(graphic_id, team_id, store_id)
    db.session.delete(graphic)
    db.session.commit()
    current_app.logger.info("Deleted graphic id=%s", graphic_id)


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


def summarize_orders(orders: list[dict]) -> dict:
    """Totals across joined order payloads."""
    all_items = [item for order in orders for item in order.get("items") or []]
    return {
        "total_items": sum(item.get("quantity") or 0 for item in all_items),
        "total_prices_cents": sum(order.get("total_price_cents") or 0 for order in orders),
        "all_order_items": all_items,
    }


def _report_payload(report: Report) -> dict:
    payload = strip_internal(report.to_dict())
    payload["orders"] = [strip_internal(link.order.to_dict()) for link in report.order_links]
    payload["summary"] = summarize_orders(payload["orders"])
    return payload


def _get_report_in_scope(report_id: int, team_id: int, store_id: int | None = None) -> Report:
    report = db.session.get(Report, report_id)
    if not report:
        raise NotFoundError(f"No report found ({report_id})", "This report does not exist")
    if report.team_id != team_id or (store_id is not None and report.store_id != store_id):
        current_app.logger.warning(
            "Report %s out of scope for team_id=%s store_id=%s", report_id, team_id, store_id
        )
        raise ForbiddenError(
            f"Report {report_id} is outside team {team_id} / store {store_id}",
            "You cannot access this report",
        )
    return report


def _orders_in_scope(order_ids: list[int], *, team_id: int, store_id: int) -> list[Order]:
    if not order_ids:
        raise BadRequestError("Report without orders", "Please add valid orders to your report")
    orders = (
        db.session.query(Order)
        .filter(Order.id.in_(order_ids), Order.team_id == team_id, Order.store_id == store_id)
        .all()
    )
    found = {o.id: o for o in orders}
    missing = [oid for oid in order_ids if oid not in found]
    if missing:
        raise NotFoundError(
            f"Orders {missing} not found in team {team_id} / store {store_id}",
            "Order not found",
            details={"order_ids": missing},
        )
    return [found[oid] for oid in order_ids]


def _link_orders(report: Report, orders: list[Order]) -> None:
    for order in orders:
        db.session.add(ReportOrder(report_id=report.id, order_id=order.id))


def create_report(
    *,
    team_id: int,
    store_id: int,
    user_id: int,
    name: str,
    description: str | None,
    order_ids: list[int],
) -> Report:
    require_store_in_team(store_id, team_id)
    orders = _orders_in_scope(order_ids, team_id=team_id, store_id=store_id)

    report = Report(
        name=name,
        description=description,
        team_id=team_id,
        store_id=store_id,
        generated_by_id=user_id,
    )
    db.session.add(report)
    db.session.flush()
    _link_orders(report, orders)
    db.session.commit()

    current_app.logger.info("Created report %s with %s order(s) store_id=%s", report.id, len(orders), store_id)
    return report


def assemble_reports(team_id: int, store_id: int | None = None) -> list[dict]:
    query = db.session.query(Report).filter(Report.team_id == team_id)
    if store_id is not None:
        require_store_in_team(store_id, team_id)
        query = query.filter(Report.store_id == store_id)
    return [_report_payload(r) for r in query.order_by(Report.id).all()]


def assemble_one_report(report_id: int, team_id: int) -> dict:
    report = _get_report_in_scope(report_id, team_id)
    return _with_details(_report_payload(report), report)


def update_report(
    report_id: int,
    *,
    team_id: int,
    patch: dict,
    order_ids: list[int] | None = None,
) -> dict:
    """Update name/description; order_ids, when given, replaces the linked orders."""
    if not patch and order_ids is None:
        raise BadRequestError("Empty report patch", "Please add valid fields to your request body")
    report = _get_report_in_scope(report_id, team_id)
    for key, value in patch.items():
        if key in REPORT_MUTABLE_FIELDS:
            setattr(report, key, value)

    if order_ids is not None:
        orders = _orders_in_scope(order_ids, team_id=team_id, store_id=report.store_id)
        report.order_links.clear()
        db.session.flush()
        _link_orders(report, orders)

    db.session.commit()
    return _with_details(_report_payload(report), report)


def delete_report(report_id: int, *, team_id: int, store_id: int | None = None) -> None:
    report = _get_report_in_scope(report_id, team_id, store_id)
    db.session.delete(report)
    db.session.commit()
    current_app.logger.info("Deleted report id=%s", report_id)

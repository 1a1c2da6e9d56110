# Overview: Evolution merger; keeps one quantity reading per product per calendar day.

"""
Inventory History (Evolution Merger)

WHY: Graphics chart stock levels over time. Every time a product's quantity
changes, the new level is recorded as an "evolution" on the product's
History record, one History per (product, store, team).

BUCKETING:
- Each evolution carries a date_key "YYYY-MM-DD"
- A second reading on the same date_key replaces the first (same-day
  overwrite); a reading on a new date_key is appended
- Days are calendar days in HISTORY_TIMEZONE when configured, otherwise in
  the server's local time. Servers in different zones can bucket a reading
  taken near midnight differently; set HISTORY_TIMEZONE to pin it.

ORDERING: evolutions are kept in write order, not date order. Use
sorted_evolutions() when chronological order matters.

TRANSACTIONS: record_quantity(commit=False) only flushes, so product writes
and their history entry commit together.
"""

from __future__ import annotations

from datetime import datetime
from numbers import Real
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from flask import current_app

from ..errors import InternalError, NotFoundError
from ..extensions import db
from ..models import History, Product
from ..time_utils import localnow, to_utc_z
from .concurrency import lock_for_update, run_with_retry


def generate_date_key(moment: datetime) -> str:
    """Calendar-day bucket for a moment, as YYYY-MM-DD."""
    return f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"


def bucket_moment(at: datetime | None = None) -> datetime:
    """
    Express an observation time in the bucketing timezone.

    - HISTORY_TIMEZONE set: aware datetimes are converted to that zone;
      naive datetimes are read as server-local time first
    - HISTORY_TIMEZONE empty: aware datetimes are converted to server-local
      time; naive datetimes are taken as already local
    """
    moment = at or localnow()
    zone_name = current_app.config.get("HISTORY_TIMEZONE") or ""
    if zone_name:
        try:
            zone = ZoneInfo(zone_name)
        except ZoneInfoNotFoundError as exc:
            raise InternalError(f"Unknown HISTORY_TIMEZONE {zone_name!r}") from exc
        return moment.astimezone(zone)
    if moment.tzinfo is not None:
        return moment.astimezone()
    return moment


def build_evolution(quantity, user_id: int, at: datetime | None = None) -> dict:
    """date is the instant in UTC; date_key is the day in the bucketing zone."""
    moment = bucket_moment(at)
    # Naive moments are local wall-clock time
    instant = moment if moment.tzinfo is not None else moment.astimezone()
    return {
        "date": to_utc_z(instant),
        "date_key": generate_date_key(moment),
        "quantity": quantity,
        "collected_by": user_id,
    }


def merge_evolution(evolutions: list[dict], entry: dict) -> tuple[list[dict], bool]:
    """
    Merge one evolution into a list, returning (new_list, replaced).

    The entry replaces the first existing evolution with the same date_key,
    otherwise it is appended. The input list is not modified.
    """
    merged = list(evolutions or [])
    for index, existing in enumerate(merged):
        if existing.get("date_key") == entry["date_key"]:
            merged[index] = entry
            return merged, True
    merged.append(entry)
    return merged, False


def _validate_inputs(product_id, store_id, team_id, user_id, quantity) -> None:
    missing = [
        name
        for name, value in (
            ("product_id", product_id),
            ("store_id", store_id),
            ("team_id", team_id),
            ("user_id", user_id),
        )
        if value is None
    ]
    if missing:
        raise InternalError(f"Cannot write history, missing {', '.join(missing)}")
    if isinstance(quantity, bool) or not isinstance(quantity, Real):
        raise InternalError(f"Cannot write history, quantity {quantity!r} is not a number")


def record_quantity(
    product_id: int,
    store_id: int,
    team_id: int,
    user_id: int,
    quantity,
    at: datetime | None = None,
    *,
    commit: bool = True,
) -> History:
    """
    Record a product's quantity for the day of `at` (default: now).

    Creates the History on first use. Fails before any write when an id is
    missing, the quantity is not a number, or the product does not exist.
    """
    _validate_inputs(product_id, store_id, team_id, user_id, quantity)

    def _op() -> History:
        product = db.session.get(Product, product_id)
        if not product:
            raise NotFoundError(f"Product {product_id} not found", "Product not found")

        entry = build_evolution(quantity, user_id, at)

        history = lock_for_update(
            db.session.query(History).filter_by(
                product_id=product_id,
                store_id=store_id,
                team_id=team_id,
            )
        ).first()

        if history is None:
            history = History(
                product_id=product_id,
                store_id=store_id,
                team_id=team_id,
                product_name=product.name,
                evolutions=[entry],
            )
            db.session.add(history)
        else:
            merged, replaced = merge_evolution(history.evolutions, entry)
            # Reassign so the JSON column is flagged dirty
            history.evolutions = merged
            if replaced:
                current_app.logger.info(
                    "History %s: overwrote reading for %s", history.id, entry["date_key"]
                )

        if commit:
            db.session.commit()
        else:
            db.session.flush()
        return history

    if not commit:
        return _op()
    return run_with_retry(_op)


def sorted_evolutions(history: History) -> list[dict]:
    """Evolutions in chronological order of date_key."""
    return sorted(history.evolutions or [], key=lambda e: e.get("date_key") or "")


def get_history(history_id: int, team_id: int) -> History:
    history = db.session.get(History, history_id)
    if not history or history.team_id != team_id:
        raise NotFoundError(f"History {history_id} not found in team {team_id}", "History not found")
    return history


def get_product_history(product_id: int, store_id: int, team_id: int) -> History | None:
    return db.session.query(History).filter_by(
        product_id=product_id,
        store_id=store_id,
        team_id=team_id,
    ).first()


def list_histories(team_id: int, store_id: int | None = None, product_id: int | None = None) -> list[History]:
    query = db.session.query(History).filter(History.team_id == team_id)
    if store_id is not None:
        query = query.filter(History.store_id == store_id)
    if product_id is not None:
        query = query.filter(History.product_id == product_id)
    return query.order_by(History.id).all()

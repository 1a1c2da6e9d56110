# Overview: Pricing aggregator; derives cart and order totals from quantities and unit prices.

"""
Pricing Aggregator

WHY: Cart totals are never stored as a source of truth. A cart read joins its
items to the live products and recomputes every line total and the grand
total here, so a price change is reflected on the next read.

CONTRACT:
- Input is an in-memory structure (dicts), never an ORM object
- Mutates the structure in place and returns it
- No storage access, no error conditions, no hidden state
- A cart without items totals 0

Expected cart shape:
    {
        "id": 1,
        "items": [
            {"id": 7, "quantity": 2,
             "product_details": {"unit_price_cents": 1000, ...}},
        ],
    }
"""

from __future__ import annotations

from typing import Iterable


def line_total(quantity: int, unit_price_cents: int) -> int:
    """Total for one line, in cents."""
    return quantity * unit_price_cents


def _item_total(item: dict) -> int:
    details = item.get("product_details") or {}
    return line_total(item.get("quantity") or 0, details.get("unit_price_cents") or 0)


def aggregate_cart(cart: dict) -> dict:
    """
    Recompute per-item totals and the cart grand total.

    Sets item["total_price_cents"] on every item and
    cart["total_prices_cents"] on the cart.
    """
    total = 0
    for item in cart.get("items") or []:
        item["total_price_cents"] = _item_total(item)
        total += item["total_price_cents"]
    cart["total_prices_cents"] = total
    return cart


def order_total(lines: Iterable[dict]) -> int:
    """Sum of frozen order lines (same shape as joined cart items)."""
    return sum(_item_total(line) for line in lines)

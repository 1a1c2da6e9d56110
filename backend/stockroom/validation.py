from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import DeclarativeMeta

from .errors import BadRequestError


# Maximum price: $9,999,999.99 (999,999,999 cents)
# This prevents database overflow issues and nonsensical prices
MAX_PRICE_CENTS = 999_999_999

# Upper bound for stock and cart quantities
MAX_QUANTITY = 1_000_000


class ValidationError(BadRequestError):
    """400-level input problem."""

    def __init__(self, message: str):
        super().__init__(message, message)


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    - length_rules: (min, max) character bounds for text fields, checked after stripping
    """
    writable_fields: set[str]
    required_on_create: set[str] = field(default_factory=set)
    length_rules: dict[str, tuple[int, int]] = field(default_factory=dict)


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def coerce_int(key: str, value: Any) -> int:
    """Strict integer coercion: rejects bools, floats and scientific notation."""
    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    # String input - must be plain digits (with optional leading minus)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{key} must be an integer")
        if 'e' in stripped.lower():
            raise ValidationError(f"{key} must be a plain integer (scientific notation not allowed)")
        if '.' in stripped:
            raise ValidationError(f"{key} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{key} must be an integer")
    if isinstance(value, float):
        raise ValidationError(f"{key} must be an integer, not a decimal")
    raise ValidationError(f"{key} must be an integer")


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    if isinstance(coltype, Integer):
        return coerce_int(col.key, value)

    # Booleans
    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        raise ValidationError(f"{col.key} must be a boolean")

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        if isinstance(value, (dict, list)):
            raise ValidationError(f"{col.key} must be a string")
        return str(value).strip()

    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    - length_rules
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys; empty patch rejected)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if partial and not payload:
        raise ValidationError("Request body cannot be empty")

    if not partial:
        missing = sorted(f for f in policy.required_on_create if f not in payload)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        bounds = policy.length_rules.get(k)
        if bounds and isinstance(val, str) and val != "":
            low, high = bounds
            if len(val) < low:
                raise ValidationError(f"The field {k} must have {low} characters minimum")
            if len(val) > high:
                raise ValidationError(f"The field {k} must have {high} characters maximum")

        patch[k] = val

    return patch


def enforce_rules_product(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    if "unit_price_cents" in patch and patch["unit_price_cents"] is not None:
        price = patch["unit_price_cents"]
        if price <= 0:
            raise ValidationError("unit_price_cents must be > 0")
        if price > MAX_PRICE_CENTS:
            raise ValidationError(f"unit_price_cents cannot exceed {MAX_PRICE_CENTS} (${MAX_PRICE_CENTS / 100:,.2f})")

    for key in ("quantity", "min_quantity"):
        if key in patch and patch[key] is not None:
            if patch[key] < 0:
                raise ValidationError(f"{key} must be >= 0")
            if patch[key] > MAX_QUANTITY:
                raise ValidationError(f"{key} cannot exceed {MAX_QUANTITY}")


def require_positive_int(value: Any, key: str) -> int:
    if value is None:
        raise ValidationError(f"The field {key} is required")
    number = coerce_int(key, value)
    if number < 1:
        raise ValidationError(f"{key} must be >= 1")
    if number > MAX_QUANTITY:
        raise ValidationError(f"{key} cannot exceed {MAX_QUANTITY}")
    return number


def validate_id_list(value: Any, key: str, *, min_items: int = 1) -> list[int]:
    """Non-empty list of integer ids, duplicates dropped, order kept."""
    if not isinstance(value, list):
        raise ValidationError(f"The field {key} must be a list")
    if len(value) < min_items:
        raise ValidationError(f"The field {key} must contain at least {min_items} item(s)")
    ids: list[int] = []
    for raw in value:
        item_id = require_positive_int(raw, key)
        if item_id not in ids:
            ids.append(item_id)
    return ids


def validate_line_items(value: Any, key: str = "items") -> list[dict]:
    """
    Validate [{"product_id": int, "quantity": int >= 1}, ...] from cart and order bodies.

    Extra keys per line (e.g. client-side product_details) are ignored; prices
    always come from the server.
    """
    if not isinstance(value, list) or not value:
        raise ValidationError(f"The field {key} must contain at least 1 item")
    lines: list[dict] = []
    for raw in value:
        if not isinstance(raw, dict):
            raise ValidationError(f"Each entry in {key} must be an object")
        lines.append({
            "product_id": require_positive_int(raw.get("product_id"), "product_id"),
            "quantity": require_positive_int(raw.get("quantity"), "quantity"),
        })
    return lines

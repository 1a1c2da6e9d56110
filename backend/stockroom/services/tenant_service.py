"""
Multi-Tenant Service: Team Validation and Scoping Helpers

WHY: Centralize tenant validation logic for reuse across services and routes.
Every request that touches stores, products, carts, orders, histories,
reports or graphics must be scoped to the caller's team, and cross-team
access must be explicitly denied.

SECURITY INVARIANTS:
1. Every authenticated request has g.team_id set (None for users without a team)
2. Store IDs from client input must be validated against g.team_id
3. Cross-team lookups answer "not found" so other teams' ids are not revealed
4. Cross-team access attempts are logged

USAGE:
    from stockroom.services.tenant_service import require_team_context, require_store_in_team

    team_id = require_team_context()
    store = require_store_in_team(store_id, team_id)
"""

from flask import current_app, g, has_request_context, request

from ..errors import NotFoundError, UnauthorizedError
from ..extensions import db
from ..models import Store


def get_current_team_id() -> int | None:
    """Current caller's team_id from Flask g context (None when unset)."""
    return getattr(g, "team_id", None)


def require_team_context() -> int:
    """
    Get current tenant's team_id, or fail.

    Users must create or join a team before using team-scoped resources.
    """
    team_id = get_current_team_id()
    if team_id is None:
        raise UnauthorizedError(
            "No team associated with the request",
            "Please make sure you belong to a team",
        )
    return team_id


def require_store_in_team(store_id: int, team_id: int) -> Store:
    """
    Validate that a store belongs to the specified team.

    SECURITY: Core tenant isolation check. Call this before any operation
    that uses a store_id from client input.

    Raises:
        NotFoundError if store doesn't exist or belongs to a different team
    """
    store = db.session.get(Store, store_id) if store_id is not None else None

    if not store:
        _log_cross_team_attempt(f"Store {store_id} not found", team_id=team_id)
        raise NotFoundError(f"Store {store_id} not found", "Store not found")

    if store.team_id != team_id:
        _log_cross_team_attempt(
            f"Store {store_id} belongs to team {store.team_id}, not {team_id}",
            team_id=team_id,
        )
        # Don't reveal it exists in another team
        raise NotFoundError(f"Store {store_id} outside team {team_id}", "Store not found")

    return store


def require_in_team(entity, team_id: int, label: str):
    """Generic scope check for team-owned rows (products, orders, histories...)."""
    if entity is None or entity.team_id != team_id:
        if entity is not None:
            _log_cross_team_attempt(
                f"{label} {entity.id} belongs to team {entity.team_id}, not {team_id}",
                team_id=team_id,
            )
        raise NotFoundError(f"{label} not found in team {team_id}", f"{label} not found")
    return entity


def _log_cross_team_attempt(reason: str, team_id: int | None = None) -> None:
    # Outside a request (CLI, service calls) there is no caller to report
    in_request = has_request_context()
    user = g.get("current_user") if in_request else None
    current_app.logger.warning(
        "CROSS_TEAM_ACCESS_DENIED user_id=%s team_id=%s path=%s reason=%s",
        getattr(user, "id", None),
        team_id,
        request.path if in_request else None,
        reason,
    )

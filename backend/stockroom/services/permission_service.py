# Overview: Service-layer operations for permission checks against the static role policy table.

"""
Permission Checking

WHY: Enforce role-based access control before any business logic runs.

DESIGN PRINCIPLES:
- Fail closed: unknown roles and unknown resources are denied
- Static policy: the role table is loaded once at import (permissions.roles)
- Log denials only: grants are not logged
"""

from flask import current_app, has_request_context, request

from ..errors import ForbiddenError
from ..permissions import get_role_permission_codes, has_permission, permission_code


def get_role_permissions(role: str) -> set[str]:
    """Concrete permission codes a role is granted (wildcards expanded)."""
    return set(get_role_permission_codes(role))


def user_has_permission(user, resource: str, action: str) -> bool:
    """Check the user's role against the policy table."""
    if user is None:
        return False
    return has_permission(user.role, resource, action)


def log_permission_denied(user, code: str, reason: str) -> None:
    """Write a denial to the application log with request context when present."""
    path = request.path if has_request_context() else None
    method = request.method if has_request_context() else None
    current_app.logger.warning(
        "PERMISSION_DENIED user_id=%s role=%s code=%s method=%s path=%s reason=%s",
        getattr(user, "id", None),
        getattr(user, "role", None),
        code,
        method,
        path,
        reason,
    )


def require_permission(user, resource: str, action: str) -> None:
    """
    Require user to have permission, raise ForbiddenError if not.

    Usage:
        require_permission(g.current_user, "orders", "create")
    """
    code = permission_code(resource, action)
    if not user_has_permission(user, resource, action):
        log_permission_denied(user, code, f"Missing permission: {code}")
        raise ForbiddenError(
            f"Role {getattr(user, 'role', None)!r} lacks {code}",
            "Permission denied",
            details={"required_permission": code},
        )

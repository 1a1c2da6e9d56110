# Overview: Request and permission decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .permissions import UserRole
from .services import session_service, permission_service


def _is_authenticated() -> bool:
    return getattr(g, "current_user", None) is not None


def _clear_context() -> None:
    g.current_user = None
    g.team_id = None
    g.role = None
    g.session_context = None


def require_auth(f):
    """
    Require authentication and establish team context.

    MULTI-TENANT: Sets the following Flask g attributes on every request:
    - g.current_user: The authenticated User object
    - g.team_id: The user's team ID (None until the user creates or joins a team)
    - g.role: The user's role name, consulted by require_permission
    - g.session_context: The full SessionContext object

    SECURITY: Returns 401 if:
    - No Authorization header
    - Invalid, expired or revoked token
    - User account deactivated
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        _clear_context()

        auth_header = request.headers.get("Authorization")
        if not auth_header or not auth_header.startswith("Bearer "):
            return jsonify({"error": "Authentication required"}), 401

        token = auth_header.split(" ", 1)[1].strip()
        context = session_service.validate_session(token) if token else None
        if not context:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.current_user = context.user
        g.team_id = context.team_id
        g.role = context.role
        g.session_context = context

        return f(*args, **kwargs)

    return decorated_function


def require_permission(resource: str, action: str):
    """
    Require the caller's role to grant resource.action.

    Must be stacked under @require_auth. Denials are logged by
    permission_service and answered with 403 + the missing permission code.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_authenticated():
                return jsonify({"error": "Authentication required"}), 401

            # ForbiddenError carries required_permission; the app error handler renders it
            permission_service.require_permission(g.current_user, resource, action)
            return f(*args, **kwargs)

        return decorated_function
    return decorator


def require_admin(f):
    """Require the admin role (session invalidation and other account operations)."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not _is_authenticated():
            return jsonify({"error": "Authentication required"}), 401

        if g.current_user.role != UserRole.ADMIN:
            permission_service.log_permission_denied(g.current_user, "admin", "Admin role required")
            return jsonify({"error": "Admin access required"}), 403

        return f(*args, **kwargs)

    return decorated_function

# Overview: Error taxonomy shared by services and routes, plus the Flask handlers that map it to JSON.

"""
Service-layer error taxonomy.

WHY: Services raise one of these instead of returning status codes. Every
error carries two messages:
- message: internal diagnostic, written to the log only
- public_message: safe to return to API clients

The HTTP layer maps each class to a single status code in one place
(register_error_handlers), so routes stay thin.
"""

from __future__ import annotations

from flask import current_app, jsonify
from werkzeug.exceptions import HTTPException

from .extensions import db


class StockroomError(Exception):
    """Base class for every expected, client-visible failure."""

    status_code = 500
    default_public_message = "Something went wrong"

    def __init__(self, message: str, public_message: str | None = None, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.public_message = public_message or message or self.default_public_message
        self.details = details or {}

    def to_dict(self) -> dict:
        payload = {"error": self.public_message}
        if self.details:
            payload["details"] = self.details
        return payload


class BadRequestError(StockroomError):
    """400: missing body, malformed identifiers, validation failures."""
    status_code = 400
    default_public_message = "Bad request"


class UnauthorizedError(StockroomError):
    """401: no authenticated actor."""
    status_code = 401
    default_public_message = "Authentication required"


class ForbiddenError(StockroomError):
    """403: role lacks permission, or the actor does not own the resource."""
    status_code = 403
    default_public_message = "Permission denied"


class NotFoundError(StockroomError):
    """404: entity missing or outside the caller's team/store scope."""
    status_code = 404
    default_public_message = "Not found"


class ConflictError(StockroomError):
    """409: duplicated resource (second cart for a store/user, second team for an owner)."""
    status_code = 409
    default_public_message = "Resource already exists"


class InternalError(StockroomError):
    """500: unexpected failures, missing configuration, store-layer errors."""
    status_code = 500
    default_public_message = "Something went wrong"

    def __init__(self, message: str, public_message: str | None = None, details: dict | None = None):
        # Internal diagnostics never leak through public_message.
        super().__init__(message, public_message or self.default_public_message, details)


def register_error_handlers(app) -> None:
    """Attach JSON error handlers for the taxonomy and for unexpected failures."""

    @app.errorhandler(StockroomError)
    def handle_stockroom_error(exc: StockroomError):
        db.session.rollback()
        if exc.status_code >= 500:
            current_app.logger.error("%s: %s", type(exc).__name__, exc.message, exc_info=exc)
        else:
            current_app.logger.warning("%s: %s", type(exc).__name__, exc.message)
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(exc: HTTPException):
        return jsonify({"error": exc.description or exc.name}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(exc: Exception):
        db.session.rollback()
        current_app.logger.exception("Unhandled error while processing request")
        return jsonify({"error": "Internal server error"}), 500

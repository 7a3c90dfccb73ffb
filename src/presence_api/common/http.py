"""JSON envelope, bearer authentication and error mapping for the API.

Every response body is ``{"success": bool, ...}``; errors always carry a
``message`` and never expose internal error text.
"""
from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Optional

from flask import Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    InternalError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

GENERIC_SERVER_ERROR = "Internal server error"

# Checked in order; first matching base class wins.
STATUS_BY_ERROR: tuple[tuple[type[DomainError], int], ...] = (
    (InvalidCredentialsError, 401),
    (InvalidTokenError, 401),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (InternalError, 500),
)


def status_for(exc: DomainError) -> int:
    for error_type, status in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    # ValidationError, ConflictError, DuplicateError, NoCheckInError
    return 400


def json_ok(status: int = 200, **payload: Any):
    return jsonify({"success": True, **payload}), status


def json_error(message: str, status: int):
    resp = jsonify({"success": False, "message": message})
    resp.status_code = status
    if status == 401:
        resp.headers["WWW-Authenticate"] = "Bearer"
    return resp


def json_body() -> dict:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def field(body: dict, name: str) -> Optional[str]:
    """Read a scalar field as text; numbers (e.g. phone) are accepted."""
    value = body.get(name)
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    return value if isinstance(value, str) else None


def bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def bearer_required(auth_service):
    """Decorator factory: resolve ``Authorization: Bearer`` into ``g.identity``."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            token = bearer_token()
            if not token:
                return json_error("Token not found", 401)
            try:
                g.identity = auth_service.identify(token)
            except InvalidTokenError:
                return json_error("Invalid token", 401)
            return view(*args, **kwargs)

        return wrapper

    return decorator


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        status = status_for(e)
        if status >= 500:
            logger.error("Internal error on %s %s: %s", request.method, request.path, e)
            return json_error(GENERIC_SERVER_ERROR, status)
        return json_error(str(e), status)

    @app.errorhandler(404)
    def handle_not_found(e):
        return json_error("Endpoint not found", 404)

    @app.errorhandler(405)
    def handle_method_not_allowed(e):
        return json_error("Method not allowed", 405)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return json_error(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return json_error(GENERIC_SERVER_ERROR, 500)

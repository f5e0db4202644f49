from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Dict

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..access.service import CampingAccessPolicy
from ..core.enums import Permission
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
)


def current_user_id() -> int:
    return int(session["user_id"])


def _unauthenticated():
    return jsonify({"success": False, "error": "Authentication required"}), 401


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return _unauthenticated()
        return view(*args, **kwargs)

    return wrapper


def permission_required(access: CampingAccessPolicy, *required: Permission):
    """Grants are re-read from the store on every request."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return _unauthenticated()
            access.require_permission(current_user_id(), *required)
            return view(*args, **kwargs)

        return wrapper

    return decorator


def json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("A JSON object body is required")
    return data


def ok(payload: Any = None, status: int = 200, **extra):
    body = {"success": True, "data": payload}
    body.update(extra)
    return jsonify(body), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        status = next((code for cls, code in STATUS_BY_ERROR if isinstance(e, cls)), 400)
        return jsonify({"success": False, "error": str(e)}), status

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return e
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"success": False, "error": "Internal server error"}), 500

from __future__ import annotations

import logging
from datetime import date, timedelta
from functools import wraps
from typing import Optional

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.constants import DEFAULT_HISTORY_DAYS
from ..core.enums import Role
from ..core.exceptions import (
    AttendanceError,
    AuthorizationError,
    ConflictingLeave,
    InfrastructureError,
    NotFoundError,
    ValidationError,
)
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)

_RETRY_AFTER_SECONDS = 5


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"ok": False, "error": "Unauthenticated", "message": "Please sign in to continue"}), 401
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"ok": False, "error": "Unauthenticated", "message": "Please sign in to continue"}), 401
        if session.get("role") != Role.ADMIN.value:
            return jsonify({"ok": False, "error": "AuthorizationError", "message": "Admins only"}), 403
        return view(*args, **kwargs)

    return wrapper


def current_user_id() -> str:
    return str(session["user_id"])


def current_role() -> Role:
    try:
        return Role(session.get("role"))
    except ValueError:
        raise AuthorizationError("Unknown role")


def target_person_id() -> str:
    """The signed-in intern, or any ``person_id`` an admin asks for."""
    requested = request.args.get("person_id")
    if requested and requested != current_user_id():
        if current_role() != Role.ADMIN:
            raise AuthorizationError("You can only view your own attendance")
        return requested
    return current_user_id()


def json_body() -> dict:
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def date_range_args(today: date) -> tuple[date, date]:
    end_raw = request.args.get("end")
    start_raw = request.args.get("start")
    end = parse_iso_date(end_raw) if end_raw else today
    start = parse_iso_date(start_raw) if start_raw else end - timedelta(days=DEFAULT_HISTORY_DAYS - 1)
    return start, end


def _error_payload(exc: Exception, *, reason: Optional[str] = None, retryable: bool = False) -> dict:
    return {
        "ok": False,
        "error": type(exc).__name__,
        "reason": reason,
        "message": str(exc),
        "retryable": retryable,
    }


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(AttendanceError)
    def handle_attendance_error(exc: AttendanceError):
        payload = _error_payload(exc, reason=exc.reason.value, retryable=exc.retryable)
        if isinstance(exc, InfrastructureError):
            logger.warning("Retryable failure: %s", exc)
            response = jsonify(payload)
            response.status_code = 503
            response.headers["Retry-After"] = str(_RETRY_AFTER_SECONDS)
            return response
        status = 409 if isinstance(exc, ConflictingLeave) else 422
        return jsonify(payload), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return jsonify(_error_payload(exc)), 400

    @app.errorhandler(AuthorizationError)
    def handle_authorization_error(exc: AuthorizationError):
        return jsonify(_error_payload(exc)), 403

    @app.errorhandler(NotFoundError)
    def handle_not_found(exc: NotFoundError):
        return jsonify(_error_payload(exc)), 404

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        if isinstance(exc, HTTPException):
            return jsonify({"ok": False, "error": exc.name, "message": exc.description}), exc.code
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return (
            jsonify({"ok": False, "error": "InternalError", "message": "Something went wrong, please retry later"}),
            500,
        )

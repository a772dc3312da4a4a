from __future__ import annotations

import logging
from datetime import date
from functools import wraps
from typing import Optional

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from ..shared.date_range import FiniteDateRange
from .datetime_utils import parse_iso_date

_LOGGER = logging.getLogger(__name__)


def error_response(exc: Exception):
    if isinstance(exc, (ValidationError, ConflictError)):
        return jsonify({"success": False, "message": str(exc)}), 400
    if isinstance(exc, AuthenticationError):
        return jsonify({"success": False, "message": str(exc)}), 401
    if isinstance(exc, AuthorizationError):
        return jsonify({"success": False, "message": str(exc)}), 403
    if isinstance(exc, NotFoundError):
        return jsonify({"success": False, "message": str(exc)}), 404

    _LOGGER.exception("Unhandled error in %s %s", request.method, request.path)
    return jsonify({"success": False, "message": "Internal server error"}), 500


def api_view(view):
    """Turn domain errors raised by the view into JSON error responses."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except Exception as e:
            return error_response(e)

    return wrapper


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "employee_id" not in session:
            return jsonify({"success": False, "message": "Login required"}), 401
        return view(*args, **kwargs)

    return wrapper


def current_role() -> Role:
    return Role(session.get("role"))


def current_employee_id() -> int:
    return int(session["employee_id"])


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def parse_date_arg(value: Optional[str], field_name: str) -> date:
    if not value:
        raise ValidationError(f"{field_name} is required")
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{field_name} must be a date in YYYY-MM-DD format")


def parse_int_arg(value, field_name: str) -> int:
    if value is None or value == "":
        raise ValidationError(f"{field_name} is required")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def period_from_args() -> FiniteDateRange:
    return FiniteDateRange(
        parse_date_arg(request.args.get("from"), "from"),
        parse_date_arg(request.args.get("to"), "to"),
    )


def parse_enum(enum_cls, value, field_name: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"Invalid {field_name}: {value}")

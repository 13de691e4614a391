"""Helpers shared by the Flask controllers."""

from __future__ import annotations

import dataclasses
import logging
from datetime import date, datetime, timedelta
from enum import Enum
from functools import wraps
from typing import Any, Optional

from flask import Flask, jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AmbiguousMatch,
    AuthenticationError,
    AuthorizationError,
    ConcurrencyConflict,
    CredentialAlreadyRegistered,
    DataIntegrityError,
    DeviceUnavailable,
    DomainError,
    NoEnrollment,
    NotFoundError,
    StoreUnavailable,
    UserCancelled,
    ValidationError,
)
from .datetime_utils import format_duration, parse_iso_date

logger = logging.getLogger(__name__)

# Most specific first.
_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (NoEnrollment, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (AmbiguousMatch, 409),
    (CredentialAlreadyRegistered, 409),
    (ConcurrencyConflict, 409),
    (UserCancelled, 409),
    (DataIntegrityError, 500),
    (DeviceUnavailable, 503),
    (StoreUnavailable, 503),
)


def status_for(error: DomainError) -> int:
    for cls, status in _STATUS_BY_ERROR:
        if isinstance(error, cls):
            return status
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        status = status_for(e)
        if status >= 500:
            logger.error("%s on %s %s: %s", type(e).__name__, request.method, request.path, e)
        return jsonify({"error": str(e), "kind": type(e).__name__}), status


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if session.get("role") != Role.ADMIN.value:
            raise AuthorizationError("Administrator login required")
        return view(*args, **kwargs)

    return wrapper


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def date_field(data: dict, name: str, *, required: bool = True) -> Optional[date]:
    value = data.get(name)
    if value in (None, ""):
        if required:
            raise ValidationError(f"{name} is required (YYYY-MM-DD)")
        return None
    try:
        return parse_iso_date(str(value))
    except ValueError:
        raise ValidationError(f"{name} must be YYYY-MM-DD")


def id_list(data: dict, name: str = "ids") -> list[str]:
    ids: Any = data.get(name)
    if not isinstance(ids, list) or not all(isinstance(i, str) and i for i in ids):
        raise ValidationError(f"{name} must be a list of ids")
    return ids


def to_jsonable(value: Any) -> Any:
    """Entities and plain values to JSON-friendly data (ISO dates, enum values)."""

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return format_duration(value)
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value

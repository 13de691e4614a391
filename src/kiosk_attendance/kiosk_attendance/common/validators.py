from __future__ import annotations

from datetime import date
from typing import Optional

from ..core.constants import PIN_LENGTH
from ..core.exceptions import ValidationError
from .datetime_utils import parse_hhmm


def _require_text(value, field_name: str) -> None:
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"{field_name} must be text")


def require_non_empty(value: Optional[str], field_name: str) -> str:
    _require_text(value, field_name)
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def optional_text(value: Optional[str], field_name: str) -> Optional[str]:
    _require_text(value, field_name)
    return (value or "").strip() or None


def is_valid_pin(value: Optional[str]) -> bool:
    return isinstance(value, str) and len(value) == PIN_LENGTH and value.isascii() and value.isdigit()


def require_pin(value: Optional[str]) -> str:
    if not is_valid_pin(value):
        raise ValidationError(f"A {PIN_LENGTH}-digit PIN is required")
    return value


def optional_pin(value: Optional[str]) -> Optional[str]:
    """Empty means "no PIN"; anything else must be a valid PIN."""
    _require_text(value, "PIN")
    value = (value or "").strip()
    if not value:
        return None
    return require_pin(value)


def require_date_range(start: Optional[date], end: Optional[date]) -> tuple[date, date]:
    if start is None or end is None:
        raise ValidationError("Start and end dates are required")
    if end < start:
        raise ValidationError("End date must be on or after the start date")
    return start, end


def require_hhmm(value: Optional[str], field_name: str) -> str:
    value = require_non_empty(value, field_name)
    try:
        parse_hhmm(value)
    except ValueError:
        raise ValidationError(f"{field_name} must be HH:MM")
    return value


def require_non_negative(value, field_name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if number < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return number

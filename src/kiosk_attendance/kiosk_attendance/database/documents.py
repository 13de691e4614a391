"""Coercion helpers between store documents and entity dataclasses.

Documents are weakly typed maps; every read goes through these helpers so a malformed
document surfaces as ``DataIntegrityError`` instead of leaking into the services.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, List, Mapping, Optional, Sequence, Type, TypeVar

from ..core.exceptions import DataIntegrityError

E = TypeVar("E", bound=Enum)


def encode_datetime(value: datetime) -> str:
    return value.isoformat(timespec="microseconds")


def encode_date(value: date) -> str:
    return value.isoformat()


def _where(doc: Mapping[str, Any], field: str) -> str:
    return f"{doc.get('id', '?')}.{field}"


def require_str(doc: Mapping[str, Any], field: str) -> str:
    value = doc.get(field)
    if not isinstance(value, str):
        raise DataIntegrityError(f"{_where(doc, field)}: expected text, got {type(value).__name__}")
    return value


def optional_str(doc: Mapping[str, Any], field: str) -> Optional[str]:
    value = doc.get(field)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise DataIntegrityError(f"{_where(doc, field)}: expected text, got {type(value).__name__}")
    return value


def decode_datetime(doc: Mapping[str, Any], field: str) -> datetime:
    value = doc.get(field)
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            pass
    raise DataIntegrityError(f"{_where(doc, field)}: expected timestamp, got {value!r}")


def optional_datetime(doc: Mapping[str, Any], field: str) -> Optional[datetime]:
    if doc.get(field) in (None, ""):
        return None
    return decode_datetime(doc, field)


def decode_date(doc: Mapping[str, Any], field: str) -> date:
    value = doc.get(field)
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            pass
    raise DataIntegrityError(f"{_where(doc, field)}: expected date, got {value!r}")


def decode_bool(doc: Mapping[str, Any], field: str, default: bool = False) -> bool:
    value = doc.get(field)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    raise DataIntegrityError(f"{_where(doc, field)}: expected boolean, got {value!r}")


def decode_number(doc: Mapping[str, Any], field: str, default: Optional[float] = None) -> float:
    value = doc.get(field)
    if value is None and default is not None:
        return float(default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DataIntegrityError(f"{_where(doc, field)}: expected number, got {value!r}")
    return float(value)


def decode_enum(enum_cls: Type[E], doc: Mapping[str, Any], field: str) -> E:
    value = doc.get(field)
    try:
        return enum_cls(value)
    except ValueError:
        raise DataIntegrityError(f"{_where(doc, field)}: unexpected value {value!r}")


def optional_vector(doc: Mapping[str, Any], field: str) -> Optional[List[float]]:
    value = doc.get(field)
    if value is None:
        return None
    if not isinstance(value, Sequence) or isinstance(value, (str, bytes)):
        raise DataIntegrityError(f"{_where(doc, field)}: expected a numeric vector")
    out: list[float] = []
    for item in value:
        if isinstance(item, bool) or not isinstance(item, (int, float)):
            raise DataIntegrityError(f"{_where(doc, field)}: expected a numeric vector")
        out.append(float(item))
    return out

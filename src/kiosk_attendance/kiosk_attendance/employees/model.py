from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from ..core.enums import EmployeeStatus


@dataclass(frozen=True)
class Employee:
    """Domain entity: a person who clocks in at the kiosk.

    Note: plain data only; persistence lives in the repositories.
    """

    id: str
    employee_id: str
    first_name: str
    surname: str
    position: str
    status: EmployeeStatus = EmployeeStatus.LOGGED_OUT
    department: Optional[str] = None
    last_login_time: Optional[datetime] = None
    pin: Optional[str] = None
    face_descriptor: Optional[Tuple[float, ...]] = None
    credential_id: Optional[str] = None
    public_key: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.surname}"

    @property
    def is_logged_in(self) -> bool:
        return self.status == EmployeeStatus.LOGGED_IN

    @property
    def has_face(self) -> bool:
        return bool(self.face_descriptor)


@dataclass(frozen=True)
class EmployeeProfile:
    """Admin-editable fields (everything except duty status and biometrics)."""

    employee_id: str
    first_name: str
    surname: str
    position: str
    department: Optional[str] = None
    pin: Optional[str] = None


@dataclass(frozen=True)
class DuplicateAssignment:
    """Integrity sweep finding: one credential value held by several employees."""

    field: str
    value: str
    employee_ids: Tuple[str, ...]

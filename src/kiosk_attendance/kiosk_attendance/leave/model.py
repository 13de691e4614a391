from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple

from ..core.enums import LeaveType, RequestStatus
from ..employees.model import Employee


def leave_days(start: date, end: date) -> int:
    """Inclusive day count: a leave starting and ending on the same day lasts 1 day."""

    return (end - start).days + 1


@dataclass(frozen=True)
class Leave:
    """Approved absence interval. Both bounds are inclusive calendar days."""

    id: str
    employee_ref: str
    start_date: date
    end_date: date
    type: LeaveType
    deleted: bool = False
    updated_at: Optional[datetime] = None

    @property
    def duration_days(self) -> int:
        return leave_days(self.start_date, self.end_date)

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class LeaveRequest:
    id: str
    employee_ref: str
    employee_name: str
    start_date: date
    end_date: date
    type: LeaveType
    status: RequestStatus = RequestStatus.PENDING
    reason: Optional[str] = None
    is_extension: bool = False
    original_leave_id: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING


@dataclass(frozen=True)
class AnnualLeaveSummary:
    year: int
    allowance: int
    days_taken: int

    @property
    def days_remaining(self) -> int:
        """May be negative; only ``display_remaining`` is floored."""

        return self.allowance - self.days_taken

    @property
    def display_remaining(self) -> int:
        return max(self.days_remaining, 0)


@dataclass(frozen=True)
class SelfServiceView:
    """What an employee sees after identifying at the kiosk for leave status."""

    employee: Employee
    current_leave: Optional[Leave]
    summary: AnnualLeaveSummary
    monthly_days: Tuple[int, ...]
    leaves: Tuple[Leave, ...] = ()
    requests: Tuple[LeaveRequest, ...] = ()

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional, Tuple

from ..core.enums import ClockEventKind, LogType


@dataclass(frozen=True)
class AttendanceLog:
    """Domain entity: one immutable clock event.

    Name and position are copied from the employee when the event happens and are
    never refreshed from the live record.
    """

    id: str
    employee_ref: str
    timestamp: datetime
    type: LogType
    employee_name: str
    employee_position: str
    notes: Optional[str] = None


@dataclass(frozen=True)
class ShiftWindow:
    start_at: datetime
    end_at: datetime

    @property
    def length(self) -> timedelta:
        return self.end_at - self.start_at


@dataclass(frozen=True)
class AttendancePair:
    clock_in: AttendanceLog
    clock_out: AttendanceLog

    @property
    def duration(self) -> timedelta:
        return self.clock_out.timestamp - self.clock_in.timestamp


@dataclass(frozen=True)
class PairedLogs:
    """Pairs most recent first; ``open_ins`` are clock-ins with no adjacent clock-out."""

    pairs: Tuple[AttendancePair, ...] = ()
    open_ins: Tuple[AttendanceLog, ...] = ()


@dataclass(frozen=True)
class ToggleResult:
    log: AttendanceLog
    kind: ClockEventKind = ClockEventKind.ON_TIME
    note: Optional[str] = None


@dataclass(frozen=True)
class ShiftTimers:
    """What the kiosk shows right after a clock event."""

    window: ShiftWindow
    progress: float
    remaining: timedelta
    overtime: timedelta = field(default=timedelta(0))

    @property
    def is_overtime(self) -> bool:
        return self.overtime > timedelta(0)


@dataclass(frozen=True)
class MonthStats:
    month: str
    days_worked: int
    hours_worked: float


@dataclass(frozen=True)
class LateArrival:
    employee_ref: str
    employee_name: str
    entries: Tuple[datetime, ...] = ()

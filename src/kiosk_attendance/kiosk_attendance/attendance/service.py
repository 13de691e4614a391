from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Iterable, Sequence

from ..common.datetime_utils import at_time_of_day, end_of_day, now_local, start_of_day
from ..core.enums import ClockEventKind, EmployeeStatus, LogType, NotificationType
from ..core.exceptions import ConcurrencyConflict, NotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..notifications.repository import NotificationRepository
from ..settings.model import Settings
from ..settings.repository import SettingsRepository
from .factory import AttendanceStrategyFactory
from .model import (
    AttendanceLog,
    AttendancePair,
    LateArrival,
    MonthStats,
    PairedLogs,
    ShiftTimers,
    ShiftWindow,
    ToggleResult,
)
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def shift_window(settings: Settings, login_time: datetime) -> ShiftWindow:
    """Shift bounds on the login's calendar day; an end at or before the start means the next day."""

    start_at = at_time_of_day(login_time, settings.shift_start)
    end_at = at_time_of_day(login_time, settings.shift_end)
    if end_at <= start_at:
        end_at += timedelta(days=1)
    return ShiftWindow(start_at=start_at, end_at=end_at)


def shift_progress(window: ShiftWindow, login_time: datetime, now: datetime) -> float:
    length = window.length.total_seconds()
    if length <= 0:
        return 1.0
    return min(max((now - login_time).total_seconds() / length, 0.0), 1.0)


def overtime_for_pair(settings: Settings, pair: AttendancePair) -> timedelta:
    """Time past the end of the shift the pair's clock-in belongs to."""

    end_at = shift_window(settings, pair.clock_in.timestamp).end_at
    return max(pair.clock_out.timestamp - end_at, timedelta(0))


def pair_logs(logs: Iterable[AttendanceLog]) -> PairedLogs:
    """Adjacent in->out pairs.

    A clock-in is consumed only by the event right after it; if that is another
    clock-in, the earlier one stays open.
    """

    ordered = sorted(logs, key=lambda log: log.timestamp)
    pairs: list[AttendancePair] = []
    open_ins: list[AttendanceLog] = []

    i = 0
    while i < len(ordered):
        current = ordered[i]
        if current.type == LogType.IN:
            following = ordered[i + 1] if i + 1 < len(ordered) else None
            if following is not None and following.type == LogType.OUT:
                pairs.append(AttendancePair(clock_in=current, clock_out=following))
                i += 2
                continue
            open_ins.append(current)
        i += 1

    pairs.reverse()
    return PairedLogs(pairs=tuple(pairs), open_ins=tuple(open_ins))


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        settings: SettingsRepository,
        notifications: NotificationRepository,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._settings = settings
        self._notifications = notifications
        self._factory = strategy_factory or AttendanceStrategyFactory()

    def _get_employee(self, doc_id: str) -> Employee:
        employee = self._employees.get_by_id(doc_id)
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def toggle(self, doc_id: str, *, now: datetime | None = None) -> ToggleResult:
        now = now or now_local()
        settings = self._settings.load()

        # Persisted status is re-read here and pinned by the batch precondition.
        employee = self._get_employee(doc_id)
        if employee.is_logged_in:
            log_type = LogType.OUT
            window = shift_window(settings, employee.last_login_time) if employee.last_login_time else None
            strategy = self._factory.for_clock_out(now=now, window=window)
            decision = strategy.decide_clock_out(now=now, window=window)
            status_op = self._employees.status_change_op(
                doc_id, expected=EmployeeStatus.LOGGED_IN, new_status=EmployeeStatus.LOGGED_OUT
            )
        else:
            log_type = LogType.IN
            window = shift_window(settings, now)
            strategy = self._factory.for_clock_in(now=now, window=window)
            decision = strategy.decide_clock_in(now=now, window=window)
            status_op = self._employees.status_change_op(
                doc_id,
                expected=EmployeeStatus.LOGGED_OUT,
                new_status=EmployeeStatus.LOGGED_IN,
                last_login_time=now,
            )

        ops = [
            status_op,
            self._attendance.append_op(
                employee_ref=doc_id,
                type=log_type,
                timestamp=now,
                employee_name=employee.full_name,
                employee_position=employee.position,
            ),
        ]
        if decision.kind == ClockEventKind.EARLY_CLOCK_OUT:
            ops.append(
                self._notifications.create_op(
                    type=NotificationType.EARLY_CLOCK_OUT,
                    message=f"{employee.full_name} clocked out early at {now:%H:%M} ({decision.note}).",
                    timestamp=now,
                    employee_ref=doc_id,
                    employee_name=employee.full_name,
                )
            )

        try:
            created = self._attendance.commit(ops)
        except ConcurrencyConflict:
            logger.warning("Toggle for employee %s lost a race; nothing was written", doc_id)
            raise ConcurrencyConflict("Your status changed on another terminal. Please try again.")

        log = AttendanceLog(
            id=created[0],
            employee_ref=doc_id,
            timestamp=now,
            type=log_type,
            employee_name=employee.full_name,
            employee_position=employee.position,
        )
        logger.info("Employee %s clocked %s at %s (%s)", doc_id, log_type.value, now.isoformat(), decision.kind.value)
        return ToggleResult(log=log, kind=decision.kind, note=decision.note)

    def shift_window(self, login_time: datetime) -> ShiftWindow:
        return shift_window(self._settings.load(), login_time)

    def shift_progress(self, login_time: datetime, *, now: datetime | None = None) -> float:
        now = now or now_local()
        return shift_progress(self.shift_window(login_time), login_time, now)

    def shift_timers(self, doc_id: str, *, now: datetime | None = None) -> ShiftTimers:
        now = now or now_local()
        employee = self._get_employee(doc_id)
        if not employee.is_logged_in or not employee.last_login_time:
            raise ValidationError("Employee is not clocked in")

        login = employee.last_login_time
        window = self.shift_window(login)
        return ShiftTimers(
            window=window,
            progress=shift_progress(window, login, now),
            remaining=max(window.end_at - now, timedelta(0)),
            overtime=max(now - window.end_at, timedelta(0)),
        )

    def overtime_for_pair(self, pair: AttendancePair) -> timedelta:
        return overtime_for_pair(self._settings.load(), pair)

    def history(self, doc_id: str) -> PairedLogs:
        return pair_logs(self._attendance.list_for_employee(doc_id))

    def month_stats(self, doc_id: str, month: str) -> MonthStats:
        try:
            first = datetime.strptime(month, "%Y-%m").date()
        except ValueError:
            raise ValidationError("Month must be YYYY-MM")

        pairs = [
            p for p in self.history(doc_id).pairs
            if (p.clock_in.timestamp.year, p.clock_in.timestamp.month) == (first.year, first.month)
        ]
        hours = sum(p.duration.total_seconds() for p in pairs) / 3600
        return MonthStats(month=month, days_worked=len(pairs), hours_worked=round(hours, 2))

    def late_arrivals(self, start: date, end: date) -> Sequence[LateArrival]:
        """Clock-ins after shift start, grouped per employee, most frequent first."""

        if end < start:
            raise ValidationError("End date must be on or after the start date")
        settings = self._settings.load()

        late: dict[str, list[datetime]] = defaultdict(list)
        names: dict[str, str] = {}
        for log in self._attendance.list_between(start_of_day(start), end_of_day(end), type=LogType.IN):
            window = shift_window(settings, log.timestamp)
            strategy = self._factory.for_clock_in(now=log.timestamp, window=window)
            if strategy.decide_clock_in(now=log.timestamp, window=window).kind == ClockEventKind.LATE:
                late[log.employee_ref].append(log.timestamp)
                names[log.employee_ref] = log.employee_name

        out = [
            LateArrival(employee_ref=ref, employee_name=names[ref], entries=tuple(sorted(entries, reverse=True)))
            for ref, entries in late.items()
        ]
        out.sort(key=lambda r: len(r.entries), reverse=True)
        return out

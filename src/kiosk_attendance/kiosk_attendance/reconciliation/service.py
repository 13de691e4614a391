from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from ..common.datetime_utils import end_of_day, now_local, start_of_day
from ..core.constants import AUTO_CLOCK_OUT_NOTE, LAST_DAILY_RUN_KEY
from ..core.enums import EmployeeStatus, LogType, NotificationType
from ..core.exceptions import DomainError
from ..attendance.repository import AttendanceRepository
from ..employees.model import DuplicateAssignment, Employee
from ..employees.repository import EmployeeRepository
from ..employees.service import EmployeeService
from ..notifications.repository import NotificationRepository
from .marker_store import MarkerStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconciliationReport:
    run_date: str
    skipped: bool = False
    completed: bool = False
    closed_employee_ids: Tuple[str, ...] = ()
    duplicates: Tuple[DuplicateAssignment, ...] = ()
    error: Optional[str] = None


class DailyReconciliationService:
    """Closes shifts left open on earlier days, at most once per calendar day.

    The last completed run date lives in a ``MarkerStore`` so the guard survives
    restarts. It is only advanced after the clock-out batch commits.
    """

    def __init__(
        self,
        employees: EmployeeRepository,
        attendance: AttendanceRepository,
        notifications: NotificationRepository,
        markers: MarkerStore,
        employee_service: EmployeeService,
    ):
        self._employees = employees
        self._attendance = attendance
        self._notifications = notifications
        self._markers = markers
        self._employee_service = employee_service

    def stale_employees(self, now: datetime) -> list[Employee]:
        midnight = start_of_day(now)
        stale = []
        for e in self._employees.list_by_status(EmployeeStatus.LOGGED_IN):
            if e.last_login_time is None:
                logger.warning("Employee %s is logged in without a login time; left as is", e.id)
                continue
            if e.last_login_time < midnight:
                stale.append(e)
        return stale

    def run(self, *, now: datetime | None = None) -> ReconciliationReport:
        """Never raises: failures are logged and reported so start-up carries on."""

        now = now or now_local()
        today = now.date().isoformat()

        try:
            last_run = self._markers.get(LAST_DAILY_RUN_KEY)
        except (DomainError, OSError) as e:
            logger.error("Cannot read the daily run marker; daily tasks will run on the next start: %s", e)
            return ReconciliationReport(run_date=today, error=str(e))
        if last_run == today:
            logger.info("Daily tasks already ran today (%s); skipping", today)
            return ReconciliationReport(run_date=today, skipped=True)

        logger.info("Running daily tasks for %s", today)
        closed: Tuple[str, ...] = ()
        error = None
        try:
            closed = self._close_missed_logouts(now)
            if not self._markers.compare_and_set(LAST_DAILY_RUN_KEY, last_run, today):
                logger.warning("Daily run marker was moved by another process during this run")
        except (DomainError, OSError) as e:
            error = str(e)
            logger.error("Daily reconciliation failed; it will be retried on the next start: %s", e)

        self._emit_daily_report(now)

        duplicates: Tuple[DuplicateAssignment, ...] = ()
        try:
            duplicates = tuple(self._employee_service.find_duplicate_assignments())
        except DomainError as e:
            logger.error("Integrity sweep failed: %s", e)
        if duplicates:
            logger.warning("Integrity sweep found %d duplicated credential assignment(s)", len(duplicates))

        return ReconciliationReport(
            run_date=today,
            completed=error is None,
            closed_employee_ids=closed,
            duplicates=duplicates,
            error=error,
        )

    def _close_missed_logouts(self, now: datetime) -> Tuple[str, ...]:
        stale = self.stale_employees(now)
        if not stale:
            return ()

        ops = []
        for e in stale:
            ops.append(
                self._employees.status_change_op(
                    e.id, expected=EmployeeStatus.LOGGED_IN, new_status=EmployeeStatus.LOGGED_OUT
                )
            )
            ops.append(
                self._attendance.append_op(
                    employee_ref=e.id,
                    type=LogType.OUT,
                    timestamp=end_of_day(e.last_login_time),
                    employee_name=e.full_name,
                    employee_position=e.position,
                    notes=AUTO_CLOCK_OUT_NOTE,
                )
            )
            ops.append(
                self._notifications.create_op(
                    type=NotificationType.MISSED_LOGOUT,
                    message="was automatically clocked out for yesterday due to a missed logout.",
                    timestamp=now,
                    employee_ref=e.id,
                    employee_name=e.full_name,
                )
            )

        self._attendance.commit(ops)
        logger.info("Automatically clocked out %d employee(s)", len(stale))
        return tuple(e.id for e in stale)

    def _emit_daily_report(self, now: datetime) -> None:
        op = self._notifications.create_op(
            type=NotificationType.DAILY_REPORT_READY,
            message="Yesterday's attendance report is ready to print.",
            timestamp=now,
        )
        try:
            self._notifications.commit([op])
        except DomainError as e:
            logger.error("Could not create the daily report notification: %s", e)

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Iterable, Optional, Sequence

from ..common.datetime_utils import iter_days, now_local
from ..common.validators import optional_text, require_date_range, require_non_empty
from ..core.constants import PURGE_ALL_ATTEMPTS
from ..core.enums import LeaveType, RequestStatus
from ..core.exceptions import ConcurrencyConflict, NotFoundError, ValidationError
from ..database.store import LatestOnly, Subscription
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..settings.repository import SettingsRepository
from .model import AnnualLeaveSummary, Leave, LeaveRequest, SelfServiceView
from .repository import LeaveRepository, LeaveRequestRepository

logger = logging.getLogger(__name__)


def parse_leave_type(value) -> LeaveType:
    if isinstance(value, LeaveType):
        return value
    try:
        return LeaveType(value)
    except ValueError:
        allowed = ", ".join(t.value for t in LeaveType)
        raise ValidationError(f"Leave type must be one of: {allowed}")


def vacation_days_taken(leaves: Iterable[Leave], year: int) -> int:
    """Vacation days of non-deleted leaves that start in ``year``."""

    return sum(
        leave.duration_days
        for leave in leaves
        if not leave.deleted and leave.type == LeaveType.VACATION and leave.start_date.year == year
    )


def monthly_leave_days(leaves: Iterable[Leave], year: int) -> tuple[int, ...]:
    """Vacation days falling in each month of ``year`` (index 0 is January)."""

    months = [0] * 12
    for leave in leaves:
        if leave.deleted or leave.type != LeaveType.VACATION:
            continue
        for day in iter_days(leave.start_date, leave.end_date):
            if day.year == year:
                months[day.month - 1] += 1
    return tuple(months)


def find_current_leave(leaves: Iterable[Leave], today: date) -> Optional[Leave]:
    current = [leave for leave in leaves if not leave.deleted and leave.covers(today)]
    return max(current, key=lambda leave: leave.start_date) if current else None


class LeaveService:
    """Use case: leave requests, approvals and the recycle bin."""

    def __init__(
        self,
        leaves: LeaveRepository,
        requests: LeaveRequestRepository,
        employees: EmployeeRepository,
        settings: SettingsRepository,
    ):
        self._leaves = leaves
        self._requests = requests
        self._employees = employees
        self._settings = settings

    def _get_employee(self, doc_id: str) -> Employee:
        employee = self._employees.get_by_id(doc_id)
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def _get_request(self, request_id: str) -> LeaveRequest:
        req = self._requests.get(request_id)
        if not req:
            raise NotFoundError("Leave request not found")
        return req

    # --- admin ---

    def add_leave(
        self,
        *,
        employee_ref: str,
        start_date: Optional[date],
        end_date: Optional[date],
        type,
        now: datetime | None = None,
    ) -> str:
        start_date, end_date = require_date_range(start_date, end_date)
        leave_type = parse_leave_type(type)
        self._get_employee(employee_ref)

        now = now or now_local()
        op = self._leaves.create_op(
            employee_ref=employee_ref, start_date=start_date, end_date=end_date, type=leave_type, now=now
        )
        leave_id = self._leaves.commit([op])[0]
        logger.info("Leave %s added for employee %s (%s to %s)", leave_id, employee_ref, start_date, end_date)
        return leave_id

    def list_active(self) -> Sequence[Leave]:
        return self._leaves.list_active()

    def list_pending_requests(self) -> Sequence[LeaveRequest]:
        return self._requests.list_pending()

    def leaves_overlapping(self, start: date, end: date) -> Sequence[Leave]:
        start, end = require_date_range(start, end)
        return self._leaves.list_overlapping(start, end)

    def approve(self, request_id: str, *, end_date: Optional[date] = None, now: datetime | None = None) -> str:
        """Approve a pending request; returns the id of the created or extended leave.

        The admin may shorten or lengthen the proposed end date before confirming.
        """

        req = self._get_request(request_id)
        if not req.is_pending:
            raise ValidationError(f"Request has already been {req.status.value}")
        _, end_date = require_date_range(req.start_date, end_date or req.end_date)

        now = now or now_local()
        if req.is_extension:
            if not req.original_leave_id:
                raise ValidationError("Extension request does not reference a leave")
            leave_op = self._leaves.extend_op(req.original_leave_id, end_date=end_date, now=now)
        else:
            leave_op = self._leaves.create_op(
                employee_ref=req.employee_ref, start_date=req.start_date, end_date=end_date, type=req.type, now=now
            )

        try:
            created = self._leaves.commit([leave_op, self._requests.decide_op(request_id, RequestStatus.APPROVED)])
        except ConcurrencyConflict:
            self._raise_decision_conflict(request_id, extending=req.original_leave_id if req.is_extension else None)

        leave_id = req.original_leave_id if req.is_extension else created[0]
        logger.info("Leave request %s approved (leave %s, ends %s)", request_id, leave_id, end_date)
        return leave_id

    def deny(self, request_id: str) -> None:
        req = self._get_request(request_id)
        if not req.is_pending:
            raise ValidationError(f"Request has already been {req.status.value}")
        try:
            self._requests.commit([self._requests.decide_op(request_id, RequestStatus.DENIED)])
        except ConcurrencyConflict:
            self._raise_decision_conflict(request_id)
        logger.info("Leave request %s denied", request_id)

    def _raise_decision_conflict(self, request_id: str, *, extending: Optional[str] = None) -> None:
        current = self._requests.get(request_id)
        if current is None:
            raise NotFoundError("Leave request not found")
        if not current.is_pending:
            raise ValidationError(f"Request has already been {current.status.value}")
        if extending is not None:
            raise ValidationError("The leave being extended was deleted")
        raise ConcurrencyConflict("Leave request changed while deciding. Please try again.")

    def soft_delete(self, leave_id: str, *, now: datetime | None = None) -> None:
        try:
            self._leaves.commit([self._leaves.soft_delete_op(leave_id, now=now or now_local())])
        except ConcurrencyConflict:
            raise NotFoundError("Leave not found or already deleted")
        logger.info("Leave %s moved to the recycle bin", leave_id)

    # --- recycle bin ---

    def recycle_bin(self) -> Sequence[Leave]:
        deleted = list(self._leaves.list_deleted())
        deleted.sort(key=lambda leave: leave.updated_at or datetime.min, reverse=True)
        return deleted

    def restore(self, ids: Iterable[str], *, now: datetime | None = None) -> int:
        ids = list(dict.fromkeys(ids))
        if not ids:
            return 0
        now = now or now_local()
        try:
            self._leaves.commit([self._leaves.restore_op(i, now=now) for i in ids])
        except ConcurrencyConflict:
            raise ConcurrencyConflict("Some selected leaves are no longer in the recycle bin. Nothing was restored.")
        logger.info("Restored %d leave(s) from the recycle bin", len(ids))
        return len(ids)

    def purge(self, ids: Iterable[str]) -> int:
        ids = list(dict.fromkeys(ids))
        if not ids:
            return 0
        try:
            self._leaves.commit([self._leaves.purge_op(i) for i in ids])
        except ConcurrencyConflict:
            raise ConcurrencyConflict("Some selected leaves are no longer in the recycle bin. Nothing was deleted.")
        logger.info("Permanently deleted %d leave(s)", len(ids))
        return len(ids)

    def purge_all(self) -> int:
        """Hard-delete whatever is in the recycle bin at commit time.

        The set is re-read on every attempt and each delete is conditioned on the
        leave still being soft-deleted, so a concurrent restore wins.
        """

        for attempt in range(1, PURGE_ALL_ATTEMPTS + 1):
            ids = [leave.id for leave in self._leaves.list_deleted()]
            if not ids:
                return 0
            try:
                self._leaves.commit([self._leaves.purge_op(i) for i in ids])
            except ConcurrencyConflict:
                logger.info("Recycle bin changed during purge (attempt %d/%d)", attempt, PURGE_ALL_ATTEMPTS)
                continue
            logger.info("Emptied recycle bin: %d leave(s) permanently deleted", len(ids))
            return len(ids)
        raise ConcurrencyConflict("Recycle bin kept changing. Please try again.")

    # --- self-service ---

    def submit_request(
        self,
        *,
        employee_ref: str,
        start_date: Optional[date],
        end_date: Optional[date],
        type,
        reason: Optional[str] = None,
        now: datetime | None = None,
    ) -> str:
        start_date, end_date = require_date_range(start_date, end_date)
        leave_type = parse_leave_type(type)
        employee = self._get_employee(employee_ref)

        op = self._requests.create_op(
            employee_ref=employee.id,
            employee_name=employee.full_name,
            start_date=start_date,
            end_date=end_date,
            type=leave_type,
            reason=optional_text(reason, "Reason"),
            now=now or now_local(),
        )
        request_id = self._requests.commit([op])[0]
        logger.info("Leave request %s submitted by employee %s", request_id, employee_ref)
        return request_id

    def submit_extension(
        self,
        *,
        employee_ref: str,
        new_end_date: Optional[date],
        reason: Optional[str],
        today: date | None = None,
        now: datetime | None = None,
    ) -> str:
        now = now or now_local()
        today = today or now.date()
        employee = self._get_employee(employee_ref)
        current = self.current_leave(employee_ref, today)
        if current is None:
            raise ValidationError("You are not currently on leave, so there is nothing to extend")
        if new_end_date is None or new_end_date <= current.end_date:
            raise ValidationError("New end date must be after the current end date")
        reason = require_non_empty(reason, "Reason")

        op = self._requests.create_op(
            employee_ref=employee.id,
            employee_name=employee.full_name,
            start_date=current.start_date,
            end_date=new_end_date,
            type=current.type,
            reason=reason,
            now=now,
            original_leave_id=current.id,
        )
        request_id = self._requests.commit([op])[0]
        logger.info("Extension request %s submitted for leave %s", request_id, current.id)
        return request_id

    def current_leave(self, employee_ref: str, today: date) -> Optional[Leave]:
        return find_current_leave(self._leaves.list_for_employee(employee_ref), today)

    def annual_summary(self, employee_ref: str, year: int) -> AnnualLeaveSummary:
        return AnnualLeaveSummary(
            year=year,
            allowance=self._settings.load().annual_leave_days,
            days_taken=vacation_days_taken(self._leaves.list_for_employee(employee_ref), year),
        )

    def monthly_distribution(self, employee_ref: str, year: int) -> tuple[int, ...]:
        return monthly_leave_days(self._leaves.list_for_employee(employee_ref), year)

    def self_service_view(self, employee: Employee, *, today: date | None = None) -> SelfServiceView:
        today = today or now_local().date()
        leaves = list(self._leaves.list_for_employee(employee.id))
        return SelfServiceView(
            employee=employee,
            current_leave=find_current_leave(leaves, today),
            summary=AnnualLeaveSummary(
                year=today.year,
                allowance=self._settings.load().annual_leave_days,
                days_taken=vacation_days_taken(leaves, today.year),
            ),
            monthly_days=monthly_leave_days(leaves, today.year),
            leaves=tuple(leaves),
            requests=tuple(self._requests.list_for_employee(employee.id)),
        )

    def watch_pending_requests(self, callback: Callable[[Sequence[LeaveRequest]], None]) -> Subscription:
        """Live pending list for the admin badge; stale deliveries are dropped."""

        return self._requests.subscribe_pending(LatestOnly(callback))

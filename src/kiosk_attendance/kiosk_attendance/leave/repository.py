from __future__ import annotations

from datetime import date, datetime
from typing import Callable, Optional, Protocol, Sequence

from ..core.enums import LeaveType, RequestStatus
from ..database.store import Subscription, WriteOp
from .model import Leave, LeaveRequest


class LeaveRepository(Protocol):
    """Leave intervals. Methods ending in ``_op`` build writes for an atomic batch."""

    def get(self, leave_id: str) -> Optional[Leave]:
        raise NotImplementedError

    def list_for_employee(self, employee_ref: str) -> Sequence[Leave]:
        """Non-deleted leaves of one employee."""

        raise NotImplementedError

    def list_active(self) -> Sequence[Leave]:
        raise NotImplementedError

    def list_deleted(self) -> Sequence[Leave]:
        raise NotImplementedError

    def list_overlapping(self, start: date, end: date) -> Sequence[Leave]:
        raise NotImplementedError

    def create_op(self, *, employee_ref: str, start_date: date, end_date: date, type: LeaveType, now: datetime) -> WriteOp:
        raise NotImplementedError

    def extend_op(self, leave_id: str, *, end_date: date, now: datetime) -> WriteOp:
        raise NotImplementedError

    def soft_delete_op(self, leave_id: str, *, now: datetime) -> WriteOp:
        raise NotImplementedError

    def restore_op(self, leave_id: str, *, now: datetime) -> WriteOp:
        raise NotImplementedError

    def purge_op(self, leave_id: str) -> WriteOp:
        """Hard delete, only while the leave is still soft-deleted."""

        raise NotImplementedError

    def commit(self, ops: Sequence[WriteOp]) -> list[str]:
        raise NotImplementedError


class LeaveRequestRepository(Protocol):
    def get(self, request_id: str) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_pending(self) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def list_for_employee(self, employee_ref: str) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def create_op(
        self,
        *,
        employee_ref: str,
        employee_name: str,
        start_date: date,
        end_date: date,
        type: LeaveType,
        reason: Optional[str],
        now: datetime,
        original_leave_id: Optional[str] = None,
    ) -> WriteOp:
        raise NotImplementedError

    def decide_op(self, request_id: str, status: RequestStatus) -> WriteOp:
        """Status change that only applies while the request is still pending."""

        raise NotImplementedError

    def commit(self, ops: Sequence[WriteOp]) -> list[str]:
        raise NotImplementedError

    def subscribe_pending(self, callback: Callable[[int, Sequence[LeaveRequest]], None]) -> Subscription:
        raise NotImplementedError

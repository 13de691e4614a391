from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LogType
from ..database.store import WriteOp
from .model import AttendanceLog


class AttendanceRepository(Protocol):
    """Append-only log store. Writes are returned as ops for the caller's batch."""

    def append_op(
        self,
        *,
        employee_ref: str,
        type: LogType,
        timestamp: datetime,
        employee_name: str,
        employee_position: str,
        notes: Optional[str] = None,
    ) -> WriteOp:
        raise NotImplementedError

    def list_for_employee(self, employee_ref: str) -> Sequence[AttendanceLog]:
        """All logs of one employee, oldest first."""

        raise NotImplementedError

    def list_between(self, start: datetime, end: datetime, *, type: Optional[LogType] = None) -> Sequence[AttendanceLog]:
        """Logs with ``start <= timestamp <= end``, oldest first."""

        raise NotImplementedError

    def commit(self, ops: Sequence[WriteOp]) -> list[str]:
        raise NotImplementedError

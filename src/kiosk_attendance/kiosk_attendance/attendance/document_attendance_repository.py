from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.constants import ATTENDANCE
from ..core.enums import LogType
from ..database.documents import decode_datetime, decode_enum, encode_datetime, optional_str, require_str
from ..database.store import CreateOp, DocumentStore, WriteOp, where
from .model import AttendanceLog
from .repository import AttendanceRepository


def to_log(doc: dict) -> AttendanceLog:
    return AttendanceLog(
        id=require_str(doc, "id"),
        employee_ref=require_str(doc, "employeeDocId"),
        timestamp=decode_datetime(doc, "timestamp"),
        type=decode_enum(LogType, doc, "type"),
        employee_name=optional_str(doc, "employeeName") or "",
        employee_position=optional_str(doc, "employeePosition") or "",
        notes=optional_str(doc, "notes"),
    )


def _chronological(logs: list[AttendanceLog]) -> list[AttendanceLog]:
    logs.sort(key=lambda log: log.timestamp)
    return logs


class DocumentAttendanceRepository(AttendanceRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

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
        body = {
            "employeeDocId": employee_ref,
            "timestamp": encode_datetime(timestamp),
            "type": type.value,
            "employeeName": employee_name,
            "employeePosition": employee_position,
        }
        if notes:
            body["notes"] = notes
        return CreateOp(ATTENDANCE, body)

    def list_for_employee(self, employee_ref: str) -> Sequence[AttendanceLog]:
        docs = self._store.query(ATTENDANCE, [where("employeeDocId", "==", employee_ref)])
        return _chronological([to_log(d) for d in docs])

    def list_between(self, start: datetime, end: datetime, *, type: Optional[LogType] = None) -> Sequence[AttendanceLog]:
        # ISO strings of naive local time sort the same way as the instants they encode.
        filters = [
            where("timestamp", ">=", encode_datetime(start)),
            where("timestamp", "<=", encode_datetime(end)),
        ]
        if type is not None:
            filters.append(where("type", "==", type.value))
        return _chronological([to_log(d) for d in self._store.query(ATTENDANCE, filters)])

    def commit(self, ops: Sequence[WriteOp]) -> list[str]:
        return self._store.batch_commit(ops)

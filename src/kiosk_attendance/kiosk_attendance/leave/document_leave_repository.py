from __future__ import annotations

from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..core.constants import LEAVE, LEAVE_REQUESTS
from ..core.enums import LeaveType, RequestStatus
from ..database.documents import (
    decode_bool,
    decode_date,
    decode_enum,
    encode_date,
    encode_datetime,
    optional_datetime,
    optional_str,
    require_str,
)
from ..database.store import CreateOp, DeleteOp, DocumentStore, Snapshot, Subscription, UpdateOp, WriteOp, where
from .model import Leave, LeaveRequest
from .repository import LeaveRepository, LeaveRequestRepository


def to_leave(doc: dict) -> Leave:
    return Leave(
        id=require_str(doc, "id"),
        employee_ref=require_str(doc, "employeeDocId"),
        start_date=decode_date(doc, "startDate"),
        end_date=decode_date(doc, "endDate"),
        type=decode_enum(LeaveType, doc, "type"),
        deleted=decode_bool(doc, "deleted"),
        updated_at=optional_datetime(doc, "updatedAt"),
    )


def to_leave_request(doc: dict) -> LeaveRequest:
    return LeaveRequest(
        id=require_str(doc, "id"),
        employee_ref=require_str(doc, "employeeDocId"),
        employee_name=optional_str(doc, "employeeName") or "",
        start_date=decode_date(doc, "startDate"),
        end_date=decode_date(doc, "endDate"),
        type=decode_enum(LeaveType, doc, "type"),
        status=decode_enum(RequestStatus, doc, "status"),
        reason=optional_str(doc, "reason"),
        is_extension=decode_bool(doc, "isExtension"),
        original_leave_id=optional_str(doc, "originalLeaveId"),
        created_at=optional_datetime(doc, "createdAt"),
    )


def _by_start_desc(leaves: list[Leave]) -> list[Leave]:
    leaves.sort(key=lambda leave: leave.start_date, reverse=True)
    return leaves


class DocumentLeaveRepository(LeaveRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def get(self, leave_id: str) -> Optional[Leave]:
        doc = self._store.get(LEAVE, leave_id)
        return to_leave(doc) if doc else None

    def list_for_employee(self, employee_ref: str) -> Sequence[Leave]:
        docs = self._store.query(LEAVE, [where("employeeDocId", "==", employee_ref), where("deleted", "!=", True)])
        return _by_start_desc([to_leave(d) for d in docs])

    def list_active(self) -> Sequence[Leave]:
        return _by_start_desc([to_leave(d) for d in self._store.query(LEAVE, [where("deleted", "!=", True)])])

    def list_deleted(self) -> Sequence[Leave]:
        return [to_leave(d) for d in self._store.query(LEAVE, [where("deleted", "==", True)])]

    def list_overlapping(self, start: date, end: date) -> Sequence[Leave]:
        docs = self._store.query(
            LEAVE,
            [where("startDate", "<=", encode_date(end)), where("deleted", "!=", True)],
        )
        return _by_start_desc([leave for leave in map(to_leave, docs) if leave.end_date >= start])

    def create_op(self, *, employee_ref: str, start_date: date, end_date: date, type: LeaveType, now: datetime) -> WriteOp:
        return CreateOp(
            LEAVE,
            {
                "employeeDocId": employee_ref,
                "startDate": encode_date(start_date),
                "endDate": encode_date(end_date),
                "type": type.value,
                "deleted": False,
                "updatedAt": encode_datetime(now),
            },
        )

    def extend_op(self, leave_id: str, *, end_date: date, now: datetime) -> WriteOp:
        return UpdateOp(
            LEAVE,
            leave_id,
            {"endDate": encode_date(end_date), "updatedAt": encode_datetime(now)},
            expect={"deleted": False},
        )

    def soft_delete_op(self, leave_id: str, *, now: datetime) -> WriteOp:
        return UpdateOp(LEAVE, leave_id, {"deleted": True, "updatedAt": encode_datetime(now)}, expect={"deleted": False})

    def restore_op(self, leave_id: str, *, now: datetime) -> WriteOp:
        return UpdateOp(LEAVE, leave_id, {"deleted": False, "updatedAt": encode_datetime(now)}, expect={"deleted": True})

    def purge_op(self, leave_id: str) -> WriteOp:
        return DeleteOp(LEAVE, leave_id, expect={"deleted": True})

    def commit(self, ops: Sequence[WriteOp]) -> list[str]:
        return self._store.batch_commit(ops)


class DocumentLeaveRequestRepository(LeaveRequestRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def get(self, request_id: str) -> Optional[LeaveRequest]:
        doc = self._store.get(LEAVE_REQUESTS, request_id)
        return to_leave_request(doc) if doc else None

    def list_pending(self) -> Sequence[LeaveRequest]:
        docs = self._store.query(LEAVE_REQUESTS, [where("status", "==", RequestStatus.PENDING.value)])
        return sorted((to_leave_request(d) for d in docs), key=lambda r: r.start_date)

    def list_for_employee(self, employee_ref: str) -> Sequence[LeaveRequest]:
        docs = self._store.query(LEAVE_REQUESTS, [where("employeeDocId", "==", employee_ref)])
        return sorted((to_leave_request(d) for d in docs), key=lambda r: r.start_date, reverse=True)

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
        body = {
            "employeeDocId": employee_ref,
            "employeeName": employee_name,
            "startDate": encode_date(start_date),
            "endDate": encode_date(end_date),
            "type": type.value,
            "status": RequestStatus.PENDING.value,
            "reason": reason,
            "isExtension": original_leave_id is not None,
            "createdAt": encode_datetime(now),
        }
        if original_leave_id is not None:
            body["originalLeaveId"] = original_leave_id
        return CreateOp(LEAVE_REQUESTS, body)

    def decide_op(self, request_id: str, status: RequestStatus) -> WriteOp:
        return UpdateOp(
            LEAVE_REQUESTS,
            request_id,
            {"status": status.value},
            expect={"status": RequestStatus.PENDING.value},
        )

    def commit(self, ops: Sequence[WriteOp]) -> list[str]:
        return self._store.batch_commit(ops)

    def subscribe_pending(self, callback: Callable[[int, Sequence[LeaveRequest]], None]) -> Subscription:
        def on_snapshot(snapshot: Snapshot) -> None:
            callback(snapshot.version, [to_leave_request(d) for d in snapshot.documents])

        return self._store.subscribe(LEAVE_REQUESTS, [where("status", "==", RequestStatus.PENDING.value)], on_snapshot)

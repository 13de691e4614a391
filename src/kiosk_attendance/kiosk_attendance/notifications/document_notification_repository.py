from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional, Sequence

from ..core.constants import NOTIFICATIONS, SYSTEM_SENDER
from ..core.enums import NotificationType
from ..database.documents import decode_bool, decode_datetime, decode_enum, encode_datetime, optional_str, require_str
from ..database.store import CreateOp, DocumentStore, Snapshot, Subscription, UpdateOp, WriteOp, where
from .model import Notification
from .repository import NotificationRepository


def to_notification(doc: dict) -> Notification:
    employee_ref = optional_str(doc, "employeeId")
    return Notification(
        id=require_str(doc, "id"),
        type=decode_enum(NotificationType, doc, "type"),
        timestamp=decode_datetime(doc, "timestamp"),
        message=optional_str(doc, "message") or "",
        employee_ref=None if employee_ref == SYSTEM_SENDER else employee_ref,
        employee_name=optional_str(doc, "employeeName"),
        read=decode_bool(doc, "read"),
    )


def _newest_first(items: Sequence[Notification]) -> list[Notification]:
    return sorted(items, key=lambda n: n.timestamp, reverse=True)


class DocumentNotificationRepository(NotificationRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def list_unread(self) -> Sequence[Notification]:
        return _newest_first([to_notification(d) for d in self._store.query(NOTIFICATIONS, [where("read", "==", False)])])

    def list_all(self) -> Sequence[Notification]:
        return _newest_first([to_notification(d) for d in self._store.query(NOTIFICATIONS)])

    def create_op(
        self,
        *,
        type: NotificationType,
        message: str,
        timestamp: datetime,
        employee_ref: Optional[str] = None,
        employee_name: Optional[str] = None,
    ) -> WriteOp:
        return CreateOp(
            NOTIFICATIONS,
            {
                "employeeId": employee_ref or SYSTEM_SENDER,
                "employeeName": employee_name or "System",
                "timestamp": encode_datetime(timestamp),
                "type": type.value,
                "message": message,
                "read": False,
            },
        )

    def mark_read_op(self, notification_id: str) -> WriteOp:
        return UpdateOp(NOTIFICATIONS, notification_id, {"read": True}, expect={})

    def commit(self, ops: Sequence[WriteOp]) -> list[str]:
        return self._store.batch_commit(ops)

    def subscribe_unread(self, callback: Callable[[int, Sequence[Notification]], None]) -> Subscription:
        def on_snapshot(snapshot: Snapshot) -> None:
            callback(snapshot.version, _newest_first([to_notification(d) for d in snapshot.documents]))

        return self._store.subscribe(NOTIFICATIONS, [where("read", "==", False)], on_snapshot)

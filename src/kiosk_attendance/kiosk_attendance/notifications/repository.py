from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional, Protocol, Sequence

from ..core.enums import NotificationType
from ..database.store import Subscription, WriteOp
from .model import Notification


class NotificationRepository(Protocol):
    def list_unread(self) -> Sequence[Notification]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Notification]:
        raise NotImplementedError

    def create_op(
        self,
        *,
        type: NotificationType,
        message: str,
        timestamp: datetime,
        employee_ref: Optional[str] = None,
        employee_name: Optional[str] = None,
    ) -> WriteOp:
        raise NotImplementedError

    def mark_read_op(self, notification_id: str) -> WriteOp:
        raise NotImplementedError

    def commit(self, ops: Sequence[WriteOp]) -> list[str]:
        raise NotImplementedError

    def subscribe_unread(self, callback: Callable[[int, Sequence[Notification]], None]) -> Subscription:
        """``callback(version, unread)`` on every change of the unread set."""

        raise NotImplementedError

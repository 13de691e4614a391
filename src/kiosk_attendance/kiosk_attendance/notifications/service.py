from __future__ import annotations

import logging
from typing import Callable, Iterable, Sequence

from ..core.exceptions import ConcurrencyConflict, NotFoundError
from ..database.store import LatestOnly, Subscription
from .model import Notification
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, notifications: NotificationRepository):
        self._notifications = notifications

    def list_unread(self) -> Sequence[Notification]:
        return self._notifications.list_unread()

    def list_all(self) -> Sequence[Notification]:
        return self._notifications.list_all()

    def mark_read(self, ids: Iterable[str]) -> int:
        ops = [self._notifications.mark_read_op(i) for i in dict.fromkeys(ids)]
        if not ops:
            return 0
        try:
            self._notifications.commit(ops)
        except ConcurrencyConflict:
            raise NotFoundError("One or more notifications no longer exist")
        logger.info("Marked %d notification(s) read", len(ops))
        return len(ops)

    def watch_unread(self, callback: Callable[[Sequence[Notification]], None]) -> Subscription:
        """Live unread list; deliveries older than one already seen are dropped."""

        return self._notifications.subscribe_unread(LatestOnly(callback))

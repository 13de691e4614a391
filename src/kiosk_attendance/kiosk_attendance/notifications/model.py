from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import NotificationType


@dataclass(frozen=True)
class Notification:
    """System-authored alert shown on the admin dashboard."""

    id: str
    type: NotificationType
    timestamp: datetime
    message: str
    employee_ref: Optional[str] = None
    employee_name: Optional[str] = None
    read: bool = False

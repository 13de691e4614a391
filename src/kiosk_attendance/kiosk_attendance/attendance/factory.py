from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from .model import ShiftWindow
from .strategies.base import AttendanceStrategy
from .strategies.early_strategy import EarlyClockOutStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    grace_minutes: int = 0

    def for_clock_in(self, *, now: datetime, window: Optional[ShiftWindow]) -> AttendanceStrategy:
        if not window:
            return NormalStrategy()
        if now <= window.start_at + timedelta(minutes=self.grace_minutes):
            return NormalStrategy()
        return LateStrategy()

    def for_clock_out(self, *, now: datetime, window: Optional[ShiftWindow]) -> AttendanceStrategy:
        if not window:
            return NormalStrategy()
        if now < window.end_at:
            return EarlyClockOutStrategy()
        return NormalStrategy()

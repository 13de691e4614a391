from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import ClockEventKind
from ..model import ShiftWindow
from .base import AttendanceStrategy, ClockDecision


class NormalStrategy(AttendanceStrategy):
    """On-time clock-in, normal clock-out."""

    def decide_clock_in(self, *, now: datetime, window: Optional[ShiftWindow]) -> ClockDecision:
        return ClockDecision(kind=ClockEventKind.ON_TIME)

    def decide_clock_out(self, *, now: datetime, window: Optional[ShiftWindow]) -> ClockDecision:
        return ClockDecision(kind=ClockEventKind.ON_TIME)

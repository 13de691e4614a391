from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...common.datetime_utils import format_duration
from ...core.enums import ClockEventKind
from ..model import ShiftWindow
from .base import AttendanceStrategy, ClockDecision


class EarlyClockOutStrategy(AttendanceStrategy):
    """Clock-out before the end of the shift the employee logged in for."""

    def decide_clock_in(self, *, now: datetime, window: Optional[ShiftWindow]) -> ClockDecision:
        return ClockDecision(kind=ClockEventKind.ON_TIME)

    def decide_clock_out(self, *, now: datetime, window: Optional[ShiftWindow]) -> ClockDecision:
        note = f"left {format_duration(window.end_at - now)} before shift end" if window else None
        return ClockDecision(kind=ClockEventKind.EARLY_CLOCK_OUT, note=note)

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...common.datetime_utils import format_duration
from ...core.enums import ClockEventKind
from ..model import ShiftWindow
from .base import AttendanceStrategy, ClockDecision


class LateStrategy(AttendanceStrategy):
    """Clock-in after the shift started."""

    def decide_clock_in(self, *, now: datetime, window: Optional[ShiftWindow]) -> ClockDecision:
        note = f"late by {format_duration(now - window.start_at)}" if window else None
        return ClockDecision(kind=ClockEventKind.LATE, note=note)

    def decide_clock_out(self, *, now: datetime, window: Optional[ShiftWindow]) -> ClockDecision:
        return ClockDecision(kind=ClockEventKind.ON_TIME)

from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import (
    DEFAULT_ANNUAL_LEAVE_DAYS,
    DEFAULT_DAILY_RATE,
    DEFAULT_OVERTIME_RATE,
    DEFAULT_SHIFT_END,
    DEFAULT_SHIFT_START,
)


@dataclass(frozen=True)
class Settings:
    """Singleton site configuration.

    ``shift_end`` may be earlier than ``shift_start``: the shift then crosses midnight.
    """

    shift_start: str = DEFAULT_SHIFT_START
    shift_end: str = DEFAULT_SHIFT_END
    daily_rate: float = DEFAULT_DAILY_RATE
    overtime_rate: float = DEFAULT_OVERTIME_RATE
    annual_leave_days: int = DEFAULT_ANNUAL_LEAVE_DAYS

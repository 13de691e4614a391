from __future__ import annotations

from .base import PayrollCalculator
from ...settings.model import Settings


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: a flat daily rate per worked shift plus an hourly overtime rate."""

    def base_pay(self, days_worked: int, settings: Settings) -> float:
        return round(max(days_worked, 0) * settings.daily_rate, 2)

    def overtime_pay(self, overtime_hours: float, settings: Settings) -> float:
        return round(max(overtime_hours, 0.0) * settings.overtime_rate, 2)

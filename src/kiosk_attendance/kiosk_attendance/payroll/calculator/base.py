from __future__ import annotations

from abc import ABC, abstractmethod

from ...settings.model import Settings


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def base_pay(self, days_worked: int, settings: Settings) -> float:
        raise NotImplementedError

    @abstractmethod
    def overtime_pay(self, overtime_hours: float, settings: Settings) -> float:
        raise NotImplementedError

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import ClockEventKind
from ..model import ShiftWindow


@dataclass(frozen=True)
class ClockDecision:
    kind: ClockEventKind
    note: Optional[str] = None


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we classify a clock event against the shift."""

    @abstractmethod
    def decide_clock_in(self, *, now: datetime, window: Optional[ShiftWindow]) -> ClockDecision:
        raise NotImplementedError

    @abstractmethod
    def decide_clock_out(self, *, now: datetime, window: Optional[ShiftWindow]) -> ClockDecision:
        raise NotImplementedError

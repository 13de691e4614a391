from datetime import datetime

from src.kiosk_attendance.kiosk_attendance.attendance.factory import AttendanceStrategyFactory
from src.kiosk_attendance.kiosk_attendance.attendance.model import ShiftWindow
from src.kiosk_attendance.kiosk_attendance.attendance.strategies.early_strategy import EarlyClockOutStrategy
from src.kiosk_attendance.kiosk_attendance.attendance.strategies.late_strategy import LateStrategy
from src.kiosk_attendance.kiosk_attendance.attendance.strategies.normal_strategy import NormalStrategy
from src.kiosk_attendance.kiosk_attendance.core.enums import ClockEventKind

WINDOW = ShiftWindow(start_at=datetime(2025, 1, 1, 8, 0), end_at=datetime(2025, 1, 1, 17, 0))


def test_factory_clock_in_on_time_within_grace():
    factory = AttendanceStrategyFactory(grace_minutes=5)
    strategy = factory.for_clock_in(now=datetime(2025, 1, 1, 8, 4, 59), window=WINDOW)

    assert isinstance(strategy, NormalStrategy)


def test_factory_clock_in_late_after_grace():
    factory = AttendanceStrategyFactory(grace_minutes=5)
    strategy = factory.for_clock_in(now=datetime(2025, 1, 1, 8, 6, 0), window=WINDOW)

    assert isinstance(strategy, LateStrategy)
    decision = strategy.decide_clock_in(now=datetime(2025, 1, 1, 8, 6, 0), window=WINDOW)
    assert decision.kind == ClockEventKind.LATE
    assert decision.note == "late by 00h 06m 00s"


def test_factory_clock_in_exactly_at_start_is_on_time():
    strategy = AttendanceStrategyFactory().for_clock_in(now=WINDOW.start_at, window=WINDOW)

    assert isinstance(strategy, NormalStrategy)


def test_factory_clock_out_before_end_is_early():
    now = datetime(2025, 1, 1, 16, 30)
    strategy = AttendanceStrategyFactory().for_clock_out(now=now, window=WINDOW)

    assert isinstance(strategy, EarlyClockOutStrategy)
    assert strategy.decide_clock_out(now=now, window=WINDOW).note == "left 00h 30m 00s before shift end"


def test_factory_without_window_is_normal():
    factory = AttendanceStrategyFactory()
    now = datetime(2025, 1, 1, 12, 0)

    assert isinstance(factory.for_clock_in(now=now, window=None), NormalStrategy)
    assert isinstance(factory.for_clock_out(now=now, window=None), NormalStrategy)

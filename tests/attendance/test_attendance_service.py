from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from src.kiosk_attendance.kiosk_attendance.core.enums import ClockEventKind, EmployeeStatus, LogType, NotificationType
from src.kiosk_attendance.kiosk_attendance.core.exceptions import ConcurrencyConflict, NotFoundError, ValidationError
from src.kiosk_attendance.kiosk_attendance.database.store import UpdateOp


def test_toggle_alternates_and_records_snapshot_fields(container, make_employee):
    doc_id = make_employee(first_name="Ana", surname="Silva", position="Cashier")
    service = container.attendance_service

    first = service.toggle(doc_id, now=datetime(2025, 3, 10, 7, 0))
    employee = container.employee_service.get(doc_id)
    assert first.log.type == LogType.IN
    assert first.kind == ClockEventKind.ON_TIME
    assert employee.status == EmployeeStatus.LOGGED_IN
    assert employee.last_login_time == datetime(2025, 3, 10, 7, 0)

    second = service.toggle(doc_id, now=datetime(2025, 3, 10, 18, 30))
    assert second.log.type == LogType.OUT
    assert second.kind == ClockEventKind.ON_TIME
    assert container.employee_service.get(doc_id).status == EmployeeStatus.LOGGED_OUT

    logs = container.attendance_repo.list_for_employee(doc_id)
    assert [l.type for l in logs] == [LogType.IN, LogType.OUT]
    assert {l.employee_name for l in logs} == {"Ana Silva"}
    assert {l.employee_position for l in logs} == {"Cashier"}


def test_late_clock_in_is_flagged(container, make_employee):
    doc_id = make_employee()

    result = container.attendance_service.toggle(doc_id, now=datetime(2025, 3, 10, 8, 0))

    assert result.kind == ClockEventKind.LATE
    assert result.note == "late by 00h 30m 00s"


def test_early_clock_out_creates_notification_in_same_batch(container, make_employee):
    doc_id = make_employee()
    service = container.attendance_service
    service.toggle(doc_id, now=datetime(2025, 3, 10, 7, 0))

    result = service.toggle(doc_id, now=datetime(2025, 3, 10, 16, 0))

    assert result.kind == ClockEventKind.EARLY_CLOCK_OUT
    unread = container.notification_service.list_unread()
    assert [n.type for n in unread] == [NotificationType.EARLY_CLOCK_OUT]
    assert unread[0].employee_ref == doc_id
    assert "16:00" in unread[0].message


def test_lost_race_writes_nothing(container, store, make_employee, monkeypatch):
    doc_id = make_employee()
    repo = container.attendance_repo
    original_commit = repo.commit

    def racing_commit(ops):
        # Another terminal clocks the employee in between our read and our write.
        store.batch_commit([UpdateOp("employees", doc_id, {"status": EmployeeStatus.LOGGED_IN.value})])
        return original_commit(ops)

    monkeypatch.setattr(repo, "commit", racing_commit)

    with pytest.raises(ConcurrencyConflict):
        container.attendance_service.toggle(doc_id, now=datetime(2025, 3, 10, 7, 0))

    assert repo.list_for_employee(doc_id) == []


def test_toggle_unknown_employee(container):
    with pytest.raises(NotFoundError):
        container.attendance_service.toggle("missing", now=datetime(2025, 3, 10, 7, 0))


def test_overnight_shift_timers(container, make_employee):
    container.settings_service.save(shift_start="22:00", shift_end="06:00")
    doc_id = make_employee()
    service = container.attendance_service
    service.toggle(doc_id, now=datetime(2025, 3, 10, 22, 30))

    timers = service.shift_timers(doc_id, now=datetime(2025, 3, 11, 5, 0))

    assert timers.window.end_at == datetime(2025, 3, 11, 6, 0)
    assert timers.remaining == timedelta(hours=1)
    assert timers.progress == pytest.approx(6.5 / 8)
    assert not timers.is_overtime

    late = service.shift_timers(doc_id, now=datetime(2025, 3, 11, 7, 0))
    assert late.overtime == timedelta(hours=1)
    assert late.progress == 1.0


def test_timers_require_clocked_in_employee(container, make_employee):
    with pytest.raises(ValidationError):
        container.attendance_service.shift_timers(make_employee(), now=datetime(2025, 3, 10, 9, 0))


def test_month_stats_counts_pairs(container, make_employee):
    doc_id = make_employee()
    service = container.attendance_service
    for start, end in [
        (datetime(2025, 2, 28, 8, 0), datetime(2025, 2, 28, 16, 0)),
        (datetime(2025, 3, 3, 8, 0), datetime(2025, 3, 3, 16, 0)),
        (datetime(2025, 3, 4, 8, 0), datetime(2025, 3, 4, 12, 30)),
    ]:
        service.toggle(doc_id, now=start)
        service.toggle(doc_id, now=end)

    stats = service.month_stats(doc_id, "2025-03")

    assert stats.days_worked == 2
    assert stats.hours_worked == 12.5
    with pytest.raises(ValidationError):
        service.month_stats(doc_id, "March")


def test_late_arrivals_grouped_by_employee(container, make_employee):
    ana = make_employee(first_name="Ana")
    ben = make_employee(first_name="Ben")
    service = container.attendance_service
    for doc_id, when in [
        (ana, datetime(2025, 3, 3, 8, 0)),
        (ana, datetime(2025, 3, 4, 9, 0)),
        (ben, datetime(2025, 3, 3, 7, 0)),
        (ben, datetime(2025, 3, 4, 7, 45)),
    ]:
        service.toggle(doc_id, now=when)
        service.toggle(doc_id, now=when + timedelta(hours=11))

    report = service.late_arrivals(date(2025, 3, 1), date(2025, 3, 31))

    assert [r.employee_ref for r in report] == [ana, ben]
    assert report[0].entries == (datetime(2025, 3, 4, 9, 0), datetime(2025, 3, 3, 8, 0))
    assert report[1].entries == (datetime(2025, 3, 4, 7, 45),)

from __future__ import annotations

from datetime import datetime

from src.kiosk_attendance.kiosk_attendance.core.constants import AUTO_CLOCK_OUT_NOTE, LAST_DAILY_RUN_KEY
from src.kiosk_attendance.kiosk_attendance.core.enums import EmployeeStatus, LogType, NotificationType
from src.kiosk_attendance.kiosk_attendance.core.exceptions import StoreUnavailable
from src.kiosk_attendance.kiosk_attendance.database.store import UpdateOp
from src.kiosk_attendance.kiosk_attendance.main import create_app
from src.kiosk_attendance.kiosk_attendance.reconciliation.file_marker_store import FileMarkerStore

TODAY = datetime(2025, 3, 10, 8, 0)


def test_missed_logout_is_closed_at_end_of_login_day(container, make_employee):
    stale = make_employee(first_name="Stale")
    fresh = make_employee(first_name="Fresh")
    container.attendance_service.toggle(stale, now=datetime(2025, 3, 9, 9, 0))
    container.attendance_service.toggle(fresh, now=datetime(2025, 3, 10, 7, 0))

    report = container.reconciliation_service.run(now=TODAY)

    assert report.completed and not report.skipped
    assert report.closed_employee_ids == (stale,)
    assert container.employee_service.get(stale).status == EmployeeStatus.LOGGED_OUT
    assert container.employee_service.get(fresh).status == EmployeeStatus.LOGGED_IN

    out = container.attendance_repo.list_for_employee(stale)[-1]
    assert out.type == LogType.OUT
    assert out.timestamp == datetime(2025, 3, 9, 23, 59, 59, 999000)
    assert out.notes == AUTO_CLOCK_OUT_NOTE

    types = sorted(n.type.value for n in container.notification_service.list_unread())
    assert types == [NotificationType.DAILY_REPORT_READY.value, NotificationType.MISSED_LOGOUT.value]
    assert container.markers.get(LAST_DAILY_RUN_KEY) == "2025-03-10"


def test_second_run_same_day_is_skipped(container, make_employee):
    doc_id = make_employee()
    container.attendance_service.toggle(doc_id, now=datetime(2025, 3, 9, 9, 0))
    container.reconciliation_service.run(now=TODAY)

    second = container.reconciliation_service.run(now=datetime(2025, 3, 10, 15, 0))

    assert second.skipped
    assert len(container.attendance_repo.list_for_employee(doc_id)) == 2
    assert len(container.notification_service.list_all()) == 2


def test_guard_survives_restart(container, tmp_path):
    container.reconciliation_service.run(now=TODAY)

    assert FileMarkerStore(tmp_path / "markers.json").get(LAST_DAILY_RUN_KEY) == "2025-03-10"


def test_failed_run_leaves_guard_unset(container, store, make_employee, monkeypatch):
    doc_id = make_employee()
    container.attendance_service.toggle(doc_id, now=datetime(2025, 3, 9, 9, 0))
    real_commit = store.batch_commit

    def offline(ops):
        raise StoreUnavailable("store offline")

    monkeypatch.setattr(store, "batch_commit", offline)
    failed = container.reconciliation_service.run(now=TODAY)

    assert not failed.completed
    assert failed.error == "store offline"
    assert container.markers.get(LAST_DAILY_RUN_KEY) is None
    assert container.employee_service.get(doc_id).status == EmployeeStatus.LOGGED_IN

    monkeypatch.setattr(store, "batch_commit", real_commit)
    retried = container.reconciliation_service.run(now=datetime(2025, 3, 10, 9, 0))

    assert retried.completed
    assert retried.closed_employee_ids == (doc_id,)


def test_logged_in_without_login_time_is_left_alone(container, store, make_employee):
    doc_id = make_employee()
    store.batch_commit([UpdateOp("employees", doc_id, {"status": EmployeeStatus.LOGGED_IN.value})])

    report = container.reconciliation_service.run(now=TODAY)

    assert report.closed_employee_ids == ()
    assert container.employee_service.get(doc_id).status == EmployeeStatus.LOGGED_IN


def test_duplicate_pins_are_reported(container, store, make_employee):
    a = make_employee(pin="1111")
    b = make_employee(pin="2222")
    store.batch_commit([UpdateOp("employees", b, {"pin": "1111"})])

    report = container.reconciliation_service.run(now=TODAY)

    assert [(d.field, d.employee_ids) for d in report.duplicates] == [("pin", tuple(sorted([a, b])))]


def test_malformed_logged_in_record_does_not_stop_daily_tasks(container, store, make_employee):
    doc_id = make_employee()
    store.batch_commit(
        [UpdateOp("employees", doc_id, {"status": EmployeeStatus.LOGGED_IN.value, "lastLoginTime": "not-a-date"})]
    )

    report = container.reconciliation_service.run(now=TODAY)

    assert not report.completed
    assert report.error
    assert container.markers.get(LAST_DAILY_RUN_KEY) is None
    types = [n.type for n in container.notification_service.list_all()]
    assert types == [NotificationType.DAILY_REPORT_READY]


def test_app_starts_despite_failing_daily_tasks(container, store, app_config, make_employee):
    doc_id = make_employee()
    store.batch_commit(
        [UpdateOp("employees", doc_id, {"status": EmployeeStatus.LOGGED_IN.value, "lastLoginTime": "not-a-date"})]
    )
    app_config["RUN_DAILY_TASKS_ON_START"] = True

    app = create_app(app_config, container=container)

    assert app.extensions["kiosk_container"] is container
    assert container.markers.get(LAST_DAILY_RUN_KEY) is None


def test_unreadable_marker_is_reported_not_raised(container, tmp_path, make_employee):
    doc_id = make_employee()
    container.attendance_service.toggle(doc_id, now=datetime(2025, 3, 9, 9, 0))
    (tmp_path / "markers.json").write_text("{broken", encoding="utf-8")

    report = container.reconciliation_service.run(now=TODAY)

    assert report.error and not report.completed and not report.skipped
    assert container.employee_service.get(doc_id).status == EmployeeStatus.LOGGED_IN


def test_file_marker_compare_and_set(tmp_path):
    markers = FileMarkerStore(tmp_path / "nested" / "markers.json")

    assert markers.compare_and_set("k", None, "2025-03-09")
    assert not markers.compare_and_set("k", None, "2025-03-10")
    assert markers.compare_and_set("k", "2025-03-09", "2025-03-10")
    assert markers.get("k") == "2025-03-10"

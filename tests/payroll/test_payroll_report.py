from __future__ import annotations

from datetime import date, datetime

import pytest

from src.kiosk_attendance.kiosk_attendance.core.exceptions import ValidationError


def test_payroll_report_totals(container, make_employee):
    ana = make_employee(first_name="Ana")
    ben = make_employee(first_name="Ben")
    attendance = container.attendance_service
    for doc_id, start, end in [
        (ana, datetime(2025, 3, 3, 7, 30), datetime(2025, 3, 3, 19, 30)),
        (ana, datetime(2025, 3, 4, 7, 30), datetime(2025, 3, 4, 18, 0)),
        (ben, datetime(2025, 3, 3, 7, 30), datetime(2025, 3, 3, 18, 0)),
    ]:
        attendance.toggle(doc_id, now=start)
        attendance.toggle(doc_id, now=end)
    # Open shift: not paid until it is closed.
    attendance.toggle(ben, now=datetime(2025, 3, 5, 7, 30))

    report = container.payroll_report_service.build_payroll_report(start=date(2025, 3, 1), end=date(2025, 3, 31))

    by_ref = {s["employee_ref"]: s for s in report.summary}
    assert by_ref[ana]["days_worked"] == 2
    assert by_ref[ana]["hours_worked"] == 22.5
    assert by_ref[ana]["overtime_hours"] == 1.5
    assert by_ref[ana]["total_pay"] == 35.0
    assert by_ref[ben]["days_worked"] == 1
    assert by_ref[ben]["total_pay"] == 10.0
    assert [s["employee_ref"] for s in report.summary] == [ana, ben]
    assert len(report.rows) == 3
    assert report.rows[0]["work_date"] == "2025-03-04"


def test_payroll_report_for_one_employee(container, make_employee):
    ana = make_employee(first_name="Ana")
    ben = make_employee(first_name="Ben")
    for doc_id in (ana, ben):
        container.attendance_service.toggle(doc_id, now=datetime(2025, 3, 3, 7, 30))
        container.attendance_service.toggle(doc_id, now=datetime(2025, 3, 3, 18, 0))

    report = container.payroll_report_service.build_payroll_report(
        start=date(2025, 3, 1), end=date(2025, 3, 31), employee_ref=ben
    )

    assert [s["employee_ref"] for s in report.summary] == [ben]


def test_payroll_report_rejects_reversed_range(container):
    with pytest.raises(ValidationError):
        container.payroll_report_service.build_payroll_report(start=date(2025, 3, 31), end=date(2025, 3, 1))

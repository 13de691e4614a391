from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import admin_required, date_field, to_jsonable
from ..core.enums import EmployeeStatus
from ..container import Container


def register(app: Flask, container: Container) -> None:
    attendance = container.attendance_service

    @app.get("/kiosk/employees/<doc_id>/timers")
    def kiosk_shift_timers(doc_id: str):
        return jsonify(to_jsonable(attendance.shift_timers(doc_id)))

    @app.get("/admin/attendance/live")
    @admin_required
    def admin_live_view():
        rows = []
        for e in container.employees_repo.list_by_status(EmployeeStatus.LOGGED_IN):
            row = {"id": e.id, "name": e.full_name, "position": e.position, "since": to_jsonable(e.last_login_time)}
            if e.last_login_time:
                row["progress"] = round(attendance.shift_progress(e.last_login_time), 3)
            rows.append(row)
        return jsonify(rows)

    @app.get("/admin/employees/<doc_id>/history")
    @admin_required
    def admin_employee_history(doc_id: str):
        paired = attendance.history(doc_id)
        return jsonify(
            {
                "pairs": [
                    {
                        **to_jsonable(p),
                        "duration": to_jsonable(p.duration),
                        "overtime": to_jsonable(attendance.overtime_for_pair(p)),
                    }
                    for p in paired.pairs
                ],
                "open": to_jsonable(paired.open_ins),
            }
        )

    @app.get("/admin/employees/<doc_id>/stats")
    @admin_required
    def admin_employee_month_stats(doc_id: str):
        return jsonify(to_jsonable(attendance.month_stats(doc_id, request.args.get("month", ""))))

    @app.get("/admin/reports/late-arrivals")
    @admin_required
    def admin_late_arrivals():
        start = date_field(request.args, "start")
        end = date_field(request.args, "end")
        return jsonify(to_jsonable(attendance.late_arrivals(start, end)))

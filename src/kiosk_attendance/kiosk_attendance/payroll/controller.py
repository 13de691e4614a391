from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import admin_required, date_field
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.get("/admin/reports/payroll")
    @admin_required
    def admin_payroll_report():
        report = container.payroll_report_service.build_payroll_report(
            start=date_field(request.args, "start"),
            end=date_field(request.args, "end"),
            employee_ref=request.args.get("employee") or None,
        )
        return jsonify({"rows": report.rows, "summary": report.summary})

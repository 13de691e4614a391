from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..attendance.model import AttendanceLog
from ..attendance.repository import AttendanceRepository
from ..attendance.service import overtime_for_pair, pair_logs
from ..common.datetime_utils import end_of_day, format_duration, start_of_day
from ..common.validators import require_date_range
from ..settings.repository import SettingsRepository
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]


class PayrollReportService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        settings: SettingsRepository,
        *,
        calculator: Optional[PayrollCalculator] = None,
    ):
        self._attendance = attendance
        self._settings = settings
        self._calculator = calculator or StandardPayrollCalculator()

    def build_payroll_report(
        self,
        *,
        start: date,
        end: date,
        employee_ref: Optional[str] = None,
    ) -> ReportData:
        """Completed shifts in ``[start, end]`` with per-employee pay.

        Only in/out pairs count; open shifts are left out until they are closed.
        """

        start, end = require_date_range(start, end)
        settings = self._settings.load()

        by_employee: dict[str, list[AttendanceLog]] = defaultdict(list)
        for log in self._attendance.list_between(start_of_day(start), end_of_day(end)):
            if employee_ref is None or log.employee_ref == employee_ref:
                by_employee[log.employee_ref].append(log)

        out_rows: list[dict] = []
        summary: list[dict] = []
        for ref, logs in by_employee.items():
            pairs = pair_logs(logs).pairs
            if not pairs:
                continue

            overtime_hours = 0.0
            worked_hours = 0.0
            for p in pairs:
                overtime = overtime_for_pair(settings, p)
                overtime_hours += overtime.total_seconds() / 3600
                worked_hours += p.duration.total_seconds() / 3600
                out_rows.append(
                    {
                        "employee_ref": ref,
                        "employee_name": p.clock_in.employee_name,
                        "work_date": p.clock_in.timestamp.strftime("%Y-%m-%d"),
                        "clock_in": p.clock_in.timestamp.strftime("%H:%M"),
                        "clock_out": p.clock_out.timestamp.strftime("%H:%M"),
                        "worked": format_duration(p.duration),
                        "overtime": format_duration(overtime),
                        "notes": p.clock_out.notes or "",
                    }
                )

            base_pay = self._calculator.base_pay(len(pairs), settings)
            overtime_pay = self._calculator.overtime_pay(overtime_hours, settings)
            summary.append(
                {
                    "employee_ref": ref,
                    "employee_name": pairs[0].clock_in.employee_name,
                    "days_worked": len(pairs),
                    "hours_worked": round(worked_hours, 2),
                    "overtime_hours": round(overtime_hours, 2),
                    "base_pay": base_pay,
                    "overtime_pay": overtime_pay,
                    "total_pay": round(base_pay + overtime_pay, 2),
                }
            )

        out_rows.sort(key=lambda r: (r["work_date"], r["clock_in"]), reverse=True)
        summary.sort(key=lambda s: s["total_pay"], reverse=True)
        return ReportData(rows=out_rows, summary=summary)

from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.http import admin_required, date_field, id_list, json_body, to_jsonable
from ..core.exceptions import AuthorizationError
from ..container import Container
from ..identity.controller import SELF_SERVICE_KEY


def register(app: Flask, container: Container) -> None:
    leave = container.leave_service

    def _self_service_employee() -> str:
        doc_id = session.get(SELF_SERVICE_KEY)
        if not doc_id:
            raise AuthorizationError("Verify your identity to manage leave")
        return doc_id

    def _names() -> dict[str, str]:
        return {e.id: e.full_name for e in container.employee_service.list()}

    # --- admin ---

    @app.get("/admin/leave")
    @admin_required
    def admin_list_leave():
        names = _names()
        return jsonify(
            [{**to_jsonable(lv), "employee_name": names.get(lv.employee_ref, "")} for lv in leave.list_active()]
        )

    @app.post("/admin/leave")
    @admin_required
    def admin_add_leave():
        data = json_body()
        leave_id = leave.add_leave(
            employee_ref=str(data.get("employee_id") or ""),
            start_date=date_field(data, "start_date"),
            end_date=date_field(data, "end_date"),
            type=data.get("type"),
        )
        return jsonify({"id": leave_id}), 201

    @app.delete("/admin/leave/<leave_id>")
    @admin_required
    def admin_delete_leave(leave_id: str):
        leave.soft_delete(leave_id)
        return "", 204

    @app.get("/admin/leave/requests")
    @admin_required
    def admin_pending_requests():
        return jsonify(to_jsonable(list(leave.list_pending_requests())))

    @app.post("/admin/leave/requests/<request_id>/approve")
    @admin_required
    def admin_approve_request(request_id: str):
        data = json_body()
        leave_id = leave.approve(request_id, end_date=date_field(data, "end_date", required=False))
        return jsonify({"leave_id": leave_id})

    @app.post("/admin/leave/requests/<request_id>/deny")
    @admin_required
    def admin_deny_request(request_id: str):
        leave.deny(request_id)
        return "", 204

    @app.get("/admin/leave/recycle-bin")
    @admin_required
    def admin_recycle_bin():
        names = _names()
        return jsonify(
            [{**to_jsonable(lv), "employee_name": names.get(lv.employee_ref, "")} for lv in leave.recycle_bin()]
        )

    @app.post("/admin/leave/recycle-bin/restore")
    @admin_required
    def admin_restore_leave():
        return jsonify({"restored": leave.restore(id_list(json_body()))})

    @app.post("/admin/leave/recycle-bin/purge")
    @admin_required
    def admin_purge_leave():
        data = json_body()
        if data.get("all"):
            return jsonify({"deleted": leave.purge_all()})
        return jsonify({"deleted": leave.purge(id_list(data))})

    @app.get("/admin/reports/on-leave")
    @admin_required
    def admin_on_leave_report():
        start = date_field(request.args, "start")
        end = date_field(request.args, "end")
        names = _names()
        rows = []
        for lv in leave.leaves_overlapping(start, end):
            rows.append(
                {
                    "employee_name": names.get(lv.employee_ref, ""),
                    "type": lv.type.value,
                    "start_date": lv.start_date.isoformat(),
                    "end_date": lv.end_date.isoformat(),
                    "days": lv.duration_days,
                }
            )
        rows.sort(key=lambda r: (r["start_date"], r["employee_name"]))
        return jsonify(rows)

    # --- kiosk self-service ---

    @app.post("/kiosk/leave/requests")
    def kiosk_submit_leave_request():
        data = json_body()
        request_id = leave.submit_request(
            employee_ref=_self_service_employee(),
            start_date=date_field(data, "start_date"),
            end_date=date_field(data, "end_date"),
            type=data.get("type"),
            reason=data.get("reason"),
        )
        return jsonify({"id": request_id}), 201

    @app.post("/kiosk/leave/extensions")
    def kiosk_submit_extension():
        data = json_body()
        request_id = leave.submit_extension(
            employee_ref=_self_service_employee(),
            new_end_date=date_field(data, "new_end_date"),
            reason=data.get("reason"),
        )
        return jsonify({"id": request_id}), 201

    @app.post("/kiosk/leave/done")
    def kiosk_leave_done():
        session.pop(SELF_SERVICE_KEY, None)
        return "", 204

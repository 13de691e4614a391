from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import admin_required, json_body, to_jsonable
from ..core.exceptions import ValidationError
from ..container import Container
from .model import Employee


def employee_json(e: Employee) -> dict:
    """Admin view of an employee; secrets and raw biometrics stay server-side."""

    return {
        "id": e.id,
        "employee_id": e.employee_id,
        "first_name": e.first_name,
        "surname": e.surname,
        "position": e.position,
        "department": e.department,
        "status": e.status.value,
        "last_login_time": to_jsonable(e.last_login_time),
        "has_pin": bool(e.pin),
        "has_face": e.has_face,
        "has_fingerprint": bool(e.credential_id),
    }


def _profile_fields(data: dict) -> dict:
    return {
        "employee_id": data.get("employee_id", ""),
        "first_name": data.get("first_name", ""),
        "surname": data.get("surname", ""),
        "position": data.get("position", ""),
        "department": data.get("department"),
        "pin": data.get("pin"),
    }


def register(app: Flask, container: Container) -> None:
    employees = container.employee_service

    @app.get("/admin/employees")
    @admin_required
    def admin_list_employees():
        return jsonify([employee_json(e) for e in employees.list()])

    @app.post("/admin/employees")
    @admin_required
    def admin_create_employee():
        doc_id = employees.create(**_profile_fields(json_body()))
        return jsonify(employee_json(employees.get(doc_id))), 201

    @app.get("/admin/employees/<doc_id>")
    @admin_required
    def admin_get_employee(doc_id: str):
        return jsonify(employee_json(employees.get(doc_id)))

    @app.put("/admin/employees/<doc_id>")
    @admin_required
    def admin_update_employee(doc_id: str):
        employees.update(doc_id, **_profile_fields(json_body()))
        return jsonify(employee_json(employees.get(doc_id)))

    @app.delete("/admin/employees/<doc_id>")
    @admin_required
    def admin_delete_employee(doc_id: str):
        employees.delete(doc_id)
        return "", 204

    @app.post("/admin/employees/<doc_id>/face")
    @admin_required
    def admin_enroll_face(doc_id: str):
        data = json_body()
        if "descriptor" in data:
            employees.enroll_face(doc_id, data["descriptor"])
        elif data.get("image"):
            employees.enroll_face_frame(doc_id, data["image"])
        else:
            raise ValidationError("Send either a face descriptor or an image")
        return jsonify(employee_json(employees.get(doc_id)))

    @app.post("/admin/employees/<doc_id>/fingerprint")
    @admin_required
    def admin_enroll_fingerprint(doc_id: str):
        created = employees.enroll_platform_credential(doc_id)
        return jsonify({"credential_id": created.credential_id, "employee": employee_json(employees.get(doc_id))})

    @app.get("/admin/employees/duplicates")
    @admin_required
    def admin_duplicate_assignments():
        findings = employees.find_duplicate_assignments()
        return jsonify(
            [
                {"field": f.field, "employee_ids": list(f.employee_ids)}
                for f in findings
            ]
        )

from __future__ import annotations

from flask import Flask, jsonify, session

from ..common.http import json_body, to_jsonable
from ..core.enums import AuthPurpose
from ..core.exceptions import ValidationError
from ..container import Container
from .model import SessionOutcome
from .service import VerificationSession

SELF_SERVICE_KEY = "self_service_employee"


def session_json(s: VerificationSession) -> dict:
    return {
        "session_id": s.id,
        "purpose": s.purpose.value,
        "offered_methods": [m.value for m in s.offered_methods],
        "pin_reason": s.pin_reason,
    }


def outcome_json(outcome: SessionOutcome) -> dict:
    v = outcome.verification
    data = {
        "matched": v.matched,
        "method": v.method.value,
        "confidence": round(v.confidence, 1) if v.confidence is not None else None,
        "reason": v.reason,
    }
    if v.employee is not None:
        data["employee"] = {
            "id": v.employee.id,
            "name": v.employee.full_name,
            "position": v.employee.position,
        }
    if outcome.toggle is not None:
        data["toggle"] = to_jsonable(outcome.toggle)
    if outcome.leave_view is not None:
        view = outcome.leave_view
        data["leave"] = {
            "current_leave": to_jsonable(view.current_leave),
            "days_taken": view.summary.days_taken,
            "days_remaining": view.summary.display_remaining,
            "allowance": view.summary.allowance,
            "monthly_days": list(view.monthly_days),
            "leaves": to_jsonable(view.leaves),
            "requests": to_jsonable(view.requests),
        }
    return data


def register(app: Flask, container: Container) -> None:
    resolver = container.identity_resolver

    def _remember(outcome: SessionOutcome) -> None:
        # Leave self-service calls that follow act for the identified employee.
        if outcome.matched and outcome.purpose == AuthPurpose.LEAVE_SELF_SERVICE:
            session[SELF_SERVICE_KEY] = outcome.verification.employee.id

    @app.post("/kiosk/sessions")
    def kiosk_open_session():
        data = json_body()
        s = resolver.open_session(data.get("purpose", AuthPurpose.ATTENDANCE.value))
        return jsonify(session_json(s)), 201

    @app.get("/kiosk/sessions/<session_id>")
    def kiosk_get_session(session_id: str):
        return jsonify(session_json(resolver.get_session(session_id)))

    @app.delete("/kiosk/sessions/<session_id>")
    def kiosk_close_session(session_id: str):
        resolver.get_session(session_id).close()
        return "", 204

    @app.post("/kiosk/sessions/<session_id>/face")
    def kiosk_face(session_id: str):
        s = resolver.get_session(session_id)
        data = json_body()
        if "descriptor" in data:
            outcome = s.verify_face_descriptor(data["descriptor"])
        elif data.get("image"):
            outcome = s.verify_face_image(data["image"])
        else:
            raise ValidationError("Send either a face descriptor or an image")
        _remember(outcome)
        return jsonify(outcome_json(outcome))

    @app.post("/kiosk/sessions/<session_id>/credential")
    def kiosk_credential(session_id: str):
        # The fingerprint reader is attached to this terminal and checks the
        # signed challenge itself; clients only trigger the prompt.
        outcome = resolver.get_session(session_id).verify_platform_credential()
        _remember(outcome)
        return jsonify(outcome_json(outcome))

    @app.post("/kiosk/sessions/<session_id>/pin")
    def kiosk_pin(session_id: str):
        data = json_body()
        outcome = resolver.get_session(session_id).verify_pin(str(data.get("pin") or ""))
        _remember(outcome)
        return jsonify(outcome_json(outcome))

    @app.post("/kiosk/pin/change")
    def kiosk_change_pin():
        data = json_body()
        container.employee_service.change_pin(
            str(data.get("employee_id") or ""),
            current_pin=str(data.get("current_pin") or ""),
            new_pin=str(data.get("new_pin") or ""),
        )
        return jsonify({"ok": True})

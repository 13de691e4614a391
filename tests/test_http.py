from __future__ import annotations

import pytest

from src.kiosk_attendance.kiosk_attendance.main import create_app


@pytest.fixture
def client(container, app_config):
    app = create_app(app_config, container=container)
    return app.test_client()


def login(client):
    resp = client.post("/admin/login", json={"username": "admin", "password": "admin-pass"})
    assert resp.status_code == 200


def test_admin_routes_require_login(client):
    assert client.get("/admin/employees").status_code == 403

    resp = client.post("/admin/login", json={"username": "admin", "password": "wrong"})
    assert resp.status_code == 401
    assert resp.get_json()["kind"] == "AuthenticationError"


def test_employee_json_hides_secrets(client):
    login(client)
    resp = client.post(
        "/admin/employees",
        json={"employee_id": "E1", "first_name": "Ana", "surname": "Silva", "position": "Cashier", "pin": "1234"},
    )
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["has_pin"] is True
    assert "pin" not in body

    dup = client.post(
        "/admin/employees",
        json={"employee_id": "E1", "first_name": "Ben", "surname": "Lee", "position": "Cook"},
    )
    assert dup.status_code == 400


def test_kiosk_pin_clock_in(client, container, authenticator, make_employee):
    authenticator.supported = False
    make_employee(pin="1234")

    opened = client.post("/kiosk/sessions", json={"purpose": "attendance"}).get_json()
    assert opened["offered_methods"] == ["face", "pin"]
    assert opened["pin_reason"] == "unsupported"

    resp = client.post(f"/kiosk/sessions/{opened['session_id']}/pin", json={"pin": "1234"})
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["matched"] is True
    assert body["toggle"]["log"]["type"] == "in"
    # Session is gone after the match.
    assert client.get(f"/kiosk/sessions/{opened['session_id']}").status_code == 404


def test_leave_self_service_then_admin_approval(client, authenticator, make_employee):
    authenticator.supported = False
    make_employee(pin="4321")

    assert client.post("/kiosk/leave/requests", json={}).status_code == 403

    opened = client.post("/kiosk/sessions", json={"purpose": "leaveStatus"}).get_json()
    verified = client.post(f"/kiosk/sessions/{opened['session_id']}/pin", json={"pin": "4321"}).get_json()
    assert verified["leave"]["days_remaining"] == 21

    bad_reason = client.post(
        "/kiosk/leave/requests",
        json={"start_date": "2030-04-01", "end_date": "2030-04-02", "type": "Vacation", "reason": 42},
    )
    assert bad_reason.status_code == 400

    created = client.post(
        "/kiosk/leave/requests",
        json={"start_date": "2030-04-01", "end_date": "2030-04-02", "type": "Vacation", "reason": "Trip"},
    )
    assert created.status_code == 201
    request_id = created.get_json()["id"]

    login(client)
    assert [r["id"] for r in client.get("/admin/leave/requests").get_json()] == [request_id]
    approved = client.post(f"/admin/leave/requests/{request_id}/approve", json={})
    assert approved.status_code == 200
    assert client.post(f"/admin/leave/requests/{request_id}/deny").status_code == 400
    assert len(client.get("/admin/leave").get_json()) == 1


def test_settings_round_trip(client):
    login(client)
    resp = client.put("/admin/settings", json={"shift_start": "08:00", "daily_rate": 15})
    assert resp.status_code == 200
    assert resp.get_json()["shift_start"] == "08:00"
    assert client.put("/admin/settings", json={"shift_end": "25:99"}).status_code == 400


def test_kiosk_fingerprint_ignores_client_supplied_ids(client, container, authenticator, make_employee):
    doc_id = make_employee()
    authenticator.next_id = b"\xde\xad\xbe\xef"
    container.employee_service.enroll_platform_credential(doc_id)
    opened = client.post("/kiosk/sessions", json={"purpose": "attendance"}).get_json()

    authenticator.next_error = "NotAllowedError"
    resp = client.post(f"/kiosk/sessions/{opened['session_id']}/credential", json={"credential_id": "deadbeef"})

    assert resp.status_code == 409
    assert resp.get_json()["kind"] == "UserCancelled"
    assert container.employee_service.get(doc_id).status.value == "Logged Out"
    assert client.post(f"/kiosk/sessions/{opened['session_id']}/credential/challenge").status_code == 404

    authenticator.next_error = None
    resp = client.post(f"/kiosk/sessions/{opened['session_id']}/credential")
    assert resp.get_json()["matched"] is True
    assert resp.get_json()["toggle"]["log"]["type"] == "in"

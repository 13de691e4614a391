from __future__ import annotations

import pytest

from src.kiosk_attendance.kiosk_attendance.core.exceptions import AuthorizationError, NotFoundError, ValidationError


def test_create_and_update(container, make_employee):
    doc_id = make_employee(first_name=" Ana ", department="  ")
    service = container.employee_service

    employee = service.get(doc_id)
    assert employee.first_name == "Ana"
    assert employee.department is None

    service.update(doc_id, employee_id="E900", first_name="Ana", surname="Costa", position="Manager", pin="1234")
    updated = service.get(doc_id)
    assert (updated.employee_id, updated.surname, updated.pin) == ("E900", "Costa", "1234")


def test_required_fields_and_pin_format(container):
    service = container.employee_service
    with pytest.raises(ValidationError):
        service.create(employee_id="E1", first_name="", surname="Silva", position="Cashier")
    with pytest.raises(ValidationError):
        service.create(employee_id="E1", first_name="Ana", surname="Silva", position="Cashier", pin="12")
    with pytest.raises(ValidationError):
        service.create(employee_id=7, first_name="Ana", surname="Silva", position="Cashier")
    with pytest.raises(ValidationError):
        service.create(employee_id="E1", first_name="Ana", surname="Silva", position="Cashier", department=["Front"])
    with pytest.raises(ValidationError):
        service.create(employee_id="E1", first_name="Ana", surname="Silva", position="Cashier", pin=1234)
    assert service.list() == []


def test_employee_id_and_pin_are_unique(container, make_employee):
    make_employee(employee_id="E1", pin="1234")
    other = make_employee(employee_id="E2")
    service = container.employee_service

    with pytest.raises(ValidationError):
        make_employee(employee_id="E1")
    with pytest.raises(ValidationError):
        make_employee(employee_id="E3", pin="1234")
    with pytest.raises(ValidationError):
        service.update(other, employee_id="E1", first_name="B", surname="C", position="D")


def test_change_pin(container, make_employee):
    doc_id = make_employee(pin="1234")
    make_employee(pin="5555")
    service = container.employee_service

    with pytest.raises(AuthorizationError):
        service.change_pin(doc_id, current_pin="0000", new_pin="4321")
    with pytest.raises(ValidationError):
        service.change_pin(doc_id, current_pin="1234", new_pin="5555")

    service.change_pin(doc_id, current_pin="1234", new_pin="4321")
    assert service.get(doc_id).pin == "4321"


def test_delete(container, make_employee):
    doc_id = make_employee()
    container.employee_service.delete(doc_id)

    with pytest.raises(NotFoundError):
        container.employee_service.get(doc_id)
    with pytest.raises(NotFoundError):
        container.employee_service.delete(doc_id)

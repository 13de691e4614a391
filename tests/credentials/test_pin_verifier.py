from __future__ import annotations

import pytest

from src.kiosk_attendance.kiosk_attendance.core.exceptions import AmbiguousMatch, ValidationError
from src.kiosk_attendance.kiosk_attendance.database.store import UpdateOp


def test_pin_matches_single_holder(container, make_employee):
    doc_id = make_employee(pin="1234")

    result = container.pin_verifier.verify("1234")

    assert result.matched
    assert result.employee.id == doc_id


def test_unknown_pin_is_no_match(container, make_employee):
    make_employee(pin="1234")

    result = container.pin_verifier.verify("9999")

    assert not result.matched
    assert result.reason == "Invalid PIN."


def test_malformed_pin_is_rejected(container):
    with pytest.raises(ValidationError):
        container.pin_verifier.verify("12a4")


def test_shared_pin_is_ambiguous(container, store, make_employee):
    make_employee(pin="1234")
    other = make_employee(pin="5678")
    # Simulate legacy data written around the uniqueness guard.
    store.batch_commit([UpdateOp("employees", other, {"pin": "1234"})])

    with pytest.raises(AmbiguousMatch):
        container.pin_verifier.verify("1234")

from __future__ import annotations

import pytest

from src.kiosk_attendance.kiosk_attendance.core.exceptions import NotFoundError, ValidationError
from src.kiosk_attendance.kiosk_attendance.credentials.face import FaceVerifier, euclidean_distance


def test_euclidean_distance():
    assert euclidean_distance([0.0, 0.0], [3.0, 4.0]) == pytest.approx(5.0)


def test_match_is_nearest_and_strictly_below_threshold(container, make_employee):
    near = make_employee(first_name="Near")
    far = make_employee(first_name="Far")
    container.employee_service.enroll_face(near, [0.1, 0.0, 0.0])
    container.employee_service.enroll_face(far, [0.4, 0.0, 0.0])

    result = container.face_verifier.verify([0.0, 0.0, 0.0])

    assert result.matched
    assert result.employee.id == near
    assert result.distance == pytest.approx(0.1)
    assert result.confidence == pytest.approx(90.0)


def test_distance_equal_to_threshold_is_no_match(container, make_employee):
    doc_id = make_employee()
    container.employee_service.enroll_face(doc_id, [0.5, 0.0])
    verifier = FaceVerifier(container.employees_repo, threshold=0.5)

    result = verifier.verify([0.0, 0.0])

    assert not result.matched
    assert "No match" in result.reason


def test_no_face_detected(container):
    result = container.face_verifier.verify(None)
    assert not result.matched
    assert result.reason == "No face detected."


def test_descriptors_of_other_length_are_skipped(container, make_employee):
    short = make_employee(first_name="Short")
    ok = make_employee(first_name="Ok")
    container.employee_service.enroll_face(short, [0.0, 0.0])
    container.employee_service.enroll_face(ok, [0.2, 0.0, 0.0])

    result = container.face_verifier.verify([0.0, 0.0, 0.0])

    assert result.employee.id == ok


def test_enroll_rejects_bad_descriptor_and_unknown_employee(container, make_employee):
    doc_id = make_employee()
    with pytest.raises(ValidationError):
        container.employee_service.enroll_face(doc_id, ["a", "b"])
    with pytest.raises(NotFoundError):
        container.employee_service.enroll_face("missing", [0.1])


def test_enroll_frame_uses_extractor(container, make_employee):
    doc_id = make_employee()
    container.employee_service.enroll_face_frame(doc_id, [0.3, 0.3])

    assert container.employee_service.get(doc_id).face_descriptor == (0.3, 0.3)
    with pytest.raises(ValidationError):
        container.employee_service.enroll_face_frame(doc_id, None)

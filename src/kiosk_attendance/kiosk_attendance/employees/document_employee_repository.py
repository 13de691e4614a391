from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.constants import EMPLOYEES
from ..core.enums import EmployeeStatus
from ..core.exceptions import ConcurrencyConflict, DataIntegrityError, NotFoundError, ValidationError
from ..database.documents import (
    decode_enum,
    encode_datetime,
    optional_datetime,
    optional_str,
    optional_vector,
    require_str,
)
from ..database.store import DocumentStore, UniqueFieldGuard, UpdateOp, WriteOp, CreateOp, DeleteOp, where
from .model import Employee, EmployeeProfile
from .repository import EmployeeRepository


def to_employee(doc: dict) -> Employee:
    face_data = doc.get("faceData")
    if face_data is not None and not isinstance(face_data, dict):
        raise DataIntegrityError(f"{doc.get('id')}.faceData: expected a map")
    descriptor = optional_vector(face_data or {}, "descriptor")

    return Employee(
        id=require_str(doc, "id"),
        employee_id=require_str(doc, "employeeId"),
        first_name=require_str(doc, "firstName"),
        surname=require_str(doc, "surname"),
        position=require_str(doc, "position"),
        status=decode_enum(EmployeeStatus, doc, "status") if doc.get("status") else EmployeeStatus.LOGGED_OUT,
        department=optional_str(doc, "department"),
        last_login_time=optional_datetime(doc, "lastLoginTime"),
        pin=optional_str(doc, "pin"),
        face_descriptor=tuple(descriptor) if descriptor else None,
        credential_id=optional_str(doc, "biometricCredentialId"),
        public_key=optional_str(doc, "biometricPublicKey"),
    )


def _profile_body(profile: EmployeeProfile) -> dict:
    return {
        "employeeId": profile.employee_id,
        "firstName": profile.first_name,
        "surname": profile.surname,
        "position": profile.position,
        "department": profile.department,
        "pin": profile.pin,
    }


class DocumentEmployeeRepository(EmployeeRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def get_by_id(self, doc_id: str) -> Optional[Employee]:
        doc = self._store.get(EMPLOYEES, doc_id)
        return to_employee(doc) if doc else None

    def list_all(self) -> Sequence[Employee]:
        employees = [to_employee(d) for d in self._store.query(EMPLOYEES)]
        employees.sort(key=lambda e: (e.first_name.lower(), e.surname.lower()))
        return employees

    def list_by_status(self, status: EmployeeStatus) -> Sequence[Employee]:
        return [to_employee(d) for d in self._store.query(EMPLOYEES, [where("status", "==", status.value)])]

    def find_by_pin(self, pin: str) -> Sequence[Employee]:
        return [to_employee(d) for d in self._store.query(EMPLOYEES, [where("pin", "==", pin)])]

    def find_by_employee_id(self, employee_id: str) -> Sequence[Employee]:
        return [to_employee(d) for d in self._store.query(EMPLOYEES, [where("employeeId", "==", employee_id)])]

    def list_with_face(self) -> Sequence[Employee]:
        docs = self._store.query(EMPLOYEES, [where("isFaceRegistered", "==", True)])
        return [e for e in (to_employee(d) for d in docs) if e.has_face]

    def list_with_credential(self) -> Sequence[Employee]:
        docs = self._store.query(EMPLOYEES, [where("biometricCredentialId", "!=", None)])
        return [e for e in (to_employee(d) for d in docs) if e.credential_id]

    def create(self, profile: EmployeeProfile) -> str:
        body = _profile_body(profile)
        body.update({"status": EmployeeStatus.LOGGED_OUT.value, "isFaceRegistered": False})
        ops: list[WriteOp] = [UniqueFieldGuard(EMPLOYEES, "employeeId", profile.employee_id)]
        if profile.pin:
            ops.append(UniqueFieldGuard(EMPLOYEES, "pin", profile.pin))
        ops.append(CreateOp(EMPLOYEES, body))
        return self._commit(ops, "Employee ID or PIN already in use")[0]

    def update_profile(self, doc_id: str, profile: EmployeeProfile) -> None:
        ops: list[WriteOp] = [UniqueFieldGuard(EMPLOYEES, "employeeId", profile.employee_id, owner_id=doc_id)]
        if profile.pin:
            ops.append(UniqueFieldGuard(EMPLOYEES, "pin", profile.pin, owner_id=doc_id))
        ops.append(UpdateOp(EMPLOYEES, doc_id, _profile_body(profile), expect={}))
        self._commit(ops, "Employee ID or PIN already in use", doc_id=doc_id)

    def delete(self, doc_id: str) -> None:
        self._store.batch_commit([DeleteOp(EMPLOYEES, doc_id)])

    def set_face_descriptor(self, doc_id: str, descriptor: Sequence[float]) -> None:
        fields = {"faceData": {"descriptor": [float(x) for x in descriptor]}, "isFaceRegistered": True}
        self._commit([UpdateOp(EMPLOYEES, doc_id, fields, expect={})], "Employee changed", doc_id=doc_id)

    def set_platform_credential(self, doc_id: str, *, credential_id: str, public_key: str) -> None:
        ops = [
            UniqueFieldGuard(EMPLOYEES, "biometricCredentialId", credential_id, owner_id=doc_id),
            UpdateOp(
                EMPLOYEES,
                doc_id,
                {"biometricCredentialId": credential_id, "biometricPublicKey": public_key},
                expect={},
            ),
        ]
        self._commit(ops, "This credential is already registered to another employee", doc_id=doc_id)

    def set_pin(self, doc_id: str, pin: str) -> None:
        ops = [
            UniqueFieldGuard(EMPLOYEES, "pin", pin, owner_id=doc_id),
            UpdateOp(EMPLOYEES, doc_id, {"pin": pin}, expect={}),
        ]
        self._commit(ops, "PIN already in use. Please choose another.", doc_id=doc_id)

    def status_change_op(
        self,
        doc_id: str,
        *,
        expected: EmployeeStatus,
        new_status: EmployeeStatus,
        last_login_time: Optional[datetime] = None,
    ) -> WriteOp:
        fields = {"status": new_status.value}
        if last_login_time is not None:
            fields["lastLoginTime"] = encode_datetime(last_login_time)
        return UpdateOp(EMPLOYEES, doc_id, fields, expect={"status": expected.value})

    def _commit(self, ops: list, conflict_message: str, *, doc_id: Optional[str] = None) -> list[str]:
        # A conflict on a missing employee reads better as "not found".
        try:
            return self._store.batch_commit(ops)
        except ConcurrencyConflict:
            if doc_id is not None and self._store.get(EMPLOYEES, doc_id) is None:
                raise NotFoundError("Employee not found")
            raise ValidationError(conflict_message)

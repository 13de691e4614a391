from __future__ import annotations

import logging
from collections import defaultdict
from typing import TYPE_CHECKING, Any, Optional, Sequence

from ..common.validators import optional_pin, optional_text, require_non_empty, require_pin
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import DuplicateAssignment, Employee, EmployeeProfile
from .repository import EmployeeRepository

if TYPE_CHECKING:
    from ..credentials.face import FaceVerifier
    from ..credentials.model import CreatedCredential
    from ..credentials.platform import PlatformCredentialVerifier

logger = logging.getLogger(__name__)


class EmployeeService:
    """Use case: manage employees (admin) and self-service PIN changes (kiosk)."""

    def __init__(
        self,
        employees: EmployeeRepository,
        *,
        face: Optional["FaceVerifier"] = None,
        platform: Optional["PlatformCredentialVerifier"] = None,
    ):
        self._employees = employees
        self._face = face
        self._platform = platform

    def get(self, doc_id: str) -> Employee:
        employee = self._employees.get_by_id(doc_id)
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def list(self) -> Sequence[Employee]:
        return self._employees.list_all()

    def _build_profile(
        self,
        *,
        employee_id: str,
        first_name: str,
        surname: str,
        position: str,
        department: Optional[str],
        pin: Optional[str],
    ) -> EmployeeProfile:
        return EmployeeProfile(
            employee_id=require_non_empty(employee_id, "Employee ID"),
            first_name=require_non_empty(first_name, "First name"),
            surname=require_non_empty(surname, "Surname"),
            position=require_non_empty(position, "Position"),
            department=optional_text(department, "Department"),
            pin=optional_pin(pin),
        )

    def _ensure_unique(self, profile: EmployeeProfile, *, own_id: Optional[str] = None) -> None:
        # Best-effort read check for a friendly message; the write itself is guarded too.
        if any(e.id != own_id for e in self._employees.find_by_employee_id(profile.employee_id)):
            raise ValidationError("Employee ID already in use")
        if profile.pin and any(e.id != own_id for e in self._employees.find_by_pin(profile.pin)):
            raise ValidationError("PIN already in use. Please choose another.")

    def create(
        self,
        *,
        employee_id: str,
        first_name: str,
        surname: str,
        position: str,
        department: Optional[str] = None,
        pin: Optional[str] = None,
    ) -> str:
        profile = self._build_profile(
            employee_id=employee_id,
            first_name=first_name,
            surname=surname,
            position=position,
            department=department,
            pin=pin,
        )
        self._ensure_unique(profile)
        doc_id = self._employees.create(profile)
        logger.info("Employee %s created (%s)", profile.employee_id, doc_id)
        return doc_id

    def update(
        self,
        doc_id: str,
        *,
        employee_id: str,
        first_name: str,
        surname: str,
        position: str,
        department: Optional[str] = None,
        pin: Optional[str] = None,
    ) -> None:
        self.get(doc_id)
        profile = self._build_profile(
            employee_id=employee_id,
            first_name=first_name,
            surname=surname,
            position=position,
            department=department,
            pin=pin,
        )
        self._ensure_unique(profile, own_id=doc_id)
        self._employees.update_profile(doc_id, profile)
        logger.info("Employee %s updated", doc_id)

    def delete(self, doc_id: str) -> None:
        self.get(doc_id)
        self._employees.delete(doc_id)
        logger.info("Employee %s deleted", doc_id)

    def change_pin(self, doc_id: str, *, current_pin: str, new_pin: str) -> None:
        employee = self.get(doc_id)
        if not employee.pin or employee.pin != current_pin:
            raise AuthorizationError("Current PIN is incorrect.")
        new_pin = require_pin(new_pin)
        if any(e.id != doc_id for e in self._employees.find_by_pin(new_pin)):
            raise ValidationError("New PIN is already in use. Choose another.")
        self._employees.set_pin(doc_id, new_pin)
        logger.info("Employee %s changed their PIN", doc_id)

    def find_duplicate_assignments(self) -> list[DuplicateAssignment]:
        """Integrity sweep: PINs or platform credentials held by more than one employee."""

        holders: dict[tuple[str, str], list[str]] = defaultdict(list)
        for e in self._employees.list_all():
            if e.pin:
                holders[("pin", e.pin)].append(e.id)
            if e.credential_id:
                holders[("credentialId", e.credential_id)].append(e.id)

        findings = [
            DuplicateAssignment(field=field, value=value, employee_ids=tuple(sorted(ids)))
            for (field, value), ids in holders.items()
            if len(ids) > 1
        ]
        for f in findings:
            # Never log the PIN itself.
            shown = "****" if f.field == "pin" else f.value
            logger.warning("Duplicate %s %s held by employees %s", f.field, shown, ", ".join(f.employee_ids))
        return findings

    # --- enrollment ---

    def enroll_face(self, doc_id: str, descriptor: Sequence[float]) -> None:
        self._require_face().enroll_descriptor(doc_id, descriptor)

    def enroll_face_frame(self, doc_id: str, frame: Any) -> None:
        self._require_face().enroll_frame(doc_id, frame)

    def enroll_platform_credential(self, doc_id: str) -> "CreatedCredential":
        if self._platform is None:
            raise ValidationError("Fingerprint enrollment is not configured")
        return self._platform.enroll(doc_id)

    def _require_face(self) -> "FaceVerifier":
        if self._face is None:
            raise ValidationError("Face enrollment is not configured")
        return self._face

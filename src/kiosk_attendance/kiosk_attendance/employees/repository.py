from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import EmployeeStatus
from ..database.store import WriteOp
from .model import Employee, EmployeeProfile


class EmployeeRepository(Protocol):
    """Repository interface for Employee.

    Note (DIP): services depend on this interface, not on a concrete store.
    Methods ending in ``_op`` build writes for a caller-owned atomic batch.
    """

    def get_by_id(self, doc_id: str) -> Optional[Employee]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Employee]:
        raise NotImplementedError

    def list_by_status(self, status: EmployeeStatus) -> Sequence[Employee]:
        raise NotImplementedError

    def find_by_pin(self, pin: str) -> Sequence[Employee]:
        raise NotImplementedError

    def find_by_employee_id(self, employee_id: str) -> Sequence[Employee]:
        raise NotImplementedError

    def list_with_face(self) -> Sequence[Employee]:
        raise NotImplementedError

    def list_with_credential(self) -> Sequence[Employee]:
        raise NotImplementedError

    def create(self, profile: EmployeeProfile) -> str:
        raise NotImplementedError

    def update_profile(self, doc_id: str, profile: EmployeeProfile) -> None:
        raise NotImplementedError

    def delete(self, doc_id: str) -> None:
        raise NotImplementedError

    def set_face_descriptor(self, doc_id: str, descriptor: Sequence[float]) -> None:
        raise NotImplementedError

    def set_platform_credential(self, doc_id: str, *, credential_id: str, public_key: str) -> None:
        raise NotImplementedError

    def set_pin(self, doc_id: str, pin: str) -> None:
        raise NotImplementedError

    def status_change_op(
        self,
        doc_id: str,
        *,
        expected: EmployeeStatus,
        new_status: EmployeeStatus,
        last_login_time: Optional[datetime] = None,
    ) -> WriteOp:
        raise NotImplementedError

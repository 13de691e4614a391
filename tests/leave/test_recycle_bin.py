from __future__ import annotations

from datetime import date, datetime

import pytest

from src.kiosk_attendance.kiosk_attendance.core.exceptions import ConcurrencyConflict, NotFoundError
from src.kiosk_attendance.kiosk_attendance.leave.document_leave_repository import DocumentLeaveRepository
from src.kiosk_attendance.kiosk_attendance.leave.service import LeaveService

NOW = datetime(2025, 3, 10, 9, 0)


def add(container, doc_id, day):
    return container.leave_service.add_leave(
        employee_ref=doc_id, start_date=date(2025, 3, day), end_date=date(2025, 3, day), type="Sick", now=NOW
    )


def test_soft_delete_restore_and_purge(container, make_employee):
    doc_id = make_employee()
    leave = container.leave_service
    a, b = add(container, doc_id, 1), add(container, doc_id, 2)

    leave.soft_delete(a, now=datetime(2025, 3, 10, 9, 0))
    leave.soft_delete(b, now=datetime(2025, 3, 10, 10, 0))
    assert [lv.id for lv in leave.recycle_bin()] == [b, a]
    assert leave.list_active() == []

    assert leave.restore([a]) == 1
    assert [lv.id for lv in leave.list_active()] == [a]

    assert leave.purge([b]) == 1
    assert container.leave_repo.get(b) is None
    assert leave.recycle_bin() == []


def test_soft_delete_twice_is_not_found(container, make_employee):
    a = add(container, make_employee(), 1)
    container.leave_service.soft_delete(a, now=NOW)

    with pytest.raises(NotFoundError):
        container.leave_service.soft_delete(a, now=NOW)


def test_restore_of_active_leave_changes_nothing(container, make_employee):
    doc_id = make_employee()
    a, b = add(container, doc_id, 1), add(container, doc_id, 2)
    container.leave_service.soft_delete(a, now=NOW)

    with pytest.raises(ConcurrencyConflict):
        container.leave_service.restore([a, b])
    assert [lv.id for lv in container.leave_service.recycle_bin()] == [a]


class RestoringLeaveRepository(DocumentLeaveRepository):
    """Restores one leave right after the first recycle-bin read, like a second admin would."""

    def __init__(self, store, restore_id):
        super().__init__(store)
        self._restore_id = restore_id

    def list_deleted(self):
        deleted = super().list_deleted()
        if self._restore_id is not None:
            self.commit([self.restore_op(self._restore_id, now=NOW)])
            self._restore_id = None
        return deleted


def test_purge_all_never_deletes_a_concurrently_restored_leave(container, store, make_employee):
    doc_id = make_employee()
    a, b = add(container, doc_id, 1), add(container, doc_id, 2)
    container.leave_service.soft_delete(a, now=NOW)
    container.leave_service.soft_delete(b, now=NOW)
    leave = LeaveService(
        RestoringLeaveRepository(store, b),
        container.leave_requests_repo,
        container.employees_repo,
        container.settings_repo,
    )

    assert leave.purge_all() == 1

    assert container.leave_repo.get(a) is None
    restored = container.leave_repo.get(b)
    assert restored is not None and not restored.deleted


def test_purge_all_on_empty_bin(container):
    assert container.leave_service.purge_all() == 0

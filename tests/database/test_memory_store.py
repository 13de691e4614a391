from __future__ import annotations

import pytest

from src.kiosk_attendance.kiosk_attendance.core.exceptions import ConcurrencyConflict
from src.kiosk_attendance.kiosk_attendance.database.store import (
    CreateOp,
    DeleteOp,
    LatestOnly,
    UniqueFieldGuard,
    UpdateOp,
    where,
)


def test_batch_commit_is_all_or_nothing(store):
    doc_id = store.create("employees", {"status": "Logged Out"})

    with pytest.raises(ConcurrencyConflict):
        store.batch_commit(
            [
                CreateOp("attendance", {"type": "in"}),
                UpdateOp("employees", doc_id, {"status": "Logged In"}, expect={"status": "Logged In"}),
            ]
        )

    assert store.query("attendance") == []
    assert store.get("employees", doc_id)["status"] == "Logged Out"


def test_update_with_expect_on_missing_document_conflicts(store):
    with pytest.raises(ConcurrencyConflict):
        store.batch_commit([UpdateOp("leave", "nope", {"deleted": False}, expect={})])


def test_delete_with_expect_requires_matching_field(store):
    doc_id = store.create("leave", {"deleted": False})

    with pytest.raises(ConcurrencyConflict):
        store.batch_commit([DeleteOp("leave", doc_id, expect={"deleted": True})])
    assert store.get("leave", doc_id) is not None


def test_unique_guard_ignores_owner(store):
    a = store.create("employees", {"pin": "1234"})
    store.create("employees", {"pin": "5678"})

    store.batch_commit([UniqueFieldGuard("employees", "pin", "1234", owner_id=a)])
    with pytest.raises(ConcurrencyConflict):
        store.batch_commit([UniqueFieldGuard("employees", "pin", "5678", owner_id=a)])


def test_query_range_filters_and_missing_fields(store):
    store.create("attendance", {"timestamp": "2025-03-09T10:00:00.000000"})
    store.create("attendance", {"timestamp": "2025-03-10T10:00:00.000000"})
    store.create("attendance", {})

    found = store.query("attendance", [where("timestamp", ">=", "2025-03-10")])
    assert len(found) == 1
    assert len(store.query("attendance", [where("timestamp", "!=", None)])) == 2


def test_subscribe_delivers_initial_and_changed_snapshots(store):
    seen = []
    sub = store.subscribe("notifications", [where("read", "==", False)], lambda s: seen.append(s))

    doc_id = store.create("notifications", {"read": False})
    store.create("employees", {"x": 1})
    store.update("notifications", doc_id, {"read": True})
    sub.unsubscribe()
    store.create("notifications", {"read": False})

    assert [len(s.documents) for s in seen] == [0, 1, 0]
    assert seen[0].version < seen[1].version < seen[2].version


def test_latest_only_drops_stale_versions():
    delivered = []
    gate = LatestOnly(delivered.append)

    assert gate(3, ["c"])
    assert not gate(2, ["b"])
    assert not gate(3, ["c again"])
    assert gate(4, ["d"])
    assert delivered == [["c"], ["d"]]

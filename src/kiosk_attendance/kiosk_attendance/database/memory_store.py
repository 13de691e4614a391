from __future__ import annotations

import copy
import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..core.exceptions import ConcurrencyConflict, NotFoundError
from .store import (
    CreateOp,
    DeleteOp,
    Document,
    Filter,
    Snapshot,
    SnapshotCallback,
    UniqueFieldGuard,
    UpdateOp,
    WriteOp,
    expectation_holds,
    matches,
    new_doc_id,
    strip_id,
    with_id,
)

logger = logging.getLogger(__name__)


@dataclass
class _Watch:
    collection: str
    filters: Sequence[Filter]
    callback: SnapshotCallback
    last: Optional[List[Document]] = None
    active: bool = True


class _MemorySubscription:
    def __init__(self, store: "InMemoryDocumentStore", watch: _Watch):
        self._store = store
        self._watch = watch

    def unsubscribe(self) -> None:
        self._store._remove_watch(self._watch)


class InMemoryDocumentStore:
    """Process-local document store.

    Every write goes through ``batch_commit`` so single writes and batches share the
    same all-or-nothing path. Subscribers are notified after the lock is released.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._data: Dict[str, Dict[str, dict]] = {}
        self._watches: List[_Watch] = []
        self._version = 0

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with self._lock:
            body = self._data.get(collection, {}).get(doc_id)
            return with_id(doc_id, copy.deepcopy(body)) if body is not None else None

    def query(self, collection: str, filters: Sequence[Filter] = ()) -> List[Document]:
        with self._lock:
            return self._select(self._data, collection, filters)

    def create(self, collection: str, data: Mapping[str, Any], doc_id: Optional[str] = None) -> str:
        return self.batch_commit([CreateOp(collection, data, doc_id)])[0]

    def update(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None:
        with self._lock:
            if doc_id not in self._data.get(collection, {}):
                raise NotFoundError(f"{collection}/{doc_id} does not exist")
            self.batch_commit([UpdateOp(collection, doc_id, fields)])

    def delete(self, collection: str, doc_id: str) -> None:
        self.batch_commit([DeleteOp(collection, doc_id)])

    def batch_commit(self, ops: Sequence[WriteOp]) -> List[str]:
        with self._lock:
            staged = {name: dict(docs) for name, docs in self._data.items()}
            created: list[str] = []
            touched: set[str] = set()

            for op in ops:
                docs = staged.setdefault(op.collection, {})
                if isinstance(op, UniqueFieldGuard):
                    for doc_id, body in docs.items():
                        if body.get(op.field) == op.value and doc_id != op.owner_id:
                            raise ConcurrencyConflict(
                                f"{op.collection}.{op.field} is already held by another document"
                            )
                elif isinstance(op, CreateOp):
                    doc_id = op.doc_id or new_doc_id()
                    if doc_id in docs:
                        raise ConcurrencyConflict(f"{op.collection}/{doc_id} already exists")
                    docs[doc_id] = copy.deepcopy(strip_id(op.data))
                    created.append(doc_id)
                    touched.add(op.collection)
                elif isinstance(op, UpdateOp):
                    current = docs.get(op.doc_id)
                    if not expectation_holds(current, op.expect):
                        raise ConcurrencyConflict(f"{op.collection}/{op.doc_id} changed or vanished")
                    merged = dict(current)
                    merged.update(copy.deepcopy(strip_id(op.fields)))
                    docs[op.doc_id] = merged
                    touched.add(op.collection)
                elif isinstance(op, DeleteOp):
                    current = docs.get(op.doc_id)
                    if op.expect is not None and not expectation_holds(current, op.expect):
                        raise ConcurrencyConflict(f"{op.collection}/{op.doc_id} changed or vanished")
                    if current is not None:
                        del docs[op.doc_id]
                        touched.add(op.collection)
                else:
                    raise TypeError(f"Unsupported write op: {op!r}")

            self._data = staged
            self._version += 1
            pending = self._collect_deliveries(touched)

        self._deliver(pending)
        return created

    def subscribe(self, collection: str, filters: Sequence[Filter], callback: SnapshotCallback) -> _MemorySubscription:
        watch = _Watch(collection=collection, filters=tuple(filters), callback=callback)
        with self._lock:
            self._watches.append(watch)
            pending = self._collect_deliveries({collection}, only=[watch])
        self._deliver(pending)
        return _MemorySubscription(self, watch)

    def _remove_watch(self, watch: _Watch) -> None:
        with self._lock:
            watch.active = False
            if watch in self._watches:
                self._watches.remove(watch)

    @staticmethod
    def _select(data: Dict[str, Dict[str, dict]], collection: str, filters: Sequence[Filter]) -> List[Document]:
        return [
            with_id(doc_id, copy.deepcopy(body))
            for doc_id, body in data.get(collection, {}).items()
            if matches(body, filters)
        ]

    def _collect_deliveries(self, touched: set, only: Optional[List[_Watch]] = None):
        pending = []
        for watch in only if only is not None else self._watches:
            if watch.collection not in touched:
                continue
            current = self._select(self._data, watch.collection, watch.filters)
            if watch.last is not None and watch.last == current:
                continue
            watch.last = current
            pending.append((watch, Snapshot(version=self._version, documents=current)))
        return pending

    @staticmethod
    def _deliver(pending) -> None:
        for watch, snapshot in pending:
            if not watch.active:
                continue
            try:
                watch.callback(snapshot)
            except Exception:
                logger.exception("Subscriber callback failed for collection %s", watch.collection)

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Mapping, Optional, Protocol, Sequence, Union

Document = dict


@dataclass(frozen=True)
class Filter:
    """Simple equality/range predicate on a top-level document field."""

    field: str
    op: str
    value: Any

    OPS = ("==", "!=", "<", "<=", ">", ">=")

    def __post_init__(self):
        if self.op not in self.OPS:
            raise ValueError(f"Unsupported filter operator: {self.op!r}")


def where(field_name: str, op: str, value: Any) -> Filter:
    return Filter(field_name, op, value)


@dataclass(frozen=True)
class CreateOp:
    collection: str
    data: Mapping[str, Any]
    doc_id: Optional[str] = None


@dataclass(frozen=True)
class UpdateOp:
    """Merge ``fields`` into an existing document.

    ``expect`` holds field values that must still be current at commit time.
    """

    collection: str
    doc_id: str
    fields: Mapping[str, Any]
    expect: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True)
class DeleteOp:
    collection: str
    doc_id: str
    expect: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True)
class UniqueFieldGuard:
    """Precondition: no document other than ``owner_id`` holds ``field == value``."""

    collection: str
    field: str
    value: Any
    owner_id: Optional[str] = None


WriteOp = Union[CreateOp, UpdateOp, DeleteOp, UniqueFieldGuard]


@dataclass(frozen=True)
class Snapshot:
    """Current matching set delivered to a subscriber."""

    version: int
    documents: List[Document] = field(default_factory=list)


SnapshotCallback = Callable[[Snapshot], None]


class Subscription(Protocol):
    def unsubscribe(self) -> None:
        raise NotImplementedError


class DocumentStore(Protocol):
    """What the services need from the document store.

    Lưu ý (DIP): services depend on this interface only; the in-memory and MySQL
    backends both implement it.
    """

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        raise NotImplementedError

    def query(self, collection: str, filters: Sequence[Filter] = ()) -> List[Document]:
        raise NotImplementedError

    def create(self, collection: str, data: Mapping[str, Any], doc_id: Optional[str] = None) -> str:
        raise NotImplementedError

    def update(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None:
        raise NotImplementedError

    def delete(self, collection: str, doc_id: str) -> None:
        raise NotImplementedError

    def batch_commit(self, ops: Sequence[WriteOp]) -> List[str]:
        """Apply all ops or none. Returns the ids of created documents, in order."""

        raise NotImplementedError

    def subscribe(self, collection: str, filters: Sequence[Filter], callback: SnapshotCallback) -> Subscription:
        raise NotImplementedError


def new_doc_id() -> str:
    return uuid.uuid4().hex


def matches(doc: Mapping[str, Any], filters: Iterable[Filter]) -> bool:
    """Evaluate filters against a document; a missing field compares as None."""

    for f in filters:
        actual = doc.get(f.field)
        if f.op == "==":
            ok = actual == f.value
        elif f.op == "!=":
            ok = actual != f.value
        else:
            if actual is None or f.value is None:
                return False
            try:
                if f.op == "<":
                    ok = actual < f.value
                elif f.op == "<=":
                    ok = actual <= f.value
                elif f.op == ">":
                    ok = actual > f.value
                else:
                    ok = actual >= f.value
            except TypeError:
                ok = False
        if not ok:
            return False
    return True


def expectation_holds(doc: Optional[Mapping[str, Any]], expect: Optional[Mapping[str, Any]]) -> bool:
    if doc is None:
        return False
    if not expect:
        return True
    return all(doc.get(k) == v for k, v in expect.items())


def with_id(doc_id: str, body: Mapping[str, Any]) -> Document:
    out = dict(body)
    out["id"] = doc_id
    return out


def strip_id(data: Mapping[str, Any]) -> dict:
    return {k: v for k, v in data.items() if k != "id"}


class LatestOnly:
    """Wraps a ``callback(items)`` so a late delivery never rolls a live view back.

    Called as ``gate(version, items)``; anything not newer than the last forwarded
    version is dropped.
    """

    def __init__(self, callback: Callable[[Any], None]):
        self._callback = callback
        self._lock = threading.Lock()
        self._version = -1

    @property
    def version(self) -> int:
        return self._version

    def __call__(self, version: int, items: Any) -> bool:
        with self._lock:
            if version <= self._version:
                return False
            self._version = version
        self._callback(items)
        return True

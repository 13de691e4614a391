from __future__ import annotations

import logging
import re
import threading
from typing import Any, List, Mapping, Optional, Sequence

import mysql.connector

from ..core.constants import DEFAULT_POLL_SECONDS
from ..core.exceptions import ConcurrencyConflict, DomainError, NotFoundError
from .connection import DatabaseConnection
from .mysql_base import db_cursor, dump_json_body, fetchall, fetchone, load_json_body
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

_FIELD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _json_path(field: str) -> str:
    if not _FIELD_RE.match(field):
        raise ValueError(f"Unsupported field name: {field!r}")
    return f'$."{field}"'


class _PollingSubscription:
    """Re-runs the query every ``interval`` seconds and delivers when the set changes."""

    def __init__(self, store: "MySQLDocumentStore", collection: str, filters: Sequence[Filter],
                 callback: SnapshotCallback, interval: float):
        self._store = store
        self._collection = collection
        self._filters = tuple(filters)
        self._callback = callback
        self._interval = interval
        self._stop = threading.Event()
        self._version = 0
        self._last: Optional[List[Document]] = None
        self._thread = threading.Thread(target=self._run, name=f"watch-{collection}", daemon=True)
        self._thread.start()

    def _poll_once(self) -> None:
        current = self._store.query(self._collection, self._filters)
        current.sort(key=lambda d: d["id"])
        if self._last is not None and current == self._last:
            return
        self._last = current
        self._version += 1
        self._callback(Snapshot(version=self._version, documents=current))

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                self._poll_once()
            except DomainError as e:
                logger.warning("Subscription poll on %s failed: %s", self._collection, e)
            except Exception:
                logger.exception("Subscriber callback failed for collection %s", self._collection)
            self._stop.wait(self._interval)

    def unsubscribe(self) -> None:
        self._stop.set()


class MySQLDocumentStore:
    """Document store on a single MySQL table with a JSON body per document.

    Each ``batch_commit`` runs in one transaction; preconditions read their rows with
    ``SELECT ... FOR UPDATE`` so concurrent commits on the same documents serialize.
    """

    def __init__(self, conn_factory: DatabaseConnection, *, poll_seconds: float = DEFAULT_POLL_SECONDS):
        self._conn_factory = conn_factory
        self._poll_seconds = float(poll_seconds)

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT doc_id, body FROM documents WHERE collection=%s AND doc_id=%s",
                (collection, doc_id),
            )
            row = fetchone(cur)
            if not row:
                return None
            return with_id(row["doc_id"], load_json_body(row["body"]))

    def query(self, collection: str, filters: Sequence[Filter] = ()) -> List[Document]:
        clauses = ["collection=%s"]
        params: list[object] = [collection]

        # Push plain text equality down to SQL; everything is re-checked in Python below.
        for f in filters:
            if f.op == "==" and isinstance(f.value, str):
                clauses.append("JSON_UNQUOTE(JSON_EXTRACT(body, %s))=%s")
                params.extend([_json_path(f.field), f.value])

        where_sql = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT doc_id, body FROM documents WHERE {where_sql}", tuple(params))
            rows = fetchall(cur)

        out = []
        for r in rows:
            body = load_json_body(r["body"])
            if matches(body, filters):
                out.append(with_id(r["doc_id"], body))
        return out

    def create(self, collection: str, data: Mapping[str, Any], doc_id: Optional[str] = None) -> str:
        return self.batch_commit([CreateOp(collection, data, doc_id)])[0]

    def update(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None:
        try:
            self.batch_commit([UpdateOp(collection, doc_id, fields)])
        except ConcurrencyConflict:
            raise NotFoundError(f"{collection}/{doc_id} does not exist")

    def delete(self, collection: str, doc_id: str) -> None:
        self.batch_commit([DeleteOp(collection, doc_id)])

    def batch_commit(self, ops: Sequence[WriteOp]) -> List[str]:
        created: list[str] = []
        with db_cursor(self._conn_factory) as (_, cur):
            for op in ops:
                if isinstance(op, UniqueFieldGuard):
                    self._check_unique(cur, op)
                elif isinstance(op, CreateOp):
                    doc_id = op.doc_id or new_doc_id()
                    try:
                        cur.execute(
                            "INSERT INTO documents(collection, doc_id, body) VALUES(%s,%s,%s)",
                            (op.collection, doc_id, dump_json_body(strip_id(op.data))),
                        )
                    except mysql.connector.IntegrityError:
                        raise ConcurrencyConflict(f"{op.collection}/{doc_id} already exists")
                    created.append(doc_id)
                elif isinstance(op, UpdateOp):
                    current = self._lock_row(cur, op.collection, op.doc_id)
                    if not expectation_holds(current, op.expect):
                        raise ConcurrencyConflict(f"{op.collection}/{op.doc_id} changed or vanished")
                    merged = dict(current)
                    merged.update(strip_id(op.fields))
                    cur.execute(
                        "UPDATE documents SET body=%s WHERE collection=%s AND doc_id=%s",
                        (dump_json_body(merged), op.collection, op.doc_id),
                    )
                elif isinstance(op, DeleteOp):
                    current = self._lock_row(cur, op.collection, op.doc_id)
                    if op.expect is not None and not expectation_holds(current, op.expect):
                        raise ConcurrencyConflict(f"{op.collection}/{op.doc_id} changed or vanished")
                    cur.execute(
                        "DELETE FROM documents WHERE collection=%s AND doc_id=%s",
                        (op.collection, op.doc_id),
                    )
                else:
                    raise TypeError(f"Unsupported write op: {op!r}")
        return created

    def subscribe(self, collection: str, filters: Sequence[Filter], callback: SnapshotCallback) -> _PollingSubscription:
        return _PollingSubscription(self, collection, filters, callback, self._poll_seconds)

    @staticmethod
    def _lock_row(cur, collection: str, doc_id: str) -> Optional[dict]:
        cur.execute(
            "SELECT body FROM documents WHERE collection=%s AND doc_id=%s FOR UPDATE",
            (collection, doc_id),
        )
        row = fetchone(cur)
        return load_json_body(row["body"]) if row else None

    @staticmethod
    def _check_unique(cur, guard: UniqueFieldGuard) -> None:
        cur.execute(
            """
            SELECT doc_id, body FROM documents
            WHERE collection=%s AND JSON_UNQUOTE(JSON_EXTRACT(body, %s))=%s
            FOR UPDATE
            """,
            (guard.collection, _json_path(guard.field), str(guard.value)),
        )
        for r in fetchall(cur):
            if r["doc_id"] != guard.owner_id and load_json_body(r["body"]).get(guard.field) == guard.value:
                raise ConcurrencyConflict(f"{guard.collection}.{guard.field} is already held by another document")

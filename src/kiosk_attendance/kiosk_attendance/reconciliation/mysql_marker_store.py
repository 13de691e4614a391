from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .marker_store import MarkerStore


class MySQLMarkerStore(MarkerStore):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, key: str) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT marker_value FROM markers WHERE marker_key=%s", (key,))
            row = fetchone(cur)
            return row["marker_value"] if row else None

    def compare_and_set(self, key: str, expected: Optional[str], value: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            if expected is None:
                cur.execute(
                    "INSERT IGNORE INTO markers(marker_key, marker_value) VALUES(%s,%s)",
                    (key, value),
                )
            else:
                cur.execute(
                    "UPDATE markers SET marker_value=%s WHERE marker_key=%s AND marker_value=%s",
                    (value, key, expected),
                )
            return cur.rowcount == 1

from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional

from ..core.exceptions import DataIntegrityError
from .marker_store import MarkerStore


class FileMarkerStore(MarkerStore):
    """Markers in one JSON file, replaced atomically on every write."""

    def __init__(self, path: str | Path):
        self._path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError as e:
            raise DataIntegrityError(f"Marker file {self._path} is not valid JSON") from e
        if not isinstance(data, dict):
            raise DataIntegrityError(f"Marker file {self._path} must hold a JSON object")
        return data

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read().get(key)

    def compare_and_set(self, key: str, expected: Optional[str], value: str) -> bool:
        with self._lock:
            data = self._read()
            if data.get(key) != expected:
                return False
            data[key] = value

            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=".markers-")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.replace(tmp, self._path)
            return True

from __future__ import annotations

from typing import Optional, Protocol


class MarkerStore(Protocol):
    """Small key/value records kept outside the document store.

    ``compare_and_set`` is the only write: it succeeds only while the current value
    equals ``expected`` (None meaning "no record yet").
    """

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def compare_and_set(self, key: str, expected: Optional[str], value: str) -> bool:
        raise NotImplementedError

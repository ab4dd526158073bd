"""link_scout.dedup: Фильтр уникальных URL для вывода (опция --unique)."""

from __future__ import annotations

import threading
from typing import Set

__all__ = ["Deduplicator"]


class Deduplicator:
    """Process-lifetime set of emitted URLs with atomic insert-if-absent.

    Built once per run and handed to the output stage; entries are never
    evicted.
    """

    def __init__(self) -> None:
        self._seen: Set[str] = set()
        self._lock = threading.Lock()

    def is_first_seen(self, url: str) -> bool:
        """Return True the first time *url* is offered, False ever after."""
        with self._lock:
            if url in self._seen:
                return False
            self._seen.add(url)
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)

    def __contains__(self, url: object) -> bool:
        with self._lock:
            return url in self._seen

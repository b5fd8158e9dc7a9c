"""Bounded FIFO cache for rendered highlight fragments."""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict

logger = logging.getLogger(__name__)

CacheKey = tuple[str, int, str, str]


class HighlightCache:
    """Insertion-ordered cache; the oldest entry is evicted when full.

    Lookups do not refresh an entry's position. A lock guards the map since
    the HTTP host renders from worker threads.
    """

    def __init__(self, max_entries: int = 1000, key_prefix_chars: int = 100) -> None:
        self.max_entries = max_entries
        self.key_prefix_chars = key_prefix_chars
        self._entries: OrderedDict[CacheKey, str] = OrderedDict()
        self._lock = threading.Lock()

    def make_key(self, mode: str, text: str, query: str) -> CacheKey:
        return (mode, len(text), query, text[: self.key_prefix_chars])

    def get(self, key: CacheKey) -> str | None:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: CacheKey, value: str) -> None:
        if self.max_entries <= 0:
            return
        with self._lock:
            if key in self._entries:
                self._entries[key] = value
                return
            while len(self._entries) >= self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted highlight cache entry for query %r", evicted[2])
            self._entries[key] = value

    def clear(self) -> None:
        with self._lock:
            size = len(self._entries)
            self._entries.clear()
        logger.debug("Cleared highlight cache (%d entries)", size)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

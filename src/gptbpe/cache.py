"""Memoization of BPE results per chunk."""

import logging
import threading
from collections import OrderedDict
from typing import Callable, NamedTuple

log = logging.getLogger(__name__)


class CacheInfo(NamedTuple):
    hits: int
    misses: int
    size: int
    max_size: int | None


class BPECache:
    """
    Chunk -> space-joined BPE result table.

    With ``max_size=None`` the cache only grows. An integer turns on
    least-recently-used eviction; results are identical either way.

    A single lock guards the table. The value is computed outside the lock, so two
    threads missing on the same chunk may both compute it; the first stored
    result is kept.
    """

    def __init__(self, max_size: int | None = None) -> None:
        if max_size is not None and max_size < 1:
            raise ValueError(f"max_size must be positive or None, got {max_size}")
        self.max_size = max_size
        self._entries: OrderedDict[str, str] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, chunk: str) -> str | None:
        with self._lock:
            result = self._entries.get(chunk)
            if result is not None:
                self._hits += 1
                if self.max_size is not None:
                    self._entries.move_to_end(chunk)
            return result

    def put(self, chunk: str, result: str) -> str:
        """Store ``result`` unless another thread got there first; return the stored value."""
        with self._lock:
            stored = self._entries.setdefault(chunk, result)
            if self.max_size is not None and len(self._entries) > self.max_size:
                evicted, _ = self._entries.popitem(last=False)
                log.debug(f"bpe cache full, evicted {evicted!r}")
            return stored

    def get_or_compute(self, chunk: str, compute: Callable[[str], str]) -> str:
        """Return the cached result for ``chunk``, computing and storing it on a miss."""
        result = self.get(chunk)
        if result is not None:
            return result

        with self._lock:
            self._misses += 1
        return self.put(chunk, compute(chunk))

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def info(self) -> CacheInfo:
        with self._lock:
            return CacheInfo(self._hits, self._misses, len(self._entries), self.max_size)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, chunk: object) -> bool:
        with self._lock:
            return chunk in self._entries

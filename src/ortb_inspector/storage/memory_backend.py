# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""In-memory LRU result cache."""

import threading
from collections import OrderedDict
from typing import Hashable, Optional

from ..models.analysis import AnalysisResult
from .base import ResultCache


class InMemoryResultCache(ResultCache):
    """Process-local LRU cache of analysis results.

    Reads and writes are guarded by a lock so analyzers can be shared
    across threads. With ``max_entries=None`` the cache never evicts.
    """

    def __init__(self, max_entries: Optional[int] = 1024):
        """Initialize the cache.

        Args:
            max_entries: Capacity before the least recently used entry is
                evicted, or None for an unbounded cache

        Raises:
            ValueError: If max_entries is not positive
        """
        if max_entries is not None and max_entries < 1:
            raise ValueError(f"max_entries must be positive or None, got {max_entries}")

        self.max_entries = max_entries
        self._entries: OrderedDict[Hashable, AnalysisResult] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> Optional[AnalysisResult]:
        with self._lock:
            result = self._entries.get(key)
            if result is not None:
                self._entries.move_to_end(key)
            return result

    def set(self, key: Hashable, result: AnalysisResult) -> None:
        with self._lock:
            self._entries[key] = result
            self._entries.move_to_end(key)
            if self.max_entries is not None:
                while len(self._entries) > self.max_entries:
                    self._entries.popitem(last=False)

    def delete(self, key: Hashable) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

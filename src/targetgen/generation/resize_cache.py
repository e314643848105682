"""
Memory-bounded cache of resized object cutouts.
"""

import logging
import threading
from collections import OrderedDict
from typing import Callable, Hashable, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)

CacheKey = Tuple[int, int, int]  # (target_width, target_height, category_id)


class ResizeCache:
    """
    Thread-safe LRU cache weighted by the byte size of the stored arrays.

    The total weight never exceeds ``max_bytes``: inserting evicts the least
    recently used entries until the new one fits, and an entry heavier than
    the whole budget is not stored at all. Any entry may be gone by the next
    lookup, so callers must always be able to recompute on a miss.

    Stored arrays are made read-only since they are shared between workers.
    """

    def __init__(self, max_bytes: int):
        """
        Args:
            max_bytes: Budget for the sum of ``ndarray.nbytes`` of all entries
        """
        if max_bytes < 0:
            raise ValueError("max_bytes must be >= 0")
        self.max_bytes = max_bytes
        self._entries: 'OrderedDict[Hashable, np.ndarray]' = OrderedDict()
        self._current_bytes = 0
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    @property
    def current_bytes(self) -> int:
        with self._lock:
            return self._current_bytes

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key) -> bool:
        with self._lock:
            return key in self._entries

    def get(self, key: Hashable) -> Optional[np.ndarray]:
        """Return the cached array for key, or None on a miss."""
        with self._lock:
            value = self._entries.get(key)
            if value is None:
                self.misses += 1
                return None
            self._entries.move_to_end(key)
            self.hits += 1
            return value

    def insert(self, key: Hashable, value: np.ndarray) -> bool:
        """
        Store a value, evicting older entries as needed.

        Returns:
            True if the value was stored, False if it exceeds the whole budget
        """
        weight = value.nbytes
        if weight > self.max_bytes:
            logger.debug(f"Not caching {key}: {weight} bytes exceeds budget of {self.max_bytes}")
            return False

        value.flags.writeable = False
        with self._lock:
            previous = self._entries.pop(key, None)
            if previous is not None:
                self._current_bytes -= previous.nbytes

            while self._entries and self._current_bytes + weight > self.max_bytes:
                evicted_key, evicted = self._entries.popitem(last=False)
                self._current_bytes -= evicted.nbytes
                logger.debug(f"Evicted {evicted_key} ({evicted.nbytes} bytes)")

            self._entries[key] = value
            self._current_bytes += weight
        return True

    def get_or_insert(self, key: Hashable, factory: Callable[[], np.ndarray]) -> np.ndarray:
        """
        Return the cached value, computing and inserting it on a miss.

        The factory runs outside the lock, so two workers missing the same key
        may both compute it; the last insert wins.
        """
        value = self.get(key)
        if value is not None:
            return value
        value = factory()
        self.insert(key, value)
        return value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._current_bytes = 0

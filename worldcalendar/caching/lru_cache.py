"""
LRU cache for precomputed calendar data.

Each calendar calculus owns one of these for its year layouts; the whole
table is dropped when the calendar definition is replaced.
"""

import threading
from collections import OrderedDict
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)

K = TypeVar("K")
V = TypeVar("V")


class LRUCache(Generic[K, V]):
    """
    Thread-safe, size-bounded LRU (Least Recently Used) cache.

    The least recently used entry is evicted once ``max_size`` is reached.
    """

    def __init__(self, max_size: int = 512):
        """
        Initialize the LRU cache.

        Args:
            max_size: Maximum number of items to store in the cache
        """
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self._cache: OrderedDict[K, V] = OrderedDict()
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def get(self, key: K) -> V | None:
        """Return the cached value, or None if the key is absent."""
        with self._lock:
            if key not in self._cache:
                self._misses += 1
                return None
            self._cache.move_to_end(key)
            self._hits += 1
            return self._cache[key]

    def put(self, key: K, value: V) -> None:
        """Store a value, evicting the least recently used entry when full."""
        with self._lock:
            if key in self._cache:
                self._cache[key] = value
                self._cache.move_to_end(key)
                return

            if len(self._cache) >= self.max_size:
                self._cache.popitem(last=False)
                self._evictions += 1

            self._cache[key] = value

    def get_or_set(self, key: K, factory: Callable[[], V]) -> V:
        """
        Get an item from the cache, or compute and store it if absent.

        Args:
            key: The key to look up
            factory: Function producing the value on a miss

        Returns:
            The cached value or the result of the factory function
        """
        value = self.get(key)
        if value is None:
            value = factory()
            self.put(key, value)
        return value

    def clear(self) -> None:
        """Clear all items from the cache."""
        with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0
            self._evictions = 0
            logger.debug("Cache cleared", max_size=self.max_size)

    def size(self) -> int:
        with self._lock:
            return len(self._cache)

    def get_stats(self) -> dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dictionary containing cache statistics
        """
        with self._lock:
            total_requests = self._hits + self._misses
            hit_rate = (self._hits / total_requests) if total_requests > 0 else 0.0
            return {
                "size": len(self._cache),
                "max_size": self.max_size,
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
                "hit_rate": hit_rate,
            }

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: K) -> bool:
        with self._lock:
            return key in self._cache

    def __repr__(self) -> str:
        stats = self.get_stats()
        return f"LRUCache(size={stats['size']}, max_size={stats['max_size']}, hit_rate={stats['hit_rate']:.2f})"

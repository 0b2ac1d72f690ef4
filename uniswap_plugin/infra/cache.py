"""
In-memory TTL cache for subgraph results

Keeps pool scans for a few minutes so repeated tool
calls from the agent do not hit the subgraph every time.
"""

import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

_MISSING = object()


class TTLCache:
    """
    Thread-safe in-memory cache with per-entry expiry.

    Features:
    - TTL-based expiration (default 300 seconds)
    - Size limit with LRU eviction
    - Hit/miss statistics

    Usage:
        cache = TTLCache(ttl_seconds=300)
        pools = cache.get_or_set("new-pools-8453", lambda: fetch_new_pools())
    """

    def __init__(self, ttl_seconds: float = 300, max_size: int = 1000):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_size <= 0:
            raise ValueError("max_size must be positive")

        self.ttl_seconds = ttl_seconds
        self.max_size = max_size

        # key -> (expires_at, value), ordered by recency of use
        self._entries: "OrderedDict[str, Tuple[float, Any]]" = OrderedDict()
        self._lock = threading.Lock()

        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get cached value if it exists and has not expired.

        Args:
            key: Cache key
            default: Returned on a miss

        Returns:
            Cached value or default
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return default

            expires_at, value = entry
            if time.monotonic() >= expires_at:
                del self._entries[key]
                self.misses += 1
                return default

            self._entries.move_to_end(key)
            self.hits += 1
            return value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """
        Store a value.

        Args:
            key: Cache key
            value: Value to cache
            ttl: Override the default TTL for this entry
        """
        ttl = self.ttl_seconds if ttl is None else ttl
        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
            elif len(self._entries) >= self.max_size:
                self._evict_lru()
            self._entries[key] = (time.monotonic() + ttl, value)

    def delete(self, key: str) -> bool:
        """Delete an entry. Returns True if it was present."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """Clear all entries and reset statistics."""
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0
            self.evictions = 0

    def get_or_set(self, key: str, factory: Callable[[], Any], ttl: Optional[float] = None) -> Any:
        """
        Return the cached value, computing and storing it on a miss.

        The factory runs outside the lock; exceptions propagate and nothing is cached.
        """
        value = self.get(key, _MISSING)
        if value is not _MISSING:
            logger.debug(f"Cache hit: {key}")
            return value

        logger.debug(f"Cache miss: {key}")
        value = factory()
        self.set(key, value, ttl)
        return value

    def cleanup_expired(self) -> int:
        """Remove all expired entries. Returns the number removed."""
        now = time.monotonic()
        with self._lock:
            expired = [key for key, (expires_at, _) in self._entries.items() if now >= expires_at]
            for key in expired:
                del self._entries[key]
            return len(expired)

    def _evict_lru(self) -> None:
        # Caller holds the lock
        self._entries.popitem(last=False)
        self.evictions += 1

    def stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            total = self.hits + self.misses
            return {
                "size": len(self._entries),
                "max_size": self.max_size,
                "hits": self.hits,
                "misses": self.misses,
                "hit_rate_pct": (self.hits / total * 100) if total > 0 else 0,
                "evictions": self.evictions,
                "ttl_seconds": self.ttl_seconds,
            }

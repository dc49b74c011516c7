# core/cache.py
"""
Caching utilities
"""
import time
from typing import Any, Callable, Optional
from cachetools import TTLCache

class CacheManager:
    """
    In-memory TTL cache keyed by request fingerprint.

    Entries expire passively: an entry older than the TTL is reported as absent
    on read. The timer is injectable so expiry can be driven in tests.
    """

    def __init__(
        self,
        max_size: int = 1000,
        ttl: int = 86400,
        timer: Callable[[], float] = time.monotonic
    ):
        self.ttl = ttl
        self._cache: TTLCache = TTLCache(maxsize=max_size, ttl=ttl, timer=timer)

    async def get(self, key: str) -> Optional[Any]:
        """Get value from cache, None when absent or expired"""
        return self._cache.get(key)

    async def set(self, key: str, value: Any) -> None:
        """Set value in cache"""
        self._cache[key] = value

    async def delete(self, key: str) -> None:
        """Evict a single key"""
        self._cache.pop(key, None)

    async def clear(self) -> None:
        """Clear all cache"""
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)

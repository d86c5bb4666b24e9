"""
In-process TTL cache for analytics results
"""
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

from utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """A computed value and the clock reading it was computed at"""
    value: Any
    computed_at: float


class TTLCache:
    """Key -> value map whose entries go stale after a fixed TTL.

    Entries are only ever replaced wholesale. There is no locking: concurrent
    misses on the same key may each run the compute function, which is fine
    because analytics computations are read-only.
    """

    def __init__(self, ttl_seconds: float = 300.0, clock: Callable[[], float] = time.monotonic):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def _fresh_entry(self, key: str) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is not None and self._clock() - entry.computed_at < self.ttl_seconds:
            return entry
        return None

    async def get_or_compute(self, key: str, compute: Callable[[], Awaitable[Any]]) -> Any:
        """Return the cached value for key, computing and storing it when missing or stale"""
        entry = self._fresh_entry(key)
        if entry is not None:
            logger.debug("Analytics cache hit", key=key)
            return entry.value

        logger.debug("Analytics cache miss", key=key)
        # A failing compute propagates before anything is stored
        value = await compute()
        self._entries[key] = CacheEntry(value=value, computed_at=self._clock())
        return value

    def clear(self):
        """Drop every entry"""
        self._entries.clear()
        logger.info("Analytics cache cleared")

    def __contains__(self, key: str) -> bool:
        return self._fresh_entry(key) is not None

    def __len__(self) -> int:
        return len(self._entries)

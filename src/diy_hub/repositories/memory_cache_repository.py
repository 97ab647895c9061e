"""In-memory implementation of CacheStore.

Single-process, time-bounded store. Entries are immutable and replaced
wholesale, and values are copied on the way in and out. One lock guards the
entry table and the hit/miss counters so get/set/stats/clear are atomic
with respect to each other.

Expiry is checked lazily on every read and swept in the background by an
asyncio task on a fixed interval. A full store rejects new keys instead of
evicting live ones.
"""

import asyncio
import copy
import json
import logging
import sys
import threading
import time
from collections.abc import Callable
from typing import Any

from diy_hub.config import settings
from diy_hub.entities import CacheEntryEntity, CacheStatsEntity

logger = logging.getLogger(__name__)


def _approx_size(value: Any) -> int:
    try:
        return len(json.dumps(value, default=str).encode())
    except (TypeError, ValueError):
        return sys.getsizeof(value)


class MemoryCacheRepository:
    """Thread-safe TTL cache with a maximum entry count.

    This class satisfies the CacheStore protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        store = MemoryCacheRepository.create(ttl=60, max_entries=10)
        store.set("k", {"a": 1})
        store.get("k")  # {"a": 1}
        ```
    """

    def __init__(
        self,
        ttl: float | None = None,
        max_entries: int | None = None,
        check_period: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the store.

        Args:
            ttl: Default time-to-live in seconds. Defaults to settings.
            max_entries: Maximum number of entries. Defaults to settings.
            check_period: Background sweep interval in seconds. Defaults to settings.
            clock: Monotonic clock, injectable for tests.
        """
        self._ttl = settings.cache_ttl if ttl is None else ttl
        self._max_entries = settings.cache_max_entries if max_entries is None else max_entries
        self._check_period = settings.cache_check_period if check_period is None else check_period
        if self._ttl <= 0 or self._max_entries <= 0 or self._check_period <= 0:
            raise ValueError("ttl, max_entries and check_period must be positive")

        self._clock = clock
        self._entries: dict[str, CacheEntryEntity] = {}
        self._hits = 0
        self._misses = 0
        self._lock = threading.Lock()
        self._sweeper: asyncio.Task | None = None

    @classmethod
    def create(
        cls,
        ttl: float | None = None,
        max_entries: int | None = None,
        check_period: float | None = None,
    ) -> "MemoryCacheRepository":
        """Factory method to create MemoryCacheRepository with defaults.

        Args:
            ttl: Entry TTL in seconds. If None, uses settings.
            max_entries: Capacity bound. If None, uses settings.
            check_period: Sweep interval in seconds. If None, uses settings.

        Returns:
            Configured MemoryCacheRepository
        """
        return cls(ttl=ttl, max_entries=max_entries, check_period=check_period)

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.is_expired(self._clock()):
                del self._entries[key]
                entry = None

            if entry is None:
                self._misses += 1
                logger.debug("Cache MISS: %s", key[:12])
                return None

            self._hits += 1
            stored = entry.value

        logger.debug("Cache HIT: %s", key[:12])
        # Stored values are never mutated in place
        return copy.deepcopy(stored)

    def set(self, key: str, value: Any, ttl: float | None = None) -> bool:
        ttl = ttl if ttl is not None else self._ttl
        if ttl <= 0:
            raise ValueError("ttl must be positive")

        # Size and copy outside the lock; the stored value is never shared with the caller
        stored = copy.deepcopy(value)
        key_bytes = len(key.encode())
        value_bytes = _approx_size(stored)

        with self._lock:
            now = self._clock()
            if key not in self._entries and len(self._entries) >= self._max_entries:
                self._purge_locked(now)
                if len(self._entries) >= self._max_entries:
                    logger.warning(
                        "Cache full (%d entries), rejected: %s", self._max_entries, key[:12]
                    )
                    return False

            self._entries[key] = CacheEntryEntity(
                key=key,
                value=stored,
                expires_at=now + ttl,
                key_bytes=key_bytes,
                value_bytes=value_bytes,
            )

        logger.debug("Cache SET: %s (TTL: %ss)", key[:12], ttl)
        return True

    def stats(self) -> CacheStatsEntity:
        with self._lock:
            now = self._clock()
            live = [entry for entry in self._entries.values() if not entry.is_expired(now)]
            return CacheStatsEntity(
                count=len(live),
                hits=self._hits,
                misses=self._misses,
                approx_key_bytes=sum(entry.key_bytes for entry in live),
                approx_value_bytes=sum(entry.value_bytes for entry in live),
            )

    def clear(self) -> int:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info("Cache cleared %d entries", count)
        return count

    def purge_expired(self) -> int:
        """Remove every expired entry.

        Returns:
            Number of entries removed
        """
        with self._lock:
            removed = self._purge_locked(self._clock())
        if removed:
            logger.info("Cache sweep removed %d expired entries", removed)
        return removed

    def _purge_locked(self, now: float) -> int:
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self._check_period)
            self.purge_expired()

    def start_sweeper(self) -> None:
        """Start the background expiry sweep on the running event loop."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.get_running_loop().create_task(self._sweep_forever())

    async def stop_sweeper(self) -> None:
        """Cancel the background sweep and wait for it to finish."""
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def ttl(self) -> float:
        """Get the default time-to-live in seconds."""
        return self._ttl

    @property
    def max_entries(self) -> int:
        """Get the capacity bound."""
        return self._max_entries

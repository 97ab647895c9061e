"""Cache entry domain entities."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CacheEntryEntity:
    """Domain entity for a stored response.

    Entries are immutable: a refresh replaces the whole entry.

    Attributes:
        key: Opaque fixed-length cache key
        value: The validated response object
        expires_at: Clock reading after which the entry is dead
        key_bytes: Approximate size of the key, measured at write time
        value_bytes: Approximate size of the value, measured at write time
    """

    key: str
    value: Any
    expires_at: float
    key_bytes: int = 0
    value_bytes: int = 0

    def is_expired(self, now: float) -> bool:
        """Check whether the entry is dead at the given clock reading."""
        return now >= self.expires_at


@dataclass(frozen=True)
class CacheStatsEntity:
    """Point-in-time cache telemetry."""

    count: int
    hits: int
    misses: int
    approx_key_bytes: int
    approx_value_bytes: int

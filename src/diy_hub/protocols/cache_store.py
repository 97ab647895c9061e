"""Cache storage protocol.

Defines the interface for a key/value store with per-entry expiry that
holds validated model responses.
"""

from typing import Any, Protocol, runtime_checkable

from diy_hub.entities import CacheStatsEntity


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for cache storage backends.

    Any type that implements these methods satisfies the protocol,
    no explicit inheritance needed. Every method must be atomic with
    respect to the others.
    """

    def get(self, key: str) -> Any | None:
        """Return the live value for a key.

        Args:
            key: The cache key

        Returns:
            The stored value, or None when absent or expired
        """
        ...

    def set(self, key: str, value: Any, ttl: float | None = None) -> bool:
        """Insert or replace an entry.

        Args:
            key: The cache key
            value: The value to store
            ttl: Time-to-live in seconds. Defaults to the store's TTL.

        Returns:
            True if stored, False if the store refused the entry
        """
        ...

    def stats(self) -> CacheStatsEntity:
        """Return telemetry. Must never raise."""
        ...

    def clear(self) -> int:
        """Remove every entry.

        Returns:
            Number of entries removed
        """
        ...

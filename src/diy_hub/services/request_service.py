"""Request orchestration service.

Resolves a validated request through the cache or the model:

1. Derive the cache key from the request's semantic fields
2. Serve a live cache entry without any upstream call
3. Otherwise join an in-flight computation for the same key, or start one
4. Store the fresh value (best-effort) and return it
"""

import asyncio
import logging
from typing import Any

from diy_hub.dto import MaterialRequest, ProjectRequest, StepRequest
from diy_hub.entities import CacheStatsEntity, RequestKind, ResolvedResponse
from diy_hub.errors import CacheWriteError
from diy_hub.protocols import CacheStore

from .key_deriver import derive_cache_key
from .retrying_invoker import RetryingInvoker

logger = logging.getLogger(__name__)


def _consume_exception(future: asyncio.Future) -> None:
    # Marks a failed flight's error as retrieved when nobody else was waiting on it
    if not future.cancelled():
        future.exception()


class RequestService:
    """Core orchestration service for the three request kinds.

    Concurrent misses for the same key share one upstream call: the first
    caller registers a future for the key, later callers await it and receive
    the same value or the same error.

    Example:
        ```python
        service = RequestService(cache=MemoryCacheRepository.create(), invoker=invoker)
        result = await service.enhance_material(MaterialRequest(name="Paint", quantity=2))
        result.cached  # False on first call, True afterwards
        ```
    """

    def __init__(
        self,
        cache: CacheStore,
        invoker: RetryingInvoker,
        key_version: str | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            cache: Cache storage backend (required).
            invoker: Retrying model invoker (required).
            key_version: Cache key version tag. Defaults to settings.
        """
        self._cache = cache
        self._invoker = invoker
        self._key_version = key_version
        self._inflight: dict[str, asyncio.Future] = {}

    async def enhance_material(self, request: MaterialRequest) -> ResolvedResponse:
        """Recommend a specific product for a generic material."""
        return await self.resolve(RequestKind.MATERIAL, request)

    async def generate_project(self, request: ProjectRequest) -> ResolvedResponse:
        """Generate a full project plan from a description."""
        return await self.resolve(RequestKind.PROJECT, request)

    async def explain_step(self, request: StepRequest) -> ResolvedResponse:
        """Explain one project step in detail."""
        return await self.resolve(RequestKind.STEP, request)

    async def resolve(self, kind: RequestKind, request: Any) -> ResolvedResponse:
        """Resolve a validated request through the cache or the model.

        Args:
            kind: Request kind
            request: Validated request DTO

        Returns:
            ResolvedResponse with the value and whether it came from the cache

        Raises:
            DiyHubError: The classified upstream error after retries are exhausted
        """
        key = derive_cache_key(kind, request.model_dump(by_alias=True), self._key_version)

        cached = self._cache.get(key)
        if cached is not None:
            logger.info("Cache hit for %s request %s", kind.value, key[:12])
            return ResolvedResponse(value=cached, cached=True)

        # No await between the lookup and the registration below
        flight = self._inflight.get(key)
        if flight is not None:
            logger.info("Joining in-flight %s request %s", kind.value, key[:12])
            value = await asyncio.shield(flight)
            return ResolvedResponse(value=value, cached=False)

        flight = asyncio.get_running_loop().create_future()
        flight.add_done_callback(_consume_exception)
        self._inflight[key] = flight

        logger.info("Cache miss for %s request %s, calling model", kind.value, key[:12])
        try:
            value = await self._invoker.invoke(kind, request)
            self._remember(key, value)
        except Exception as e:
            flight.set_exception(e)
            raise
        except BaseException:
            # Cancellation of the leader cancels its followers too
            flight.cancel()
            raise
        else:
            flight.set_result(value)
        finally:
            self._inflight.pop(key, None)

        return ResolvedResponse(value=value, cached=False)

    def _remember(self, key: str, value: Any) -> bool:
        try:
            if not self._cache.set(key, value):
                raise CacheWriteError(f"cache store refused {key[:12]}")
        except Exception as e:
            logger.warning("Cache write failed, serving fresh value uncached: %s", e)
            return False
        return True

    def get_stats(self) -> CacheStatsEntity:
        """Get cache statistics."""
        return self._cache.stats()

    def clear(self) -> int:
        """Clear all cache entries.

        Returns:
            Number of entries deleted
        """
        return self._cache.clear()

    @property
    def inflight_count(self) -> int:
        """Number of keys with an upstream call in progress."""
        return len(self._inflight)

    @property
    def cache(self) -> CacheStore:
        """Get the underlying cache store (for testing)."""
        return self._cache

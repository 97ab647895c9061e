"""HTTP handlers for the orchestration endpoints.

Handlers convert between raw request bodies, DTOs and service calls. Payload
validation happens here, before the service touches the cache or the network.
Classified pipeline errors are not caught: they propagate to the app's
exception handlers, which render the error envelope.
"""

from datetime import datetime, timezone
from typing import Any, cast

from diy_hub.dto import (
    CacheStatsData,
    CacheStatsItem,
    CacheStatsResponse,
    ClearCacheResponse,
    HealthCheckResponse,
    MaterialRequest,
    ProjectRequest,
    StepRequest,
    SuccessEnvelope,
    parse_payload,
)
from diy_hub.entities import RequestKind
from diy_hub.protocols import ModelClient
from diy_hub.services import RequestService

SERVICE_NAME = "diy-hub-backend"


class RequestHandler:
    """HTTP handlers for the three request kinds plus operator endpoints.

    Example:
        ```python
        handler = RequestHandler(request_service=service, model_client=client)

        @app.post("/api/enhance-material", response_model=SuccessEnvelope)
        async def enhance_material(body: Any = Body(None)):
            return await handler.enhance_material(body)
        ```
    """

    def __init__(self, request_service: RequestService, model_client: ModelClient) -> None:
        """Initialize the handler.

        Args:
            request_service: Orchestration service (required).
            model_client: Upstream client, consulted by the health check (required).
        """
        self._service = request_service
        self._client = model_client

    async def enhance_material(self, body: Any) -> SuccessEnvelope:
        """Handle POST /api/enhance-material requests."""
        request = cast(MaterialRequest, parse_payload(RequestKind.MATERIAL, body))
        result = await self._service.enhance_material(request)
        return SuccessEnvelope(data={"recommendation": result.value}, cached=result.cached)

    async def generate_project(self, body: Any) -> SuccessEnvelope:
        """Handle POST /api/generate-project requests."""
        request = cast(ProjectRequest, parse_payload(RequestKind.PROJECT, body))
        result = await self._service.generate_project(request)
        return SuccessEnvelope(data=result.value, cached=result.cached)

    async def explain_step(self, body: Any) -> SuccessEnvelope:
        """Handle POST /api/explain-step requests."""
        request = cast(StepRequest, parse_payload(RequestKind.STEP, body))
        result = await self._service.explain_step(request)
        return SuccessEnvelope(data=result.value, cached=result.cached)

    async def get_stats(self) -> CacheStatsResponse:
        """Handle GET /api/cache-stats requests."""
        stats = self._service.get_stats()
        return CacheStatsResponse(
            data=CacheStatsData(
                cache_stats=CacheStatsItem(
                    count=stats.count,
                    hits=stats.hits,
                    misses=stats.misses,
                    approx_key_bytes=stats.approx_key_bytes,
                    approx_value_bytes=stats.approx_value_bytes,
                )
            )
        )

    async def clear_cache(self) -> ClearCacheResponse:
        """Handle DELETE /api/cache requests."""
        count = self._service.clear()
        return ClearCacheResponse(deleted_count=count, message="Cache cleared successfully")

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /api/health requests."""
        return HealthCheckResponse(
            status="healthy",
            timestamp=datetime.now(timezone.utc).isoformat(),
            service=SERVICE_NAME,
            model_configured=await self._client.is_available(),
        )

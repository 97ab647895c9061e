"""Response DTOs for API endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class SuccessEnvelope(BaseModel):
    """Envelope for a resolved request."""

    success: bool = Field(True, description="Always true")
    data: Any = Field(..., description="Kind-specific response object")
    cached: bool = Field(..., description="Whether the data was served from the cache")


class ErrorEnvelope(BaseModel):
    """Envelope for any failure."""

    success: bool = Field(False, description="Always false")
    error: str = Field(..., description="Short error category")
    message: str = Field(..., description="Human-readable message")
    retry_after: int | None = Field(
        None,
        serialization_alias="retryAfter",
        description="Seconds to wait before retrying (rate-limit rejections only)",
    )


class CacheStatsItem(BaseModel):
    """Cache telemetry."""

    count: int = Field(..., description="Live entries", ge=0)
    hits: int = Field(..., ge=0)
    misses: int = Field(..., ge=0)
    approx_key_bytes: int = Field(..., serialization_alias="approxKeyBytes", ge=0)
    approx_value_bytes: int = Field(..., serialization_alias="approxValueBytes", ge=0)


class CacheStatsData(BaseModel):
    cache_stats: CacheStatsItem = Field(..., serialization_alias="cacheStats")


class CacheStatsResponse(BaseModel):
    """Response DTO for cache statistics."""

    success: bool = True
    data: CacheStatsData


class ClearCacheResponse(BaseModel):
    """Response DTO for an operator cache flush."""

    success: bool = True
    deleted_count: int = Field(..., serialization_alias="deletedCount", ge=0)
    message: str


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    success: bool = True
    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    timestamp: str = Field(..., description="ISO-8601 UTC timestamp")
    service: str = Field(..., description="Service identifier")
    model_configured: bool = Field(
        ...,
        serialization_alias="modelConfigured",
        description="Whether the upstream client has a credential",
    )

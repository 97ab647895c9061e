"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract.
They are used for request/response validation and serialization.

Internal domain logic should use entities from the entities package.
"""

from .requests import (
    GenerationContext,
    MaterialRequest,
    ProjectContext,
    ProjectRequest,
    StepRequest,
    parse_payload,
)
from .responses import (
    CacheStatsData,
    CacheStatsItem,
    CacheStatsResponse,
    ClearCacheResponse,
    ErrorEnvelope,
    HealthCheckResponse,
    SuccessEnvelope,
)

__all__ = [
    "MaterialRequest",
    "ProjectContext",
    "ProjectRequest",
    "GenerationContext",
    "StepRequest",
    "parse_payload",
    "SuccessEnvelope",
    "ErrorEnvelope",
    "CacheStatsItem",
    "CacheStatsData",
    "CacheStatsResponse",
    "ClearCacheResponse",
    "HealthCheckResponse",
]

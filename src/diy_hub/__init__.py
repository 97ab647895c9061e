"""DIY Hub - cached, retrying orchestration for AI-assisted DIY requests.

This package provides a layered architecture around one external
text-generation API:

Layers:
    - protocols: Interface contracts (CacheStore, ModelClient, PromptBuilder)
    - repositories: Data access implementations (in-memory cache, Anthropic client)
    - services: Business logic (key derivation, validation, retry, orchestration, rate gate)
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from diy_hub.services import RequestService, RetryingInvoker

    invoker = RetryingInvoker(client=client, prompt_builder=DefaultPromptBuilder())
    service = RequestService(cache=MemoryCacheRepository.create(), invoker=invoker)
    ```

For HTTP API:
    ```python
    from diy_hub.api.app import app
    ```
"""

from diy_hub.config import get_settings, settings
from diy_hub.dto import MaterialRequest, ProjectRequest, StepRequest
from diy_hub.entities import CacheEntryEntity, CacheStatsEntity, RequestKind, ResolvedResponse
from diy_hub.errors import (
    CacheWriteError,
    ContractError,
    DecodeError,
    DiyHubError,
    ErrorKind,
    UpstreamAuthError,
    UpstreamClientError,
    UpstreamRateLimitError,
    UpstreamServerError,
    ValidationError,
)
from diy_hub.handlers import RequestHandler
from diy_hub.prompts import DefaultPromptBuilder
from diy_hub.protocols import CacheStore, ModelClient, PromptBuilder
from diy_hub.repositories import AnthropicModelClient, MemoryCacheRepository
from diy_hub.services import RateGate, RequestService, RetryingInvoker, derive_cache_key

__all__ = [
    # Configuration
    "settings",
    "get_settings",
    # Protocols (interfaces)
    "CacheStore",
    "ModelClient",
    "PromptBuilder",
    # Services (business logic)
    "RequestService",
    "RetryingInvoker",
    "RateGate",
    "derive_cache_key",
    # Handlers (HTTP)
    "RequestHandler",
    # Repositories (data access)
    "MemoryCacheRepository",
    "AnthropicModelClient",
    "DefaultPromptBuilder",
    # Entities (domain models)
    "CacheEntryEntity",
    "CacheStatsEntity",
    "RequestKind",
    "ResolvedResponse",
    # DTOs (API contracts)
    "MaterialRequest",
    "ProjectRequest",
    "StepRequest",
    # Errors
    "DiyHubError",
    "ErrorKind",
    "ValidationError",
    "UpstreamAuthError",
    "UpstreamRateLimitError",
    "UpstreamServerError",
    "UpstreamClientError",
    "DecodeError",
    "ContractError",
    "CacheWriteError",
]

"""Service layer for business logic.

This layer contains the core request orchestration. Services depend on
protocols (interfaces), not concrete implementations, making them testable
and flexible.

Architecture:
    Handler -> RequestService -> {CacheStore | RetryingInvoker -> ModelClient}
    (HTTP)  -> (Orchestration) -> (Data Access)

Usage:
    ```python
    from diy_hub.services import RequestService, RetryingInvoker

    invoker = RetryingInvoker(client=client, prompt_builder=DefaultPromptBuilder())
    service = RequestService(cache=MemoryCacheRepository.create(), invoker=invoker)
    ```
"""

from .key_deriver import derive_cache_key, normalize_text
from .rate_gate import RateDecision, RateGate
from .request_service import RequestService
from .response_validator import ValidationResult, normalize_response, validate_response
from .retrying_invoker import GenerationProfile, RetryingInvoker, default_profiles

__all__ = [
    "GenerationProfile",
    "RateDecision",
    "RateGate",
    "RequestService",
    "RetryingInvoker",
    "ValidationResult",
    "default_profiles",
    "derive_cache_key",
    "normalize_response",
    "normalize_text",
    "validate_response",
]

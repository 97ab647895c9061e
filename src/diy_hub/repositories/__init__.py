"""Repository layer for data access.

This layer abstracts external dependencies (cache storage, the text-generation
API) behind protocol-based interfaces. This enables:
- Easy swapping of implementations
- Unit testing with fake implementations
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.
"""

from diy_hub.protocols import CacheStore, ModelClient

from .anthropic_model_client import AnthropicModelClient
from .memory_cache_repository import MemoryCacheRepository

__all__ = [
    "CacheStore",
    "ModelClient",
    "AnthropicModelClient",
    "MemoryCacheRepository",
]

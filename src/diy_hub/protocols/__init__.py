"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (in-memory cache → shared store, Anthropic → another API)
- Unit testing with fake implementations
- Clear separation of concerns

Usage:
    ```python
    from diy_hub.protocols import CacheStore, ModelClient

    # Type hints work with any implementation
    store: CacheStore = MemoryCacheRepository()
    client: ModelClient = AnthropicModelClient.create()
    ```
"""

from .cache_store import CacheStore
from .model_client import ModelClient
from .prompt_builder import PromptBuilder

__all__ = [
    "CacheStore",
    "ModelClient",
    "PromptBuilder",
]

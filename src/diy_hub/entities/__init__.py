"""Domain entities for internal representation.

These are pure dataclasses (frozen) and enums used internally by services
and repositories. They are NOT used for API contracts - use DTOs
from the dto package for that.
"""

from .cache_entry import CacheEntryEntity, CacheStatsEntity
from .prompt import Prompt
from .request_kind import RequestKind
from .resolved_response import ResolvedResponse

__all__ = [
    "CacheEntryEntity",
    "CacheStatsEntity",
    "Prompt",
    "RequestKind",
    "ResolvedResponse",
]

"""Resolved response domain entity."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ResolvedResponse:
    """Result of resolving a request through the cache or the model.

    Attributes:
        value: The validated response object
        cached: True when served from the cache without any upstream call
    """

    value: Any
    cached: bool

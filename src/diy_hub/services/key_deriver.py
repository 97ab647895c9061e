"""Deterministic cache keys derived from request payloads.

Only the fields that change the model's answer take part in the key. Free
text is compared case- and whitespace-insensitively. A missing field maps to
JSON null, a sentinel no string value can produce, so absence never collides
with an empty string.
"""

import hashlib
import json
from collections.abc import Mapping
from typing import Any

from diy_hub.config import settings
from diy_hub.entities import RequestKind

# Dotted paths into the payload, per kind
KEY_FIELDS: dict[RequestKind, tuple[str, ...]] = {
    RequestKind.MATERIAL: ("name", "category", "specification"),
    RequestKind.PROJECT: (
        "description",
        "context.homeType",
        "context.experienceLevel",
        "context.budget",
    ),
    RequestKind.STEP: ("stepTitle", "projectTitle", "projectCategory"),
}


def normalize_text(value: Any) -> str | None:
    """Lowercase and collapse whitespace; None stays None."""
    if value is None:
        return None
    return " ".join(str(value).split()).lower()


def _lookup(payload: Mapping[str, Any], path: str) -> Any:
    current: Any = payload
    for part in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
    return current


def derive_cache_key(
    kind: RequestKind,
    payload: Mapping[str, Any],
    version: str | None = None,
) -> str:
    """Derive the cache key for a request payload.

    Args:
        kind: Request kind; part of the key so kinds never collide
        payload: Request fields using their wire names (``stepTitle``, ``context.budget``, ...)
        version: Key version tag. Defaults to settings; bump it to orphan every prior entry.

    Returns:
        64-character hex SHA-256 digest
    """
    parts = [kind.value, version or settings.cache_key_version]
    parts.extend(normalize_text(_lookup(payload, path)) for path in KEY_FIELDS[kind])
    raw = json.dumps(parts, ensure_ascii=False)
    return hashlib.sha256(raw.encode()).hexdigest()

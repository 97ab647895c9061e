"""Helpers for turning model text output into structured data."""

import json
import re
from typing import Any

from diy_hub.errors import DecodeError

_OPEN_FENCE = re.compile(r"^```(?:json)?[ \t]*\r?\n?", re.IGNORECASE)
_CLOSE_FENCE = re.compile(r"\r?\n?```\s*$")


def strip_code_fence(text: str) -> str:
    """Remove a wrapping ```json or ``` fence, if present."""
    cleaned = text.strip()
    if not cleaned.startswith("```"):
        return cleaned
    cleaned = _OPEN_FENCE.sub("", cleaned, count=1)
    return _CLOSE_FENCE.sub("", cleaned, count=1).strip()


def parse_model_json(text: str) -> Any:
    """Parse model output as JSON after stripping an optional fence.

    Raises:
        DecodeError: If the text is not valid JSON
    """
    try:
        return json.loads(strip_code_fence(text))
    except json.JSONDecodeError as e:
        raise DecodeError(f"Invalid JSON response from model: {e.msg} at position {e.pos}") from e

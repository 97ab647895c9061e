"""Normalization and structural validation of decoded model responses.

Two passes, always in this order:

1. ``normalize_response`` rewrites known legacy shapes into the one canonical
   shape: project steps use ``stepNumber``/``instruction`` (older responses
   used ``order``/``instructions``), and every tool becomes
   ``{name, specification, required, alternatives, usage}`` with a list of
   well-formed alternatives. The pass is idempotent and never raises.
2. ``validate_response`` checks field presence and container types against
   the canonical shape. It never judges content.
"""

import logging
from dataclasses import dataclass
from typing import Any

from diy_hub.entities import RequestKind

logger = logging.getLogger(__name__)

REQUIRED_FIELDS: dict[RequestKind, tuple[str, ...]] = {
    RequestKind.MATERIAL: (
        "primaryBrand",
        "primaryModel",
        "specification",
        "reasoning",
        "alternatives",
        "buyingTips",
        "quantitySuggestion",
    ),
    RequestKind.PROJECT: (
        "title",
        "description",
        "category",
        "difficulty",
        "estimatedTime",
        "steps",
        "materials",
        "tools",
        "safetyTips",
        "estimatedCost",
        "commonMistakes",
        # successCriteria is optional
    ),
    RequestKind.STEP: (
        "explanation",
        "keyPoints",
        "visualCues",
        "estimatedTime",
        "commonMistakes",
    ),
}

LIST_FIELDS: dict[RequestKind, tuple[str, ...]] = {
    RequestKind.MATERIAL: ("alternatives",),
    RequestKind.PROJECT: ("steps", "materials", "tools", "safetyTips", "commonMistakes"),
    RequestKind.STEP: ("keyPoints", "visualCues", "commonMistakes"),
}

# Legacy step field → canonical step field
STEP_FIELD_ALIASES = {
    "order": "stepNumber",
    "instructions": "instruction",
}


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a structural check."""

    valid: bool
    reason: str | None = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def fail(cls, reason: str) -> "ValidationResult":
        return cls(valid=False, reason=reason)


def _present(value: Any) -> bool:
    return value is not None and value != ""


def _canonical_step(step: Any) -> Any:
    if not isinstance(step, dict):
        return step
    canonical = dict(step)
    for legacy, current in STEP_FIELD_ALIASES.items():
        legacy_value = canonical.pop(legacy, None)
        if not _present(canonical.get(current)) and _present(legacy_value):
            canonical[current] = legacy_value
    return canonical


def _canonical_tool(tool: Any) -> dict[str, Any] | None:
    if isinstance(tool, str):
        tool = {"name": tool}
    if not isinstance(tool, dict):
        logger.warning("Dropping malformed tool entry: %r", tool)
        return None

    alternatives = tool.get("alternatives")
    if not isinstance(alternatives, list):
        if alternatives is not None:
            logger.warning("Tool %r has scalar alternatives, replacing with []", tool.get("name"))
        alternatives = []

    kept = []
    for alt in alternatives:
        if isinstance(alt, dict) and alt.get("name") and alt.get("specification"):
            kept.append(alt)
        else:
            logger.warning("Filtering out invalid alternative: %r", alt)

    required = tool.get("required")
    return {
        "name": tool.get("name") or "Unknown Tool",
        "specification": tool.get("specification") or "",
        "required": True if required is None else required,
        "alternatives": kept,
        "usage": tool.get("usage") or "",
    }


def normalize_response(kind: RequestKind, candidate: Any) -> Any:
    """Rewrite a decoded response into its canonical shape.

    Returns a new object; the input is not modified. Anything that is not
    recognisable is passed through untouched for validation to reject.

    Args:
        kind: Request kind the response answers
        candidate: Decoded model output

    Returns:
        The normalized response
    """
    if kind is not RequestKind.PROJECT or not isinstance(candidate, dict):
        return candidate

    normalized = dict(candidate)
    if isinstance(normalized.get("steps"), list):
        normalized["steps"] = [_canonical_step(step) for step in normalized["steps"]]
    if isinstance(normalized.get("tools"), list):
        tools = (_canonical_tool(tool) for tool in normalized["tools"])
        normalized["tools"] = [tool for tool in tools if tool is not None]
    return normalized


def _validate_material(candidate: dict) -> ValidationResult:
    for alt in candidate["alternatives"]:
        if not isinstance(alt, dict) or not (alt.get("brand") and alt.get("model") and alt.get("note")):
            return ValidationResult.fail("Each alternative must have brand, model, and note")
    return ValidationResult.ok()


def _validate_project(candidate: dict) -> ValidationResult:
    steps = candidate["steps"]
    if not steps:
        return ValidationResult.fail("steps must be a non-empty array")
    for step in steps:
        if not isinstance(step, dict) or not (
            _present(step.get("stepNumber")) and step.get("title") and step.get("instruction")
        ):
            return ValidationResult.fail(
                "Each step must have stepNumber/order, title, and instruction/instructions"
            )
    return ValidationResult.ok()


def validate_response(kind: RequestKind, candidate: Any) -> ValidationResult:
    """Check a normalized response against the contract for its kind.

    Args:
        kind: Request kind the response answers
        candidate: Normalized model output

    Returns:
        ValidationResult with a human-readable reason on failure
    """
    if not isinstance(candidate, dict):
        return ValidationResult.fail("Response must be an object")

    for name in REQUIRED_FIELDS[kind]:
        if name not in candidate:
            return ValidationResult.fail(f"Missing required field: {name}")

    for name in LIST_FIELDS[kind]:
        if not isinstance(candidate[name], list):
            return ValidationResult.fail(f"{name} must be an array")

    if kind is RequestKind.MATERIAL:
        return _validate_material(candidate)
    if kind is RequestKind.PROJECT:
        return _validate_project(candidate)
    return ValidationResult.ok()

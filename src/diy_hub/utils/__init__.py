"""Utility modules for diy_hub."""

from .json_text import parse_model_json, strip_code_fence

__all__ = [
    "parse_model_json",
    "strip_code_fence",
]

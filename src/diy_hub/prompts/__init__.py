"""Prompt text for the text-generation API."""

from .prompt_builder import DefaultPromptBuilder

__all__ = ["DefaultPromptBuilder"]

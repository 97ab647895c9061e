"""Prompt builder protocol."""

from typing import Any, Protocol, runtime_checkable

from diy_hub.entities import Prompt, RequestKind


@runtime_checkable
class PromptBuilder(Protocol):
    """Protocol for turning a validated request into a model prompt."""

    def build(self, kind: RequestKind, request: Any) -> Prompt:
        """Build the prompt for a request.

        Args:
            kind: Which request kind the payload belongs to
            request: The validated request DTO

        Returns:
            Prompt with system text and messages
        """
        ...

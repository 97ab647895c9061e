"""Text-generation client protocol."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class ModelClient(Protocol):
    """Protocol for the external text-generation API.

    Implementations raise ``UpstreamError`` subclasses for HTTP faults and
    ``DecodeError`` when the response carries no text.
    """

    @property
    def model_name(self) -> str:
        """Return the fixed model identifier."""
        ...

    async def invoke_model(
        self,
        system: str,
        messages: list[dict[str, str]],
        max_tokens: int,
        temperature: float,
    ) -> str:
        """Run one completion and return its text.

        Args:
            system: System instruction
            messages: Conversation messages
            max_tokens: Maximum output tokens
            temperature: Sampling temperature

        Returns:
            The raw text of the first text block
        """
        ...

    async def is_available(self) -> bool:
        """Check whether the client is configured to make calls."""
        ...

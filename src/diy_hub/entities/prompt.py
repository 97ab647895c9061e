"""Prompt domain entity."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Prompt:
    """A system instruction plus the conversation sent to the model.

    Attributes:
        system: System instruction text
        messages: Ordered ``{"role", "content"}`` messages
    """

    system: str
    messages: list[dict[str, str]] = field(default_factory=list)

"""Retrying invocation of the text-generation API.

One call runs ATTEMPT → SUCCESS, or ATTEMPT → WAIT → ATTEMPT on a retryable
failure, or stops on a fatal one. An attempt builds the prompt, calls the
model, strips an optional code fence, decodes JSON, normalizes and validates
the result. Retryable faults: upstream rate limit, upstream 5xx, decode and
contract errors. Auth and other client faults stop immediately. The wait
before retry ``n`` (0-based) is ``backoff_base * 2**n`` seconds.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from diy_hub.config import settings
from diy_hub.entities import RequestKind
from diy_hub.errors import ContractError, DiyHubError
from diy_hub.protocols import ModelClient, PromptBuilder
from diy_hub.utils import parse_model_json

from .response_validator import normalize_response, validate_response

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationProfile:
    """Output budget for one request kind."""

    max_tokens: int
    temperature: float


def default_profiles(temperature: float | None = None) -> dict[RequestKind, GenerationProfile]:
    """Per-kind output budgets; plans and explanations run longer than recommendations."""
    temperature = settings.temperature if temperature is None else temperature
    return {
        RequestKind.MATERIAL: GenerationProfile(max_tokens=1000, temperature=temperature),
        RequestKind.PROJECT: GenerationProfile(max_tokens=2000, temperature=temperature),
        RequestKind.STEP: GenerationProfile(max_tokens=1500, temperature=temperature),
    }


class RetryingInvoker:
    """Calls the model for a request kind with bounded retry and backoff.

    Example:
        ```python
        invoker = RetryingInvoker(
            client=AnthropicModelClient.create(),
            prompt_builder=DefaultPromptBuilder(),
        )
        plan = await invoker.invoke(RequestKind.PROJECT, project_request)
        ```
    """

    def __init__(
        self,
        client: ModelClient,
        prompt_builder: PromptBuilder,
        max_retries: int | None = None,
        backoff_base: float | None = None,
        profiles: dict[RequestKind, GenerationProfile] | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize the invoker.

        Args:
            client: Text-generation client (required).
            prompt_builder: Prompt collaborator (required).
            max_retries: Additional attempts after the first. Defaults to settings.
            backoff_base: Seconds waited before the first retry. Defaults to settings.
            profiles: Per-kind output budgets. Defaults to ``default_profiles()``.
            sleep: Awaitable sleep, injectable for tests.
        """
        self._client = client
        self._prompts = prompt_builder
        self._max_retries = settings.max_retries if max_retries is None else max_retries
        self._backoff_base = settings.backoff_base_seconds if backoff_base is None else backoff_base
        self._profiles = profiles or default_profiles()
        self._sleep = sleep

        if self._max_retries < 0:
            raise ValueError("max_retries must be zero or greater")

    def backoff_delay(self, attempt: int) -> float:
        """Seconds to wait after the given 0-based attempt fails."""
        return self._backoff_base * (2**attempt)

    async def invoke(self, kind: RequestKind, request: Any) -> dict[str, Any]:
        """Produce a validated response for a request.

        Args:
            kind: Request kind
            request: Validated request DTO

        Returns:
            The normalized, validated response object

        Raises:
            DiyHubError: The last classified error once retries are exhausted,
                or the first non-retryable one
        """
        total = self._max_retries + 1
        for attempt in range(total):
            try:
                return await self._attempt(kind, request)
            except DiyHubError as e:
                logger.warning(
                    "Attempt %d/%d for %s failed (%s): %s",
                    attempt + 1,
                    total,
                    kind.value,
                    e.kind.value,
                    e,
                )
                if not e.retryable or attempt == self._max_retries:
                    raise

            delay = self.backoff_delay(attempt)
            logger.info("Retrying %s in %.1fs", kind.value, delay)
            await self._sleep(delay)

        # range() above always returns or raises
        raise AssertionError("unreachable")

    async def _attempt(self, kind: RequestKind, request: Any) -> dict[str, Any]:
        prompt = self._prompts.build(kind, request)
        profile = self._profiles[kind]

        text = await self._client.invoke_model(
            system=prompt.system,
            messages=prompt.messages,
            max_tokens=profile.max_tokens,
            temperature=profile.temperature,
        )

        candidate = normalize_response(kind, parse_model_json(text))
        result = validate_response(kind, candidate)
        if not result.valid:
            raise ContractError(f"Invalid {kind.value} response structure: {result.reason}")

        return candidate

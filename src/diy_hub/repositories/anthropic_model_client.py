"""Anthropic Messages API implementation of ModelClient.

Talks to ``POST /v1/messages`` over httpx and maps every HTTP or transport
fault onto the pipeline error taxonomy:

- 401 → UpstreamAuthError
- 429 → UpstreamRateLimitError
- 5xx, timeouts, connection failures → UpstreamServerError
- other 4xx → UpstreamClientError
- no text block in a 2xx body → DecodeError
"""

import logging
from typing import Any

import httpx

from diy_hub.config import settings
from diy_hub.errors import DecodeError, UpstreamServerError, upstream_error_for_status

logger = logging.getLogger(__name__)


def extract_text(body: Any) -> str:
    """Return the text of the first ``text`` content block.

    Raises:
        DecodeError: If the body has no text block
    """
    content = body.get("content") if isinstance(body, dict) else None
    for block in content or []:
        if isinstance(block, dict) and block.get("type") == "text" and isinstance(block.get("text"), str):
            return block["text"]
    raise DecodeError("No text content in model response")


class AnthropicModelClient:
    """Anthropic-backed implementation of ModelClient protocol.

    This class satisfies the ModelClient protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        client = AnthropicModelClient.create()
        text = await client.invoke_model(
            system="Reply in JSON.",
            messages=[{"role": "user", "content": "Hi"}],
            max_tokens=100,
            temperature=0.3,
        )
        ```
    """

    MESSAGES_PATH = "/v1/messages"

    def __init__(
        self,
        api_key: str | None = None,
        model_name: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        anthropic_version: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: Anthropic API key. Defaults to settings.
            model_name: Model identifier. Defaults to settings.
            base_url: API base URL. Defaults to settings.
            timeout: Per-attempt timeout in seconds. Defaults to settings.
            anthropic_version: ``anthropic-version`` header. Defaults to settings.
            transport: Optional httpx transport (tests use ``httpx.MockTransport``).

        Raises:
            ValueError: If no API key is configured
        """
        self._api_key = api_key or settings.anthropic_api_key
        if not self._api_key:
            raise ValueError("No Anthropic API key configured. Set ANTHROPIC_API_KEY in .env")

        self._model_name = model_name or settings.model_name
        self._base_url = (base_url or settings.anthropic_base_url).rstrip("/")
        self._timeout = timeout or settings.upstream_timeout
        self._version = anthropic_version or settings.anthropic_version
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def create(
        cls,
        api_key: str | None = None,
        model_name: str | None = None,
    ) -> "AnthropicModelClient":
        """Factory method to create AnthropicModelClient with defaults.

        Args:
            api_key: API key. If None, uses settings.
            model_name: Model identifier. If None, uses settings.

        Returns:
            Configured AnthropicModelClient
        """
        return cls(api_key=api_key, model_name=model_name)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
                headers={
                    "x-api-key": self._api_key,
                    "anthropic-version": self._version,
                    "content-type": "application/json",
                },
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    @property
    def model_name(self) -> str:
        """Get the model identifier."""
        return self._model_name

    async def invoke_model(
        self,
        system: str,
        messages: list[dict[str, str]],
        max_tokens: int,
        temperature: float,
    ) -> str:
        payload = {
            "model": self._model_name,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "system": system,
            "messages": messages,
        }

        try:
            response = await self.client.post(self.MESSAGES_PATH, json=payload)
        except httpx.TimeoutException as e:
            raise UpstreamServerError(f"Upstream API timed out after {self._timeout}s") from e
        except httpx.TransportError as e:
            raise UpstreamServerError(f"Upstream API unreachable: {e}") from e

        if response.status_code >= 400:
            raise upstream_error_for_status(response.status_code, _error_detail(response))

        try:
            body = response.json()
        except ValueError as e:
            raise DecodeError("Upstream API returned a non-JSON body") from e

        return extract_text(body)

    async def is_available(self) -> bool:
        """Check whether a credential is configured. Makes no network call."""
        return bool(self._api_key)

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def _error_detail(response: httpx.Response) -> str:
    try:
        error = response.json().get("error", {})
        return f"{error.get('type', 'error')}: {error.get('message', '')}".strip()
    except (ValueError, AttributeError):
        return response.text[:200]

"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Components built once in the lifespan and stored in app.state
    - Dependency functions retrieve from request.app.state
    - Tests inject fakes through ``create_lifespan`` arguments
"""

import logging
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Annotated, Any

from fastapi import Depends, FastAPI, Request

from diy_hub.config import Settings
from diy_hub.handlers import RequestHandler
from diy_hub.prompts import DefaultPromptBuilder
from diy_hub.protocols import ModelClient
from diy_hub.repositories import AnthropicModelClient, MemoryCacheRepository
from diy_hub.services import RateGate, RequestService, RetryingInvoker, default_profiles

logger = logging.getLogger(__name__)


def get_handler(request: Request) -> RequestHandler:
    """Dependency injection for RequestHandler from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The RequestHandler instance from app.state

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "request_handler", None)
    if handler is None:
        raise RuntimeError("RequestHandler not initialized. Check lifespan setup.")
    return handler


def get_rate_gate(request: Request) -> RateGate | None:
    """Return the RateGate from app.state, or None before startup."""
    return getattr(request.app.state, "rate_gate", None)


def create_lifespan(
    app_settings: Settings,
    model_client: ModelClient | None = None,
    cache: MemoryCacheRepository | None = None,
    rate_gate: RateGate | None = None,
    sleep: Callable[[float], Awaitable[Any]] | None = None,
):
    """Build the lifespan context manager for an app.

    Initializes all layers and stores them in app.state:
    1. Repositories (cache store, model client)
    2. Services (invoker, request service, rate gate)
    3. Handler (HTTP endpoints) - app.state.request_handler

    Args:
        app_settings: Settings the components are built from
        model_client: Override for the upstream client (tests)
        cache: Override for the cache store (tests)
        rate_gate: Override for the rate gate (tests)
        sleep: Override for the backoff sleep (tests)

    Returns:
        An async context manager factory accepted by ``FastAPI(lifespan=...)``
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = model_client
        if client is None:
            if not app_settings.has_api_key:
                logger.error("ANTHROPIC_API_KEY environment variable is required")
            client = AnthropicModelClient(
                api_key=app_settings.anthropic_api_key,
                model_name=app_settings.model_name,
                base_url=app_settings.anthropic_base_url,
                timeout=app_settings.upstream_timeout,
                anthropic_version=app_settings.anthropic_version,
            )

        store = cache
        if store is None:
            store = MemoryCacheRepository(
                ttl=app_settings.cache_ttl,
                max_entries=app_settings.cache_max_entries,
                check_period=app_settings.cache_check_period,
            )
        gate = rate_gate or RateGate(
            window_seconds=app_settings.rate_limit_window_seconds,
            max_requests=app_settings.rate_limit_max,
        )

        invoker_kwargs: dict[str, Any] = {}
        if sleep is not None:
            invoker_kwargs["sleep"] = sleep
        invoker = RetryingInvoker(
            client=client,
            prompt_builder=DefaultPromptBuilder(),
            max_retries=app_settings.max_retries,
            backoff_base=app_settings.backoff_base_seconds,
            profiles=default_profiles(app_settings.temperature),
            **invoker_kwargs,
        )
        request_service = RequestService(
            cache=store,
            invoker=invoker,
            key_version=app_settings.cache_key_version,
        )

        app.state.model_client = client
        app.state.cache = store
        app.state.rate_gate = gate
        app.state.request_service = request_service
        app.state.request_handler = RequestHandler(request_service=request_service, model_client=client)

        store.start_sweeper()
        logger.info("Environment: %s", app_settings.environment)
        logger.info("Model: %s", client.model_name)
        logger.info(
            "Rate limit: %d requests per %.0fs",
            gate.limit,
            gate.window_seconds,
        )
        logger.info("Cache TTL: %ss, max entries: %d", store.ttl, store.max_entries)

        yield

        await store.stop_sweeper()
        close = getattr(client, "close", None)
        if close is not None:
            await close()

        del app.state.request_handler
        del app.state.request_service
        del app.state.rate_gate
        del app.state.cache
        del app.state.model_client
        logger.info("Shutting down gracefully")

    return lifespan


# Type alias for cleaner dependency injection
HandlerDep = Annotated[RequestHandler, Depends(get_handler)]

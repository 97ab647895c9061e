import logging
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import Body, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from diy_hub.api.dependencies import HandlerDep, create_lifespan, get_rate_gate
from diy_hub.config import Settings, settings, setup_logging
from diy_hub.dto import (
    CacheStatsResponse,
    ClearCacheResponse,
    ErrorEnvelope,
    HealthCheckResponse,
    SuccessEnvelope,
)
from diy_hub.errors import GENERIC_CATEGORY, GENERIC_MESSAGE, DiyHubError, ValidationError
from diy_hub.protocols import ModelClient
from diy_hub.repositories import MemoryCacheRepository
from diy_hub.services import RateGate

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


def _envelope(status_code: int, error: str, message: str, **extra: Any) -> JSONResponse:
    body = ErrorEnvelope(error=error, message=message, **extra)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )


def _client_id(request: Request, trust_proxy: bool) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if trust_proxy and forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DiyHubError)
    async def pipeline_error(request: Request, exc: DiyHubError) -> JSONResponse:
        if isinstance(exc, ValidationError):
            logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
        else:
            logger.error("%s %s failed (%s): %s", request.method, request.url.path, exc.kind.value, exc)
        return _envelope(exc.status_code, exc.category, exc.client_message())

    @app.exception_handler(RequestValidationError)
    async def malformed_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request body") if errors else "Invalid request body"
        return _envelope(status.HTTP_400_BAD_REQUEST, ValidationError.category, message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            return _envelope(
                exc.status_code,
                "Not found",
                f"Endpoint {request.method} {request.url.path} not found",
            )
        return _envelope(exc.status_code, str(exc.detail), str(exc.detail))

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_CATEGORY, GENERIC_MESSAGE)


def _register_middleware(app: FastAPI, app_settings: Settings) -> None:
    @app.middleware("http")
    async def rate_gate(request: Request, call_next):
        gate = get_rate_gate(request)
        if gate is None or not request.url.path.startswith("/api"):
            return await call_next(request)

        decision = gate.check(_client_id(request, app_settings.trust_proxy))
        if not decision.allowed:
            response = _envelope(
                status.HTTP_429_TOO_MANY_REQUESTS,
                "Too many requests",
                "You have exceeded the rate limit. Please try again later.",
                retry_after=decision.retry_after,
            )
            response.headers["Retry-After"] = str(decision.retry_after)
            return response

        response = await call_next(request)
        response.headers["RateLimit-Limit"] = str(decision.limit)
        response.headers["RateLimit-Remaining"] = str(decision.remaining)
        response.headers["RateLimit-Reset"] = str(decision.retry_after)
        return response

    # Registered after the rate gate, so it runs first; rejected bodies are not counted
    @app.middleware("http")
    async def limit_body_size(request: Request, call_next):
        declared = request.headers.get("content-length")
        if declared is None:
            return await call_next(request)

        try:
            size = int(declared)
        except ValueError:
            return _envelope(
                status.HTTP_400_BAD_REQUEST,
                ValidationError.category,
                "Invalid Content-Length header",
            )

        if size > app_settings.max_body_bytes:
            logger.warning("Rejected %d byte body on %s", size, request.url.path)
            return _envelope(
                status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                "Payload too large",
                f"Request body exceeds the {app_settings.max_body_bytes} byte limit",
            )
        return await call_next(request)

    # Added after the rate gate and size limit so it wraps both; rejected requests get logged too
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info("%s %s", request.method, request.url.path)
        return await call_next(request)

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=list(app_settings.allowed_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _register_routes(app: FastAPI) -> None:
    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "success": True,
            "message": "DIY Hub Backend API",
            "version": API_VERSION,
            "endpoints": {
                "health": "GET /api/health",
                "enhance": "POST /api/enhance-material",
                "generate": "POST /api/generate-project",
                "explainStep": "POST /api/explain-step",
                "cacheStats": "GET /api/cache-stats",
            },
        }

    @app.get("/api/health", response_model=HealthCheckResponse)
    async def health(handler: HandlerDep) -> HealthCheckResponse:
        """Health check endpoint."""
        return await handler.health_check()

    @app.get("/api/cache-stats", response_model=CacheStatsResponse)
    async def cache_stats(handler: HandlerDep) -> CacheStatsResponse:
        """Get cache statistics (for debugging)."""
        return await handler.get_stats()

    @app.delete("/api/cache", response_model=ClearCacheResponse)
    async def clear_cache(handler: HandlerDep) -> ClearCacheResponse:
        """Clear all entries from the cache."""
        return await handler.clear_cache()

    @app.post("/api/enhance-material", response_model=SuccessEnvelope)
    async def enhance_material(handler: HandlerDep, body: Any = Body(None)) -> SuccessEnvelope:
        """Enhance a generic material with a specific product recommendation."""
        return await handler.enhance_material(body)

    @app.post("/api/generate-project", response_model=SuccessEnvelope)
    async def generate_project(handler: HandlerDep, body: Any = Body(None)) -> SuccessEnvelope:
        """Generate a complete DIY project plan from a description."""
        return await handler.generate_project(body)

    @app.post("/api/explain-step", response_model=SuccessEnvelope)
    async def explain_step(handler: HandlerDep, body: Any = Body(None)) -> SuccessEnvelope:
        """Get a detailed explanation of one project step."""
        return await handler.explain_step(body)


def create_app(
    app_settings: Settings | None = None,
    model_client: ModelClient | None = None,
    cache: MemoryCacheRepository | None = None,
    rate_gate: RateGate | None = None,
    sleep: Callable[[float], Awaitable[Any]] | None = None,
) -> FastAPI:
    """Build a fully wired application.

    Args:
        app_settings: Settings to build from. Defaults to the global settings.
        model_client: Upstream client override (tests).
        cache: Cache store override (tests).
        rate_gate: Rate gate override (tests).
        sleep: Backoff sleep override (tests).

    Returns:
        The FastAPI application
    """
    app_settings = app_settings or settings
    setup_logging(app_settings.log_level)

    app = FastAPI(
        title="DIY Hub API",
        description="Cached, retrying AI recommendations for DIY materials, projects and steps",
        version=API_VERSION,
        lifespan=create_lifespan(
            app_settings,
            model_client=model_client,
            cache=cache,
            rate_gate=rate_gate,
            sleep=sleep,
        ),
    )

    _register_exception_handlers(app)
    _register_middleware(app, app_settings)
    _register_routes(app)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "diy_hub.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


def _split_origins(raw: str) -> tuple[str, ...]:
    origins = tuple(part.strip() for part in raw.split(",") if part.strip())
    return origins or ("*",)


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Anthropic
    anthropic_api_key: str | None = field(default_factory=lambda: os.getenv("ANTHROPIC_API_KEY"))
    anthropic_base_url: str = field(
        default_factory=lambda: os.getenv("ANTHROPIC_BASE_URL", "https://api.anthropic.com")
    )
    anthropic_version: str = field(default_factory=lambda: os.getenv("ANTHROPIC_VERSION", "2023-06-01"))
    model_name: str = field(default_factory=lambda: os.getenv("ANTHROPIC_MODEL", "claude-3-haiku-20240307"))
    temperature: float = field(default_factory=lambda: float(os.getenv("MODEL_TEMPERATURE", "0.3")))

    # Retry
    upstream_timeout: float = field(default_factory=lambda: float(os.getenv("UPSTREAM_TIMEOUT_SECONDS", "30")))
    max_retries: int = field(default_factory=lambda: int(os.getenv("UPSTREAM_MAX_RETRIES", "2")))
    backoff_base_seconds: float = field(default_factory=lambda: float(os.getenv("BACKOFF_BASE_SECONDS", "1")))

    # Cache
    cache_ttl: int = field(default_factory=lambda: int(os.getenv("CACHE_TTL_SECONDS", "604800")))  # 7 days
    cache_max_entries: int = field(default_factory=lambda: int(os.getenv("CACHE_MAX_ENTRIES", "1000")))
    cache_check_period: float = field(
        default_factory=lambda: float(os.getenv("CACHE_CHECK_PERIOD_SECONDS", "86400"))
    )
    # Bump to invalidate every cached response after a prompt/response contract change
    cache_key_version: str = field(default_factory=lambda: os.getenv("CACHE_KEY_VERSION", "v1"))

    # Rate limiting
    rate_limit_window_seconds: float = field(
        default_factory=lambda: int(os.getenv("RATE_LIMIT_WINDOW_MS", "3600000")) / 1000
    )
    rate_limit_max: int = field(default_factory=lambda: int(os.getenv("RATE_LIMIT_MAX", "100")))

    # API
    allowed_origins: tuple[str, ...] = field(
        default_factory=lambda: _split_origins(os.getenv("ALLOWED_ORIGINS", "*"))
    )
    trust_proxy: bool = field(default_factory=lambda: os.getenv("TRUST_PROXY", "true").lower() == "true")
    api_host: str = field(default_factory=lambda: os.getenv("API_HOST", "0.0.0.0"))
    api_port: int = field(default_factory=lambda: int(os.getenv("PORT", "3000")))
    api_reload: bool = field(default_factory=lambda: os.getenv("API_RELOAD", "false").lower() == "true")
    max_body_bytes: int = field(default_factory=lambda: int(os.getenv("MAX_BODY_BYTES", "1048576")))  # 1 MiB

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    environment: str = field(default_factory=lambda: os.getenv("APP_ENV", "development"))

    @property
    def has_api_key(self) -> bool:
        """Check whether an upstream credential is configured."""
        return bool(self.anthropic_api_key)

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.max_retries < 0:
            raise ValueError("UPSTREAM_MAX_RETRIES must be zero or greater")

        if self.backoff_base_seconds < 0:
            raise ValueError("BACKOFF_BASE_SECONDS must be zero or greater")

        if self.upstream_timeout <= 0:
            raise ValueError("UPSTREAM_TIMEOUT_SECONDS must be positive")

        if self.cache_ttl <= 0 or self.cache_max_entries <= 0 or self.cache_check_period <= 0:
            raise ValueError(
                "CACHE_TTL_SECONDS, CACHE_MAX_ENTRIES and CACHE_CHECK_PERIOD_SECONDS must be positive"
            )

        if self.rate_limit_window_seconds <= 0 or self.rate_limit_max <= 0:
            raise ValueError("RATE_LIMIT_WINDOW_MS and RATE_LIMIT_MAX must be positive")

        if self.max_body_bytes <= 0:
            raise ValueError("MAX_BODY_BYTES must be positive")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def setup_logging(level: str | None = None) -> None:
    """Configure root logging for the service."""
    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level).upper(), logging.INFO),
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        force=True,
    )

"""Error taxonomy for the request pipeline.

Every fault the pipeline can surface is a ``DiyHubError`` subclass. Each class
knows its classification, whether the retrying invoker may try again, and how
the HTTP boundary renders it. Server-side faults carry a generic public message
so upstream details never leak to clients; only validation errors echo their
own text.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Classification of a pipeline fault."""

    VALIDATION = "validation"
    AUTH = "auth"
    UPSTREAM_RATE_LIMIT = "upstream_rate_limit"
    UPSTREAM_SERVER = "upstream_server"
    CLIENT_REQUEST = "client_request"
    DECODE = "decode"
    CONTRACT = "contract"
    CACHE_WRITE = "cache_write"


GENERIC_CATEGORY = "Internal server error"
GENERIC_MESSAGE = "An unexpected error occurred. Please try again."


class DiyHubError(Exception):
    """Base class for all classified pipeline errors."""

    kind: ErrorKind
    retryable: bool = False
    status_code: int = 500
    category: str = GENERIC_CATEGORY
    public_message: str = GENERIC_MESSAGE

    def client_message(self) -> str:
        """Message safe to show to API clients."""
        return self.public_message


class ValidationError(DiyHubError):
    """Inbound payload is missing a required field or has the wrong type."""

    kind = ErrorKind.VALIDATION
    status_code = 400
    category = "Validation error"

    def client_message(self) -> str:
        return str(self)


class UpstreamError(DiyHubError):
    """Fault reported by (or while talking to) the text-generation API."""

    def __init__(self, message: str, upstream_status: int | None = None) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status


class UpstreamAuthError(UpstreamError):
    kind = ErrorKind.AUTH
    category = "Configuration error"
    public_message = "Server configuration issue. Please contact support."


class UpstreamRateLimitError(UpstreamError):
    kind = ErrorKind.UPSTREAM_RATE_LIMIT
    retryable = True
    status_code = 429
    category = "Rate limit exceeded"
    public_message = "Too many requests. Please try again later."


class UpstreamServerError(UpstreamError):
    kind = ErrorKind.UPSTREAM_SERVER
    retryable = True


class UpstreamClientError(UpstreamError):
    kind = ErrorKind.CLIENT_REQUEST


class DecodeError(DiyHubError):
    """Model output could not be turned into structured data."""

    kind = ErrorKind.DECODE
    retryable = True
    category = "Invalid response"
    public_message = "Received invalid response from AI service. Please try again."


class ContractError(DiyHubError):
    """Model output decoded fine but is missing required structure."""

    kind = ErrorKind.CONTRACT
    retryable = True


class CacheWriteError(DiyHubError):
    """A computed value could not be stored. Logged, never surfaced."""

    kind = ErrorKind.CACHE_WRITE


def upstream_error_for_status(status: int, message: str) -> UpstreamError:
    """Map an upstream HTTP status code to the matching error class.

    Args:
        status: HTTP status returned by the upstream API (>= 400)
        message: Detail to attach to the error (logged, not shown to clients)

    Returns:
        The classified error instance
    """
    if status == 401:
        return UpstreamAuthError(f"Invalid upstream API key: {message}", status)
    if status == 429:
        return UpstreamRateLimitError(f"Rate limit exceeded on upstream API: {message}", status)
    if status >= 500:
        return UpstreamServerError(f"Upstream API server error ({status}): {message}", status)
    return UpstreamClientError(f"Upstream API rejected request ({status}): {message}", status)

"""Per-client admission control.

Fixed-window counter per client identity: each client may make
``max_requests`` requests per ``window_seconds``; the window starts on the
client's first request and resets once it elapses. State is process-local.
"""

import logging
import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from diy_hub.config import settings

logger = logging.getLogger(__name__)


@dataclass
class _Window:
    started_at: float
    count: int


@dataclass(frozen=True)
class RateDecision:
    """Outcome of one admission check.

    Attributes:
        allowed: Whether the request may proceed
        limit: Maximum requests per window
        remaining: Requests left in the current window
        reset_after: Seconds until the window resets
    """

    allowed: bool
    limit: int
    remaining: int
    reset_after: float

    @property
    def retry_after(self) -> int:
        """Whole seconds a rejected client should wait."""
        return max(1, math.ceil(self.reset_after))


class RateGate:
    """Thread-safe fixed-window rate limiter keyed by client identity."""

    def __init__(
        self,
        window_seconds: float | None = None,
        max_requests: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._window = settings.rate_limit_window_seconds if window_seconds is None else window_seconds
        self._max = settings.rate_limit_max if max_requests is None else max_requests
        if self._window <= 0 or self._max <= 0:
            raise ValueError("window_seconds and max_requests must be positive")

        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()
        self._last_prune = clock()

    def check(self, client_id: str) -> RateDecision:
        """Count a request from a client and decide whether to admit it."""
        with self._lock:
            now = self._clock()
            if now - self._last_prune >= self._window:
                self._prune_locked(now)

            window = self._windows.get(client_id)
            if window is None or now - window.started_at >= self._window:
                window = _Window(started_at=now, count=0)
                self._windows[client_id] = window

            reset_after = window.started_at + self._window - now
            if window.count >= self._max:
                logger.warning("Client %s exceeded rate limit", client_id)
                return RateDecision(False, self._max, 0, reset_after)

            window.count += 1
            return RateDecision(True, self._max, self._max - window.count, reset_after)

    def reset(self, client_id: str | None = None) -> None:
        """Forget one client's window, or every window."""
        with self._lock:
            if client_id is None:
                self._windows.clear()
            else:
                self._windows.pop(client_id, None)

    def _prune_locked(self, now: float) -> None:
        stale = [cid for cid, w in self._windows.items() if now - w.started_at >= self._window]
        for cid in stale:
            del self._windows[cid]
        self._last_prune = now

    @property
    def limit(self) -> int:
        return self._max

    @property
    def window_seconds(self) -> float:
        return self._window

"""Fixed-window rate limiter keyed by endpoint and user."""

import math
import threading
import time
from typing import Callable, NamedTuple

from pydantic import BaseModel, Field

from ..config import Settings, get_settings
from .store import InMemoryRateLimitStore, RateLimitEntry, RateLimitStore


ENDPOINT_CHAT = "chat"
ENDPOINT_ANALYZE_FOOD = "analyze-food"


class RateLimitConfig(BaseModel):
    """Quota policy for one endpoint.

    Attributes:
        max_requests: Requests allowed per window.
        window_seconds: Window length in seconds.
    """

    max_requests: int = Field(default=30, ge=1, description="Requests per window")
    window_seconds: float = Field(default=60.0, gt=0, description="Window length in seconds")


class RateLimitResult(NamedTuple):
    """Result of a rate limit check.

    Attributes:
        allowed: Whether the request is allowed.
        limit: Requests allowed per window.
        remaining: Requests left in the current window.
        reset_in_seconds: Seconds until the current window ends.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_in_seconds: int


class FixedWindowRateLimiter:
    """Counts requests per key in fixed windows.

    A window starts on the first request after the previous one expired and
    lasts ``window_seconds``. A user can therefore get up to twice the limit
    through in a short burst straddling a window boundary.
    """

    def __init__(
        self,
        store: RateLimitStore | None = None,
        clock: Callable[[], float] = time.time,
        cleanup_interval: float = 60.0,
        max_entry_age: float = 300.0,
    ):
        """Initialize rate limiter.

        Args:
            store: Entry storage. Defaults to a process-local dict.
            clock: Returns the current Unix time in seconds.
            cleanup_interval: Minimum seconds between stale-entry sweeps.
            max_entry_age: Entries whose window started longer ago are dropped.
        """
        self.store = store if store is not None else InMemoryRateLimitStore()
        self.clock = clock
        self.cleanup_interval = cleanup_interval
        self.max_entry_age = max_entry_age
        self._lock = threading.Lock()
        self._last_cleanup = clock()

    def cleanup_stale_entries(self, max_age: float | None = None) -> int:
        """Remove entries whose window started more than ``max_age`` seconds ago.

        An entry whose own window is still open is kept regardless of age.

        Returns:
            Number of entries removed.
        """
        max_age = self.max_entry_age if max_age is None else max_age
        now = self.clock()
        removed = 0
        with self._lock:
            for key, entry in self.store.items():
                age = now - entry.window_start
                if age > max_age and age >= entry.window_seconds:
                    self.store.delete(key)
                    removed += 1
            self._last_cleanup = now
        return removed

    def _maybe_cleanup(self, now: float) -> None:
        if now - self._last_cleanup >= self.cleanup_interval:
            self.cleanup_stale_entries()

    def check(self, user_id: str, endpoint: str, config: RateLimitConfig) -> RateLimitResult:
        """Admit or reject one request.

        The counter is only incremented when the request is admitted.

        Args:
            user_id: Authenticated user identifier.
            endpoint: Endpoint name; each endpoint has its own budget.
            config: Quota policy for the endpoint.

        Returns:
            RateLimitResult with the decision and header values.
        """
        now = self.clock()
        self._maybe_cleanup(now)
        key = f"{endpoint}:{user_id}"

        with self._lock:
            entry = self.store.get(key)
            if entry is None or now - entry.window_start >= config.window_seconds:
                entry = RateLimitEntry(count=0, window_start=now, window_seconds=config.window_seconds)
                self.store.set(key, entry)

            reset_in_seconds = math.ceil(entry.window_start + config.window_seconds - now)

            if entry.count >= config.max_requests:
                return RateLimitResult(
                    allowed=False,
                    limit=config.max_requests,
                    remaining=0,
                    reset_in_seconds=reset_in_seconds,
                )

            entry.count += 1
            self.store.set(key, entry)

            return RateLimitResult(
                allowed=True,
                limit=config.max_requests,
                remaining=config.max_requests - entry.count,
                reset_in_seconds=reset_in_seconds,
            )


def get_endpoint_config(endpoint: str, settings: Settings | None = None) -> RateLimitConfig:
    """Return the configured quota policy for an endpoint."""
    settings = settings or get_settings()
    if endpoint == ENDPOINT_ANALYZE_FOOD:
        return RateLimitConfig(
            max_requests=settings.ANALYSIS_RATE_LIMIT_REQUESTS,
            window_seconds=settings.ANALYSIS_RATE_LIMIT_WINDOW_SECONDS,
        )
    return RateLimitConfig(
        max_requests=settings.CHAT_RATE_LIMIT_REQUESTS,
        window_seconds=settings.CHAT_RATE_LIMIT_WINDOW_SECONDS,
    )


# Global rate limiter instance
_rate_limiter: FixedWindowRateLimiter | None = None


def get_rate_limiter() -> FixedWindowRateLimiter:
    """Get the process-wide rate limiter instance."""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = FixedWindowRateLimiter()
    return _rate_limiter


def reset_rate_limiter() -> None:
    """Drop the process-wide limiter and all of its counters."""
    global _rate_limiter
    _rate_limiter = None


def check_rate_limit(
    user_id: str,
    endpoint: str,
    config: RateLimitConfig | None = None,
) -> RateLimitResult:
    """Check the process-wide limiter for a user and endpoint.

    Args:
        user_id: User identifier.
        endpoint: Endpoint name.
        config: Optional policy override; defaults to the endpoint's settings.

    Returns:
        RateLimitResult with status and header values.
    """
    return get_rate_limiter().check(user_id, endpoint, config or get_endpoint_config(endpoint))

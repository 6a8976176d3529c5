"""Rate limiting module - fixed-window counters per user and endpoint."""

from .store import RateLimitEntry, RateLimitStore, InMemoryRateLimitStore
from .limiter import (
    ENDPOINT_CHAT,
    ENDPOINT_ANALYZE_FOOD,
    RateLimitConfig,
    RateLimitResult,
    FixedWindowRateLimiter,
    get_endpoint_config,
    get_rate_limiter,
    reset_rate_limiter,
    check_rate_limit,
)
from .exceptions import RateLimitExceededError
from .dependencies import add_rate_limit_headers, rate_limit_dependency


__all__ = [
    "RateLimitEntry",
    "RateLimitStore",
    "InMemoryRateLimitStore",
    "ENDPOINT_CHAT",
    "ENDPOINT_ANALYZE_FOOD",
    "RateLimitConfig",
    "RateLimitResult",
    "FixedWindowRateLimiter",
    "get_endpoint_config",
    "get_rate_limiter",
    "reset_rate_limiter",
    "check_rate_limit",
    "RateLimitExceededError",
    "add_rate_limit_headers",
    "rate_limit_dependency",
]

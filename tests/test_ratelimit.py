"""Unit tests for rate limiting module."""

import pytest

from nutrigate.ratelimit.limiter import (
    ENDPOINT_ANALYZE_FOOD,
    ENDPOINT_CHAT,
    RateLimitConfig,
    FixedWindowRateLimiter,
    check_rate_limit,
    get_endpoint_config,
    get_rate_limiter,
)
from nutrigate.ratelimit.store import InMemoryRateLimitStore, RateLimitEntry
from nutrigate.ratelimit.exceptions import RateLimitExceededError


class TestRateLimitConfig:
    """Tests for RateLimitConfig."""

    def test_default_policy(self):
        """Test the default policy is 30 requests per minute."""
        config = RateLimitConfig()

        assert config.max_requests == 30
        assert config.window_seconds == 60

    def test_endpoint_budgets_differ(self):
        """Test chat and analysis have their own budgets."""
        assert get_endpoint_config(ENDPOINT_CHAT).max_requests == 30
        assert get_endpoint_config(ENDPOINT_ANALYZE_FOOD).max_requests == 20
        assert get_endpoint_config(ENDPOINT_ANALYZE_FOOD).window_seconds == 60


class TestFixedWindowRateLimiter:
    """Tests for the fixed-window limiter."""

    def test_remaining_decreases_within_window(self, clock):
        """Test every call up to the limit is allowed and remaining counts down."""
        limiter = FixedWindowRateLimiter(clock=clock)
        config = RateLimitConfig(max_requests=5, window_seconds=60)

        remaining = []
        for _ in range(5):
            result = limiter.check("u1", "chat", config)
            assert result.allowed
            remaining.append(result.remaining)
            clock.advance(1)

        assert remaining == [4, 3, 2, 1, 0]

    def test_rejects_after_limit(self, clock):
        """Test the call after the last allowed one is rejected."""
        limiter = FixedWindowRateLimiter(clock=clock)
        config = RateLimitConfig(max_requests=3, window_seconds=60)

        for _ in range(3):
            limiter.check("u1", "chat", config)
        clock.advance(10)

        result = limiter.check("u1", "chat", config)

        assert not result.allowed
        assert result.remaining == 0
        assert result.reset_in_seconds == 50

    def test_rejection_does_not_increment(self, clock):
        """Test rejected calls leave the counter untouched."""
        store = InMemoryRateLimitStore()
        limiter = FixedWindowRateLimiter(store=store, clock=clock)
        config = RateLimitConfig(max_requests=2, window_seconds=60)

        for _ in range(5):
            limiter.check("u1", "chat", config)

        assert store.get("chat:u1").count == 2

    def test_window_resets(self, clock):
        """Test the first call after the window expired starts a fresh window."""
        limiter = FixedWindowRateLimiter(clock=clock)
        config = RateLimitConfig(max_requests=2, window_seconds=60)

        limiter.check("u1", "chat", config)
        limiter.check("u1", "chat", config)
        assert not limiter.check("u1", "chat", config).allowed

        clock.advance(60)
        result = limiter.check("u1", "chat", config)

        assert result.allowed
        assert result.remaining == 1
        assert result.reset_in_seconds == 60

    def test_burst_at_window_boundary(self, clock):
        """Test the accepted fixed-window weakness: 2x the limit across a boundary."""
        limiter = FixedWindowRateLimiter(clock=clock)
        config = RateLimitConfig(max_requests=3, window_seconds=60)

        limiter.check("u1", "chat", config)
        clock.advance(59)
        allowed = sum(limiter.check("u1", "chat", config).allowed for _ in range(2))
        clock.advance(1)
        allowed += sum(limiter.check("u1", "chat", config).allowed for _ in range(3))

        assert allowed == 5

    def test_separate_keys(self, clock):
        """Test users and endpoints have separate counters."""
        limiter = FixedWindowRateLimiter(clock=clock)
        config = RateLimitConfig(max_requests=1, window_seconds=60)

        assert limiter.check("u1", "chat", config).allowed
        assert not limiter.check("u1", "chat", config).allowed

        assert limiter.check("u2", "chat", config).allowed
        assert limiter.check("u1", "analyze-food", config).allowed

    def test_cleanup_stale_entries(self, clock):
        """Test old entries are pruned."""
        store = InMemoryRateLimitStore()
        limiter = FixedWindowRateLimiter(store=store, clock=clock, cleanup_interval=10_000)
        config = RateLimitConfig(max_requests=5, window_seconds=60)

        limiter.check("old", "chat", config)
        clock.advance(400)
        limiter.check("new", "chat", config)

        removed = limiter.cleanup_stale_entries(max_age=300)

        assert removed == 1
        assert store.get("chat:old") is None
        assert store.get("chat:new") is not None

    def test_lazy_cleanup_runs_on_check(self, clock):
        """Test checks sweep stale entries once the cleanup interval passed."""
        store = InMemoryRateLimitStore()
        store.set("chat:ghost", RateLimitEntry(count=3, window_start=clock() - 1000))
        limiter = FixedWindowRateLimiter(store=store, clock=clock, cleanup_interval=60)

        clock.advance(61)
        limiter.check("u1", "chat", RateLimitConfig())

        assert store.get("chat:ghost") is None

    def test_cleanup_keeps_open_long_window(self, clock):
        """Test a window longer than the cleanup age is never swept while open."""
        limiter = FixedWindowRateLimiter(clock=clock, cleanup_interval=60, max_entry_age=300)
        config = RateLimitConfig(max_requests=2, window_seconds=600)

        assert limiter.check("u1", "chat", config).allowed
        assert limiter.check("u1", "chat", config).allowed
        assert not limiter.check("u1", "chat", config).allowed

        clock.advance(400)
        assert limiter.cleanup_stale_entries() == 0
        result = limiter.check("u1", "chat", config)

        assert not result.allowed
        assert result.reset_in_seconds == 200

    def test_cleanup_drops_long_window_once_expired(self, clock):
        """Test a long window becomes eligible for cleanup after it ends."""
        store = InMemoryRateLimitStore()
        limiter = FixedWindowRateLimiter(store=store, clock=clock, cleanup_interval=10_000)
        limiter.check("u1", "chat", RateLimitConfig(max_requests=2, window_seconds=600))

        clock.advance(600)

        assert limiter.cleanup_stale_entries(max_age=300) == 1
        assert store.get("chat:u1") is None


class TestCheckRateLimit:
    """Tests for the check_rate_limit function."""

    def test_uses_endpoint_settings(self):
        """Test the process-wide limiter applies the endpoint's configured budget."""
        result = check_rate_limit(user_id="test_user", endpoint=ENDPOINT_ANALYZE_FOOD)

        assert result.allowed
        assert result.limit == 20
        assert result.remaining == 19

    def test_global_instance_is_shared(self):
        """Test repeated calls share counters."""
        check_rate_limit(user_id="test_user", endpoint=ENDPOINT_CHAT)
        result = check_rate_limit(user_id="test_user", endpoint=ENDPOINT_CHAT)

        assert result.remaining == 28
        assert get_rate_limiter() is get_rate_limiter()


class TestRateLimitExceededError:
    """Tests for RateLimitExceededError."""

    def test_error_attributes(self):
        """Test error has correct attributes."""
        exc = RateLimitExceededError(endpoint="chat", limit=30, retry_after=42)

        assert exc.endpoint == "chat"
        assert exc.limit == 30
        assert exc.retry_after == 42
        assert exc.code == "RATE_LIMIT_EXCEEDED"
        assert "42" in exc.message

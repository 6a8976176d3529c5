# Test configuration
import os
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).parent.parent

# Add repo root to path so tests can import modules
sys.path.insert(0, str(REPO_ROOT))

# Settings are cached on first use, so the test environment must be in place
# before any nutrigate module is imported.
os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")
os.environ.setdefault("SUPABASE_URL", "https://identity.test")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("LOG_JSON", "false")


@pytest.fixture(autouse=True)
def fresh_rate_limiter():
    """Every test starts with empty rate limit counters."""
    from nutrigate.ratelimit.limiter import reset_rate_limiter

    reset_rate_limiter()
    yield
    reset_rate_limiter()


class FakeClock:
    """Manually advanced clock for rate limiter tests."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()

"""Rate limit exceptions."""

from nutrigate.exceptions import NutriGateError


class RateLimitExceededError(NutriGateError):
    """Raised when a user exhausts their quota for an endpoint.
    
    Attributes:
        endpoint: Endpoint whose quota was exceeded.
        limit: Requests allowed per window.
        retry_after: Seconds until the window resets.
    """
    
    def __init__(self, endpoint: str, limit: int, retry_after: int):
        super().__init__(
            message=f"Rate limit exceeded for '{endpoint}' ({limit} requests/window). Retry after {retry_after}s",
            code="RATE_LIMIT_EXCEEDED"
        )
        self.endpoint = endpoint
        self.limit = limit
        self.retry_after = retry_after

"""FastAPI dependencies that enforce per-endpoint quotas."""

from typing import Annotated, Awaitable, Callable

import structlog
from fastapi import Depends, Response

from nutrigate.auth.dependencies import get_current_identity
from nutrigate.auth.models import Identity
from nutrigate.logging_config import Stage, log_stage

from .exceptions import RateLimitExceededError
from .limiter import RateLimitResult, check_rate_limit

logger = structlog.get_logger("ratelimit")


def add_rate_limit_headers(response: Response, result: RateLimitResult) -> None:
    """Add rate limit headers to response.
    
    Args:
        response: Response to add headers to.
        result: Rate limit check result.
    """
    response.headers["X-RateLimit-Limit"] = str(result.limit)
    response.headers["X-RateLimit-Remaining"] = str(result.remaining)
    response.headers["X-RateLimit-Reset"] = str(result.reset_in_seconds)


def rate_limit_dependency(endpoint: str) -> Callable[..., Awaitable[RateLimitResult]]:
    """Build a dependency enforcing the quota of ``endpoint``.
    
    The dependency runs after authentication, so anonymous requests never
    touch the counters.
    
    Args:
        endpoint: Endpoint name used as the first half of the counter key.
        
    Returns:
        Dependency callable for ``Depends``.
    """
    
    async def enforce(
        response: Response,
        identity: Annotated[Identity, Depends(get_current_identity)],
    ) -> RateLimitResult:
        result = check_rate_limit(user_id=identity.user_id, endpoint=endpoint)
        
        if not result.allowed:
            logger.info(
                "rate_limit_exceeded",
                endpoint=endpoint,
                limit=result.limit,
                reset_in_seconds=result.reset_in_seconds,
            )
            raise RateLimitExceededError(
                endpoint=endpoint,
                limit=result.limit,
                retry_after=result.reset_in_seconds,
            )
        
        add_rate_limit_headers(response, result)
        log_stage(Stage.rate_checked, remaining=result.remaining)
        return result
    
    return enforce

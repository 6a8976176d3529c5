"""Mapping of internal failures to the stable external error taxonomy."""

from enum import Enum

from pydantic import BaseModel

from nutrigate.auth.exceptions import AuthenticationError
from nutrigate.exceptions import InvalidRequestError
from nutrigate.ratelimit.exceptions import RateLimitExceededError
from .exceptions import MalformedResponseError, UpstreamError, UpstreamHTTPError


class ErrorKind(str, Enum):
    unauthenticated = "Unauthenticated"
    validation = "ValidationError"
    rate_limited = "RateLimitError"
    upstream_quota = "UpstreamQuotaError"
    malformed_response = "MalformedResponse"
    upstream = "UpstreamError"


STATUS_CODES = {
    ErrorKind.unauthenticated: 401,
    ErrorKind.validation: 400,
    ErrorKind.rate_limited: 429,
    ErrorKind.upstream_quota: 500,
    ErrorKind.malformed_response: 500,
    ErrorKind.upstream: 500,
}

PUBLIC_MESSAGES = {
    ErrorKind.unauthenticated: "Unauthorized: Valid authentication required",
    ErrorKind.validation: "Invalid request",
    ErrorKind.rate_limited: "Too many requests, please try again later",
    ErrorKind.upstream_quota: "AI service is temporarily busy, please try again later",
    ErrorKind.malformed_response: "Invalid AI response format",
    ErrorKind.upstream: "AI service is temporarily unavailable, please try again later",
}

QUOTA_PATTERNS = ("quota", "rate limit", "too many requests", "429", "resource exhausted")
QUOTA_PROVIDER_STATUSES = frozenset({"RESOURCE_EXHAUSTED"})


class GatewayError(BaseModel):
    """Externally visible failure.

    Attributes:
        kind: Taxonomy entry.
        status_code: HTTP status for the kind.
        message: Client-safe message.
        retry_after_seconds: Back-off hint for quota errors.
    """

    kind: ErrorKind
    status_code: int
    message: str
    retry_after_seconds: int | None = None


def is_quota_signal(exc: Exception) -> bool:
    """Return True if a provider failure means "throttled, try later".

    Structured status codes are checked first; the error text is only
    pattern-matched as a fallback.
    """
    if isinstance(exc, UpstreamHTTPError):
        if exc.status_code == 429 or exc.provider_status in QUOTA_PROVIDER_STATUSES:
            return True
    text = str(exc).lower().replace("_", " ")
    return any(pattern in text for pattern in QUOTA_PATTERNS)


def _error(kind: ErrorKind, message: str | None = None, retry_after: int | None = None) -> GatewayError:
    return GatewayError(
        kind=kind,
        status_code=STATUS_CODES[kind],
        message=message or PUBLIC_MESSAGES[kind],
        retry_after_seconds=retry_after,
    )


def classify(exc: Exception) -> GatewayError:
    """Map a raised condition to a GatewayError.

    Only validation errors keep their own message, since the gateway wrote
    it. Everything else gets the fixed public message of its kind.
    """
    if isinstance(exc, AuthenticationError):
        return _error(ErrorKind.unauthenticated)
    if isinstance(exc, InvalidRequestError):
        return _error(ErrorKind.validation, exc.message)
    if isinstance(exc, RateLimitExceededError):
        return _error(ErrorKind.rate_limited, retry_after=exc.retry_after)
    if isinstance(exc, MalformedResponseError):
        return _error(ErrorKind.malformed_response)
    if isinstance(exc, UpstreamError):
        if is_quota_signal(exc):
            return _error(ErrorKind.upstream_quota)
        return _error(ErrorKind.upstream)
    return _error(ErrorKind.upstream)

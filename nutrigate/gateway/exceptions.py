"""Exceptions raised while talking to the model provider."""

from nutrigate.exceptions import NutriGateError


class UpstreamError(NutriGateError):
    """Base exception for model provider failures."""

    def __init__(self, message: str, code: str = "UPSTREAM_ERROR"):
        super().__init__(message=message, code=code)


class ModelNotConfiguredError(UpstreamError):
    """Raised when no provider API key is configured."""

    def __init__(self):
        super().__init__(message="GEMINI_API_KEY not configured", code="MODEL_NOT_CONFIGURED")


class UpstreamTimeoutError(UpstreamError):
    """Raised when the provider doesn't respond in time.

    Attributes:
        model: Model that was called.
        timeout_seconds: Timeout duration that was exceeded.
    """

    def __init__(self, model: str, timeout_seconds: float):
        super().__init__(
            message=f"Model '{model}' timed out after {timeout_seconds}s",
            code="UPSTREAM_TIMEOUT"
        )
        self.model = model
        self.timeout_seconds = timeout_seconds


class UpstreamUnavailableError(UpstreamError):
    """Raised when the provider is unreachable.

    Attributes:
        model: Model that was called.
        reason: Description of the transport failure.
    """

    def __init__(self, model: str, reason: str = "Connection failed"):
        super().__init__(
            message=f"Model '{model}' is unavailable: {reason}",
            code="UPSTREAM_UNAVAILABLE"
        )
        self.model = model
        self.reason = reason


class UpstreamHTTPError(UpstreamError):
    """Raised when the provider answers with a non-2xx status.

    Attributes:
        model: Model that was called.
        status_code: HTTP status code from the provider.
        provider_status: Provider's symbolic status (e.g. "RESOURCE_EXHAUSTED"), if any.
        detail: Truncated response body, for logs only.
    """

    def __init__(
        self,
        model: str,
        status_code: int,
        provider_status: str | None = None,
        detail: str = "",
    ):
        super().__init__(
            message=f"Model '{model}' returned error {status_code}: {detail}",
            code="UPSTREAM_HTTP_ERROR"
        )
        self.model = model
        self.status_code = status_code
        self.provider_status = provider_status
        self.detail = detail


class EmptyModelResponseError(UpstreamError):
    """Raised when the provider answers 2xx but without any candidate text."""

    def __init__(self, model: str, finish_reason: str | None = None):
        super().__init__(
            message=f"No response text from model '{model}' (finish reason: {finish_reason})",
            code="EMPTY_MODEL_RESPONSE"
        )
        self.model = model
        self.finish_reason = finish_reason


class MalformedResponseError(NutriGateError):
    """Raised when model output cannot be parsed into the expected shape."""

    def __init__(self, message: str = "Invalid AI response format"):
        super().__init__(message=message, code="MALFORMED_RESPONSE")

"""Base exception shared by every gateway component."""


class NutriGateError(Exception):
    """Base exception for all NutriGate errors.

    ``message`` is internal detail for logs. What the client sees is decided
    by the error classifier, never by this text.
    """

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


class InvalidRequestError(NutriGateError):
    """Raised when the request body is missing a field or is malformed."""

    def __init__(self, message: str):
        super().__init__(message=message, code="INVALID_REQUEST")


class MissingFieldError(InvalidRequestError):
    """Raised when a required body field is absent or empty.

    Attributes:
        field: Name of the missing field.
    """

    def __init__(self, field: str):
        super().__init__(message=f"Missing {field}")
        self.code = "MISSING_FIELD"
        self.field = field


class PayloadTooLargeError(InvalidRequestError):
    """Raised when a body field exceeds its size limit.

    Attributes:
        field: Name of the oversized field.
        size: Actual length.
        max_size: Maximum allowed length.
    """

    def __init__(self, field: str, size: int, max_size: int, message: str | None = None):
        super().__init__(message=message or f"{field} too large")
        self.code = "PAYLOAD_TOO_LARGE"
        self.field = field
        self.size = size
        self.max_size = max_size

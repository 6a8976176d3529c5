"""Exceptions for bearer-token authentication."""

from nutrigate.exceptions import NutriGateError


class AuthenticationError(NutriGateError):
    """Raised when a request cannot be tied to a verified identity."""
    pass


class UnauthenticatedError(AuthenticationError):
    """Raised when the bearer token is missing, malformed, expired or rejected.

    The reason is kept for logs only. Clients always receive the same 401.
    """

    def __init__(self, reason: str = "Unauthenticated"):
        super().__init__(message=reason, code="UNAUTHENTICATED")
        self.reason = reason

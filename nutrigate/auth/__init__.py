"""Auth module initialization."""

from .exceptions import AuthenticationError, UnauthenticatedError
from .models import Identity
from .verifier import AuthVerifier, RemoteIdentityVerifier, LocalJWTVerifier, build_verifier
from .dependencies import get_token_from_header, get_auth_verifier, get_current_identity

__all__ = [
    # Exceptions
    "AuthenticationError",
    "UnauthenticatedError",
    # Models
    "Identity",
    # Verifiers
    "AuthVerifier",
    "RemoteIdentityVerifier",
    "LocalJWTVerifier",
    "build_verifier",
    # Dependencies
    "get_token_from_header",
    "get_auth_verifier",
    "get_current_identity",
]

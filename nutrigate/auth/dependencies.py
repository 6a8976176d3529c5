"""FastAPI dependencies for authentication."""

from typing import Annotated

import httpx
import structlog
from fastapi import Depends, Header

from ..config import get_settings
from ..dependencies import get_http_client
from ..logging_config import Stage, log_stage
from .exceptions import UnauthenticatedError
from .models import Identity
from .verifier import AuthVerifier, build_verifier


async def get_token_from_header(authorization: Annotated[str | None, Header()] = None) -> str:
    """Extract the bearer token from the Authorization header.
    
    Args:
        authorization: Authorization header value (format: 'Bearer <token>').
        
    Returns:
        Token string.
        
    Raises:
        UnauthenticatedError: If header is missing or uses another scheme.
    """
    if not authorization:
        raise UnauthenticatedError("Missing Authorization header")
    
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise UnauthenticatedError("Invalid Authorization header format. Expected: 'Bearer <token>'")
    
    return parts[1]


async def get_auth_verifier(
    client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
) -> AuthVerifier:
    """Build the configured verifier around the shared HTTP client."""
    return build_verifier(get_settings(), client)


async def get_current_identity(
    token: Annotated[str, Depends(get_token_from_header)],
    verifier: Annotated[AuthVerifier, Depends(get_auth_verifier)],
) -> Identity:
    """Resolve the caller's identity.
    
    Args:
        token: Bearer token extracted from the Authorization header.
        verifier: Token verifier for the configured auth mode.
        
    Returns:
        Identity of the authenticated user.
        
    Raises:
        UnauthenticatedError: If the token does not verify.
    """
    identity = await verifier.verify(token)
    structlog.contextvars.bind_contextvars(user_id=identity.user_id)
    log_stage(Stage.authenticated)
    return identity

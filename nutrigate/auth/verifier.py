"""Bearer token verification against the identity service."""

import httpx
import structlog
from jose import JWTError, jwt

from ..config import Settings
from .exceptions import UnauthenticatedError
from .models import Identity

logger = structlog.get_logger("auth")


class AuthVerifier:
    """Resolves a bearer token to an Identity or raises UnauthenticatedError."""

    async def verify(self, token: str) -> Identity:
        raise NotImplementedError


class RemoteIdentityVerifier(AuthVerifier):
    """Asks the identity service who owns a token.

    The anon key identifies this gateway to the identity service; it can only
    validate tokens, never mint them. Failures are never retried here.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        anon_key: str,
        timeout: float = 10.0,
    ):
        """Initialize the verifier.

        Args:
            client: Shared HTTP client.
            base_url: Identity service base URL (e.g. https://<project>.supabase.co).
            anon_key: Public anon key sent as the ``apikey`` header.
            timeout: Per-call timeout in seconds.
        """
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.anon_key = anon_key
        self.timeout = timeout

    async def verify(self, token: str) -> Identity:
        """Verify a token with ``GET /auth/v1/user``.

        Args:
            token: Bearer token without the scheme.

        Returns:
            Identity of the token owner.

        Raises:
            UnauthenticatedError: On any verification failure.
        """
        if not self.base_url or not self.anon_key:
            logger.error("identity_service_not_configured")
            raise UnauthenticatedError("Identity service not configured")

        try:
            response = await self.client.get(
                f"{self.base_url}/auth/v1/user",
                headers={
                    "apikey": self.anon_key,
                    "Authorization": f"Bearer {token}",
                },
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            logger.warning("identity_service_unreachable", error=type(e).__name__)
            raise UnauthenticatedError("Identity service unreachable") from e

        if response.status_code != 200:
            raise UnauthenticatedError(f"Identity service rejected token ({response.status_code})")

        try:
            data = response.json()
        except ValueError as e:
            raise UnauthenticatedError("Identity service returned invalid JSON") from e

        if not isinstance(data, dict) or not data.get("id"):
            raise UnauthenticatedError("Identity service response missing user id")

        return Identity(user_id=str(data["id"]), email=data.get("email"))


class LocalJWTVerifier(AuthVerifier):
    """Verifies identity-service JWTs offline with the shared signing secret."""

    def __init__(self, secret: str, algorithms: list[str], audience: str | None = None):
        self.secret = secret
        self.algorithms = algorithms
        self.audience = audience

    async def verify(self, token: str) -> Identity:
        if not self.secret:
            logger.error("jwt_secret_not_configured")
            raise UnauthenticatedError("JWT secret not configured")

        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=self.algorithms,
                audience=self.audience,
                options={
                    "verify_signature": True,
                    "verify_exp": True,
                    "verify_aud": bool(self.audience),
                    "require_exp": True,
                    "require_sub": True,
                },
            )
        except jwt.ExpiredSignatureError as e:
            raise UnauthenticatedError("JWT token has expired") from e
        except JWTError as e:
            raise UnauthenticatedError(f"Invalid JWT token: {e}") from e

        user_id = payload.get("sub")
        if not user_id:
            raise UnauthenticatedError("JWT token missing required 'sub' claim")

        return Identity(user_id=str(user_id), email=payload.get("email"))


def _parse_algorithms(raw: str) -> list[str]:
    items = [item.strip().upper() for item in raw.split(",") if item.strip()]
    if not items or "NONE" in items:
        raise UnauthenticatedError("JWT algorithms misconfigured")
    return items


def build_verifier(settings: Settings, client: httpx.AsyncClient) -> AuthVerifier:
    """Build the verifier selected by ``AUTH_MODE``."""
    mode = settings.AUTH_MODE.strip().lower()
    if mode == "jwt":
        return LocalJWTVerifier(
            secret=settings.SUPABASE_JWT_SECRET,
            algorithms=_parse_algorithms(settings.JWT_ALGORITHM),
            audience=settings.JWT_AUDIENCE or None,
        )
    return RemoteIdentityVerifier(
        client=client,
        base_url=settings.SUPABASE_URL,
        anon_key=settings.SUPABASE_ANON_KEY,
        timeout=settings.AUTH_TIMEOUT_SECONDS,
    )

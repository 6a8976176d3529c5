"""HTTP middleware: CORS preflight short-circuit and request correlation."""

import uuid
from typing import Callable

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import PlainTextResponse

from .logging_config import Stage, log_stage


CORS_ALLOW_HEADERS = "authorization, x-client-info, apikey, content-type, x-request-id"
CORS_ALLOW_METHODS = "POST, GET, OPTIONS"


def cors_headers(allow_origin: str) -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Headers": CORS_ALLOW_HEADERS,
        "Access-Control-Allow-Methods": CORS_ALLOW_METHODS,
    }


class CORSPreflightMiddleware(BaseHTTPMiddleware):
    """Answers every OPTIONS request without auth and adds CORS headers to all responses.

    The wildcard origin is acceptable while the only consumer is a native
    mobile client and every non-OPTIONS request requires a bearer token.
    """

    def __init__(self, app, allow_origin: str = "*"):
        super().__init__(app)
        self.headers = cors_headers(allow_origin)

    async def dispatch(self, request: Request, call_next: Callable):
        if request.method == "OPTIONS":
            return PlainTextResponse("ok", headers=self.headers)

        response = await call_next(request)
        response.headers.update(self.headers)
        return response


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Binds a request id to the log context and echoes it as ``X-Request-ID``."""

    async def dispatch(self, request: Request, call_next: Callable):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        request.state.request_id = request_id

        if request.url.path != "/health":
            log_stage(Stage.received)

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

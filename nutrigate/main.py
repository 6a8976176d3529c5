import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from .config import get_settings
from .exceptions import NutriGateError
from .logging_config import Stage, configure_logging, log_stage
from .middleware import CORSPreflightMiddleware, RequestContextMiddleware
from .gateway.router import router as gateway_router
from .gateway.classifier import GatewayError, classify
from .gateway.schemas import ErrorResponse
from .ratelimit import RateLimitExceededError

settings = get_settings()
logger = structlog.get_logger("gateway")

@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.LOG_LEVEL, json_logs=settings.LOG_JSON)

    # Shared client for the identity service and the model provider.
    # timeout=None removes the global default, every call passes its own deadline.
    app.state.http_client = httpx.AsyncClient(timeout=None)
    logger.info("gateway_started", app=settings.APP_NAME)

    yield

    await app.state.http_client.aclose()

app = FastAPI(
    title=settings.APP_NAME,
    lifespan=lifespan,
    debug=settings.DEBUG
)

app.add_middleware(RequestContextMiddleware)
# Added last so it is outermost: preflight never reaches auth or logging
app.add_middleware(CORSPreflightMiddleware, allow_origin=settings.CORS_ALLOW_ORIGIN)


def error_response(error: GatewayError) -> JSONResponse:
    body = ErrorResponse(error=error.message, retry_after_seconds=error.retry_after_seconds)
    return JSONResponse(
        status_code=error.status_code,
        content=body.model_dump(exclude_none=True),
    )


# Global exception handlers
@app.exception_handler(RateLimitExceededError)
async def rate_limit_handler(request: Request, exc: RateLimitExceededError):
    error = classify(exc)
    log_stage(Stage.failed, kind=error.kind.value, code=exc.code)
    response = error_response(error)
    response.headers["Retry-After"] = str(exc.retry_after)
    response.headers["X-RateLimit-Remaining"] = "0"
    return response


@app.exception_handler(NutriGateError)
async def gateway_exception_handler(request: Request, exc: NutriGateError):
    error = classify(exc)
    # exc.message may carry provider detail; it goes to logs, never to the client
    log_stage(
        Stage.failed,
        level="warning",
        kind=error.kind.value,
        code=exc.code,
        reason=exc.message,
    )
    return error_response(error)


@app.exception_handler(Exception)
async def unexpected_exception_handler(request: Request, exc: Exception):
    error = classify(exc)
    log_stage(Stage.failed, level="exception", kind=error.kind.value, error=type(exc).__name__)
    return error_response(error)


@app.get("/health")
async def health_check():
    return {"status": "ok", "app": settings.APP_NAME}

# Include routers
app.include_router(gateway_router)

"""FastAPI router for the AI gateway endpoints."""

from typing import Annotated

import httpx
from fastapi import APIRouter, Depends, Request

from nutrigate.auth.dependencies import get_current_identity
from nutrigate.auth.models import Identity
from nutrigate.dependencies import get_http_client
from nutrigate.logging_config import Stage, log_stage
from nutrigate.ratelimit import (
    ENDPOINT_ANALYZE_FOOD,
    ENDPOINT_CHAT,
    RateLimitResult,
    rate_limit_dependency,
)

from .schemas import AnalyzeFoodRequest, AnalyzeFoodResponse, ChatReply, ChatRequest, ChatResponse
from .service import analyze_food, chat, read_body


router = APIRouter(tags=["gateway"])


@router.post("/analyze-food", response_model=AnalyzeFoodResponse)
async def analyze_food_endpoint(
    http_request: Request,
    identity: Annotated[Identity, Depends(get_current_identity)],
    rate_limit: Annotated[RateLimitResult, Depends(rate_limit_dependency(ENDPOINT_ANALYZE_FOOD))],
    client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
) -> AnalyzeFoodResponse:
    """Analyse a food photo and return its nutrition.

    Body: ``{"image_base64": str, "meal_type": str | null}``. The body is
    read only after the caller is authenticated and within quota.
    """
    body = await read_body(http_request, AnalyzeFoodRequest)
    result = await analyze_food(client=client, identity=identity, request=body)
    log_stage(Stage.responded, remaining=rate_limit.remaining)
    return AnalyzeFoodResponse(data=result)


@router.post("/chat", response_model=ChatResponse)
async def chat_endpoint(
    http_request: Request,
    identity: Annotated[Identity, Depends(get_current_identity)],
    rate_limit: Annotated[RateLimitResult, Depends(rate_limit_dependency(ENDPOINT_CHAT))],
    client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
) -> ChatResponse:
    """Continue a nutrition chat.

    Body: ``{"message": str, "history": [{"role", "content"}], "context": {...}}``.
    """
    body = await read_body(http_request, ChatRequest)
    reply = await chat(client=client, identity=identity, request=body)
    log_stage(Stage.responded, remaining=rate_limit.remaining)
    return ChatResponse(data=ChatReply(message=reply))

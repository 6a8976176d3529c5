"""Request orchestration for the analysis and chat use cases.

Authentication and rate limiting have already run as route dependencies when
these functions are called. The remaining stages run in a fixed order:
validate, sanitize, invoke, parse. Any stage may raise; nothing is retried.
"""

import json
from typing import TypeVar

import httpx
from fastapi import Request
from pydantic import BaseModel, ValidationError

from nutrigate.auth.models import Identity
from nutrigate.config import Settings, get_settings
from nutrigate.exceptions import InvalidRequestError, MissingFieldError, PayloadTooLargeError
from nutrigate.logging_config import Stage, log_stage
from .invoker import analyze_food_image, chat_completion
from .parser import parse_analysis_result
from .prompts import build_analysis_prompt, build_chat_instructions
from .sanitizer import (
    sanitize_chat_history,
    sanitize_meal_type,
    sanitize_user_goal,
    sanitize_user_input,
)
from .schemas import AnalysisResult, AnalyzeFoodRequest, ChatRequest

BodyT = TypeVar("BodyT", bound=BaseModel)

# Room for JSON framing and the small fields sent alongside the image
BODY_OVERHEAD_BYTES = 64 * 1024


async def _read_capped(request: Request, max_bytes: int) -> bytes:
    """Read the raw body, giving up as soon as it exceeds ``max_bytes``."""
    declared = request.headers.get("content-length")
    if declared is not None:
        try:
            declared_size = int(declared)
        except ValueError as e:
            raise InvalidRequestError("Invalid Content-Length header") from e
        if declared_size > max_bytes:
            raise PayloadTooLargeError(
                field="body", size=declared_size, max_size=max_bytes, message="Request body too large"
            )

    chunks = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > max_bytes:
            raise PayloadTooLargeError(
                field="body", size=received, max_size=max_bytes, message="Request body too large"
            )
        chunks.append(chunk)
    return b"".join(chunks)


async def read_body(request: Request, model: type[BodyT], max_bytes: int | None = None) -> BodyT:
    """Parse and validate the JSON body after auth and rate limiting ran.

    Args:
        request: Incoming request.
        model: Body schema.
        max_bytes: Body size cap. Defaults to the image limit plus framing.

    Raises:
        PayloadTooLargeError: If the body is larger than ``max_bytes``.
        InvalidRequestError: If the body isn't JSON or doesn't match ``model``.
    """
    if max_bytes is None:
        max_bytes = get_settings().MAX_IMAGE_BASE64_LENGTH + BODY_OVERHEAD_BYTES

    raw = await _read_capped(request, max_bytes)
    try:
        payload = json.loads(raw)
    except ValueError as e:
        raise InvalidRequestError("Invalid JSON body") from e

    if not isinstance(payload, dict):
        raise InvalidRequestError("Request body must be a JSON object")

    try:
        return model.model_validate(payload)
    except ValidationError as e:
        fields = sorted({".".join(str(loc) for loc in err["loc"]) for err in e.errors()})
        raise InvalidRequestError(f"Invalid request body: {', '.join(fields)}") from e


def validate_image_payload(image_base64: str | None, max_length: int) -> str:
    """Check presence and encoded size of the image before anything else touches it.

    Raises:
        MissingFieldError: If the image is absent or empty.
        PayloadTooLargeError: If the encoded image exceeds ``max_length``.
    """
    if not image_base64:
        raise MissingFieldError("image_base64")
    if len(image_base64) > max_length:
        raise PayloadTooLargeError(
            field="image_base64",
            size=len(image_base64),
            max_size=max_length,
            message="Image too large",
        )
    return image_base64


async def analyze_food(
    client: httpx.AsyncClient,
    identity: Identity,
    request: AnalyzeFoodRequest,
    settings: Settings | None = None,
) -> AnalysisResult:
    """Analyse one food photo on behalf of ``identity``.

    Args:
        client: Shared HTTP client.
        identity: Authenticated caller.
        request: Validated request body.
        settings: Settings override.

    Returns:
        Validated analysis result.

    Raises:
        InvalidRequestError: If the image is missing or too large.
        UpstreamError: If the model call fails.
        MalformedResponseError: If the model output can't be parsed.
    """
    settings = settings or get_settings()
    image_base64 = validate_image_payload(request.image_base64, settings.MAX_IMAGE_BASE64_LENGTH)

    meal_type = sanitize_meal_type(request.meal_type)
    log_stage(Stage.sanitized, image_chars=len(image_base64), meal_type=meal_type)

    raw_text = await analyze_food_image(
        client,
        image_base64=image_base64,
        instructions=build_analysis_prompt(meal_type),
        settings=settings,
    )
    log_stage(Stage.invoked, output_chars=len(raw_text))

    result = parse_analysis_result(raw_text)
    log_stage(Stage.parsed, confidence=result.confidence, clarification=result.clarification is not None)
    return result


async def chat(
    client: httpx.AsyncClient,
    identity: Identity,
    request: ChatRequest,
    settings: Settings | None = None,
) -> str:
    """Produce the assistant's next chat turn for ``identity``.

    History is truncated to the most recent ``MAX_CHAT_HISTORY_TURNS`` turns
    so the prompt cannot grow without bound.

    Raises:
        MissingFieldError: If the message is absent or empty after sanitizing.
        UpstreamError: If the model call fails.
    """
    settings = settings or get_settings()
    if not request.message or not request.message.strip():
        raise MissingFieldError("message")

    message = sanitize_user_input(request.message)
    if not message:
        raise MissingFieldError("message")

    history = sanitize_chat_history(request.history, max_turns=settings.MAX_CHAT_HISTORY_TURNS)
    user_goal = sanitize_user_goal(request.context.user_goal) if request.context else None
    log_stage(
        Stage.sanitized,
        message_chars=len(message),
        history_turns=len(history),
        dropped_turns=len(request.history) - len(history),
    )

    reply = await chat_completion(
        client,
        instructions=build_chat_instructions(request.context, user_goal),
        history=history,
        message=message,
        settings=settings,
    )
    log_stage(Stage.invoked, output_chars=len(reply))
    return reply

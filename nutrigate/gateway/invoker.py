"""HTTP client for the generative model provider (Gemini ``generateContent``)."""

from typing import Any

import httpx
import structlog

from nutrigate.config import Settings, get_settings
from .exceptions import (
    EmptyModelResponseError,
    ModelNotConfiguredError,
    UpstreamHTTPError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)
from .prompts import (
    ANALYSIS_GENERATION_CONFIG,
    CHAT_ACKNOWLEDGEMENT,
    CHAT_GENERATION_CONFIG,
    CHAT_SAFETY_SETTINGS,
)
from .schemas import ChatTurn

logger = structlog.get_logger("gateway.invoker")


# Default deadline for one model call
DEFAULT_TIMEOUT_SECONDS = 30.0


def _provider_status(response: httpx.Response) -> str | None:
    """Read the symbolic status from a provider error body, if present."""
    try:
        body = response.json()
    except ValueError:
        return None
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and isinstance(error.get("status"), str):
        return error["status"]
    return None


def extract_candidate_text(result: Any) -> str | None:
    """Concatenate the text parts of the first candidate."""
    if not isinstance(result, dict):
        return None
    candidates = result.get("candidates") or []
    if not candidates or not isinstance(candidates[0], dict):
        return None
    content = candidates[0].get("content")
    if not isinstance(content, dict) or not isinstance(content.get("parts"), list):
        return None
    parts = content["parts"]
    texts = [part["text"] for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str)]
    text = "".join(texts)
    return text or None


async def invoke_model(
    client: httpx.AsyncClient,
    model: str,
    contents: list[dict[str, Any]],
    generation_config: dict[str, Any],
    safety_settings: list[dict[str, str]] | None = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    settings: Settings | None = None,
) -> str:
    """Send one ``generateContent`` request and return the candidate text.

    Args:
        client: Shared HTTP client.
        model: Model identifier, e.g. "gemini-2.5-flash".
        contents: Conversation turns in provider format.
        generation_config: Sampling parameters.
        safety_settings: Optional provider safety thresholds.
        timeout: Deadline for the whole call in seconds.
        settings: Settings override (API key, base URL).

    Returns:
        Raw model output text.

    Raises:
        ModelNotConfiguredError: If no API key is configured.
        UpstreamTimeoutError: If the provider doesn't respond in time.
        UpstreamUnavailableError: If the connection fails.
        UpstreamHTTPError: If the provider returns a non-2xx status.
        EmptyModelResponseError: If the response holds no text.
    """
    settings = settings or get_settings()
    if not settings.GEMINI_API_KEY:
        raise ModelNotConfiguredError()

    url = f"{settings.GEMINI_BASE_URL.rstrip('/')}/models/{model}:generateContent"
    body: dict[str, Any] = {
        "contents": contents,
        "generationConfig": generation_config,
    }
    if safety_settings:
        body["safetySettings"] = safety_settings

    try:
        response = await client.post(
            url,
            json=body,
            headers={
                "Content-Type": "application/json",
                "x-goog-api-key": settings.GEMINI_API_KEY,
            },
            timeout=timeout,
        )
    except httpx.TimeoutException:
        raise UpstreamTimeoutError(model=model, timeout_seconds=timeout)
    except httpx.ConnectError as e:
        raise UpstreamUnavailableError(model=model, reason=str(e))
    except httpx.RequestError as e:
        raise UpstreamUnavailableError(model=model, reason=f"Request failed: {e}")

    if response.status_code >= 400:
        raise UpstreamHTTPError(
            model=model,
            status_code=response.status_code,
            provider_status=_provider_status(response),
            detail=response.text[:200],  # Truncate for safety
        )

    try:
        result = response.json()
    except ValueError:
        raise EmptyModelResponseError(model=model, finish_reason="invalid_json")

    text = extract_candidate_text(result)
    if text is None:
        candidates = result.get("candidates") if isinstance(result, dict) else None
        finish_reason = None
        if candidates and isinstance(candidates[0], dict):
            finish_reason = candidates[0].get("finishReason")
        raise EmptyModelResponseError(model=model, finish_reason=finish_reason)

    logger.debug("model_invoked", model=model, output_chars=len(text))
    return text


async def analyze_food_image(
    client: httpx.AsyncClient,
    image_base64: str,
    instructions: str,
    settings: Settings | None = None,
) -> str:
    """Ask the vision model to analyse one food photo."""
    settings = settings or get_settings()
    contents = [
        {
            "role": "user",
            "parts": [
                {"inline_data": {"mime_type": "image/jpeg", "data": image_base64}},
                {"text": instructions},
            ],
        }
    ]
    return await invoke_model(
        client,
        model=settings.ANALYSIS_MODEL,
        contents=contents,
        generation_config=ANALYSIS_GENERATION_CONFIG,
        timeout=settings.MODEL_TIMEOUT_SECONDS,
        settings=settings,
    )


def build_chat_contents(instructions: str, history: list[ChatTurn], message: str) -> list[dict[str, Any]]:
    """Lay out a conversation in provider format.

    The provider has no system role, so the instructions go first as a user
    turn followed by a canned model acknowledgement.
    """
    contents = [
        {"role": "user", "parts": [{"text": instructions}]},
        {"role": "model", "parts": [{"text": CHAT_ACKNOWLEDGEMENT}]},
    ]
    for turn in history:
        contents.append({
            "role": "user" if turn.role == "user" else "model",
            "parts": [{"text": turn.content}],
        })
    contents.append({"role": "user", "parts": [{"text": message}]})
    return contents


async def chat_completion(
    client: httpx.AsyncClient,
    instructions: str,
    history: list[ChatTurn],
    message: str,
    settings: Settings | None = None,
) -> str:
    """Ask the chat model for the next assistant turn."""
    settings = settings or get_settings()
    return await invoke_model(
        client,
        model=settings.CHAT_MODEL,
        contents=build_chat_contents(instructions, history, message),
        generation_config=CHAT_GENERATION_CONFIG,
        safety_settings=CHAT_SAFETY_SETTINGS,
        timeout=settings.MODEL_TIMEOUT_SECONDS,
        settings=settings,
    )

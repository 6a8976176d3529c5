"""Gateway module - model invocation, parsing and error classification."""

from .schemas import (
    AnalyzeFoodRequest,
    AnalyzeFoodResponse,
    AnalysisResult,
    ChatContext,
    ChatReply,
    ChatRequest,
    ChatResponse,
    ChatTurn,
    Clarification,
    ErrorResponse,
    NutritionFacts,
)
from .exceptions import (
    UpstreamError,
    ModelNotConfiguredError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
    UpstreamHTTPError,
    EmptyModelResponseError,
    MalformedResponseError,
)
from .classifier import ErrorKind, GatewayError, classify, is_quota_signal
from .parser import extract_json_object, parse_analysis_result
from .service import analyze_food, chat
from .router import router


__all__ = [
    # Schemas
    "AnalyzeFoodRequest",
    "AnalyzeFoodResponse",
    "AnalysisResult",
    "ChatContext",
    "ChatReply",
    "ChatRequest",
    "ChatResponse",
    "ChatTurn",
    "Clarification",
    "ErrorResponse",
    "NutritionFacts",
    # Exceptions
    "UpstreamError",
    "ModelNotConfiguredError",
    "UpstreamTimeoutError",
    "UpstreamUnavailableError",
    "UpstreamHTTPError",
    "EmptyModelResponseError",
    "MalformedResponseError",
    # Classification
    "ErrorKind",
    "GatewayError",
    "classify",
    "is_quota_signal",
    # Parsing
    "extract_json_object",
    "parse_analysis_result",
    # Service
    "analyze_food",
    "chat",
    # Router
    "router",
]

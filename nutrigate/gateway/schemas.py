"""Pydantic schemas for gateway requests, model results and response envelopes."""

import math
from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, StringConstraints, model_validator


def _non_negative_number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("must be a number")
    if not math.isfinite(value):
        raise ValueError("must be finite")
    return max(0.0, float(value))


def _unit_interval(value: Any) -> float:
    return min(1.0, _non_negative_number(value))


NonNegativeNumber = Annotated[float, BeforeValidator(_non_negative_number)]
UnitInterval = Annotated[float, BeforeValidator(_unit_interval)]


# --- Requests ---------------------------------------------------------------

class AnalyzeFoodRequest(BaseModel):
    """Body of ``POST /analyze-food``.

    Attributes:
        image_base64: Base64-encoded JPEG of the meal.
        meal_type: Optional meal category hint (untrusted free text).
    """

    image_base64: str | None = Field(default=None, description="Base64-encoded food photo")
    meal_type: str | None = Field(default=None, description="Meal category hint")


class ChatTurn(BaseModel):
    """One prior message of the conversation, supplied by the client."""

    role: Literal["user", "assistant"]
    content: str


class DailyNutrition(BaseModel):
    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0


class TargetRange(BaseModel):
    min: float = 0
    max: float = 0


class DailyTargets(BaseModel):
    calories: TargetRange = Field(default_factory=TargetRange)
    protein: TargetRange = Field(default_factory=TargetRange)
    carbs: TargetRange = Field(default_factory=TargetRange)
    fat: TargetRange = Field(default_factory=TargetRange)


class ChatContext(BaseModel):
    """Optional user context the chat instructions are personalised with."""

    daily_nutrition: DailyNutrition | None = None
    daily_targets: DailyTargets | None = None
    user_goal: str | None = None


class ChatRequest(BaseModel):
    """Body of ``POST /chat``.

    Attributes:
        message: The user's new message.
        history: Prior turns, oldest first. Read-only context.
        context: Today's intake, targets and goal.
    """

    message: str | None = Field(default=None, description="User message")
    history: list[ChatTurn] = Field(default_factory=list, description="Conversation so far")
    context: ChatContext | None = Field(default=None, description="User nutrition context")


# --- Model results ----------------------------------------------------------

class NutritionFacts(BaseModel):
    """Nutrients of the analysed portion. All values are non-negative."""

    calories: NonNegativeNumber
    protein_g: NonNegativeNumber = Field(..., alias="protein")
    carbs_g: NonNegativeNumber = Field(..., alias="carbs")
    fat_g: NonNegativeNumber = Field(..., alias="fat")
    fiber_g: NonNegativeNumber = Field(..., alias="fiber")
    sodium_mg: NonNegativeNumber = Field(..., alias="sodium")

    model_config = ConfigDict(populate_by_name=True)


class Clarification(BaseModel):
    """A follow-up question the model asks when it is unsure about the food."""

    question: str
    options: list[str]


class AnalysisResult(BaseModel):
    """Validated food analysis.

    Aliases are the field names the model is asked to produce and the mobile
    client consumes.
    """

    food_name: Annotated[str, StringConstraints(strict=True, strip_whitespace=True, min_length=1)]
    portion_grams: NonNegativeNumber = Field(..., alias="portion_size_grams")
    nutrition: NutritionFacts
    confidence: UnitInterval
    clarification: Clarification | None = Field(default=None, alias="clarification_needed")

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _keep_complete_clarification(cls, data: Any) -> Any:
        """Drop the clarification unless it has both a question and options."""
        if not isinstance(data, dict):
            return data
        key = "clarification_needed" if "clarification_needed" in data else "clarification"
        raw = data.get(key)
        if raw is None or isinstance(raw, Clarification):
            return data

        data = dict(data)
        question = raw.get("question") if isinstance(raw, dict) else None
        options = raw.get("options") if isinstance(raw, dict) else None
        if isinstance(options, list):
            options = [option for option in options if isinstance(option, str) and option.strip()]
        if isinstance(question, str) and question.strip() and options:
            data[key] = {"question": question, "options": options}
        else:
            data[key] = None
        return data


# --- Response envelopes -----------------------------------------------------

class AnalyzeFoodResponse(BaseModel):
    success: Literal[True] = True
    data: AnalysisResult


class ChatReply(BaseModel):
    message: str


class ChatResponse(BaseModel):
    success: Literal[True] = True
    data: ChatReply


class ErrorResponse(BaseModel):
    """Uniform failure envelope. Never carries provider text or credentials."""

    success: Literal[False] = False
    error: str
    retry_after_seconds: int | None = None

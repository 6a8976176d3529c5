"""Extraction of structured results from free-form model output."""

import json

from pydantic import ValidationError

from .exceptions import MalformedResponseError
from .schemas import AnalysisResult


def extract_json_object(text: str) -> str:
    """Return the first balanced ``{...}`` substring of ``text``.

    Models asked for JSON often wrap it in prose or code fences. Braces inside
    string literals are ignored while scanning.

    Args:
        text: Raw model output.

    Returns:
        The candidate JSON object text.

    Raises:
        MalformedResponseError: If no balanced object is found.
    """
    in_str = False
    escaped = False
    depth = 0
    start_idx: int | None = None

    for i, ch in enumerate(text):
        if start_idx is None:
            if ch == "{":
                start_idx = i
                depth = 1
            continue

        if in_str:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == "\"":
                in_str = False
            continue

        if ch == "\"":
            in_str = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start_idx : i + 1]

    raise MalformedResponseError("Model output does not contain a JSON object")


def parse_analysis_result(text: str) -> AnalysisResult:
    """Parse model output into a validated AnalysisResult.

    Only structure is enforced: required fields and primitive types, numbers
    clamped non-negative and confidence into [0, 1]. Implausible but
    well-formed values pass through.

    Raises:
        MalformedResponseError: If no object is found, it isn't valid JSON,
            or it doesn't have the expected shape.
    """
    candidate = extract_json_object(text)

    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"Model output is not valid JSON: {e.msg}") from e

    if not isinstance(data, dict):
        raise MalformedResponseError("Model output is not a JSON object")

    try:
        return AnalysisResult.model_validate(data)
    except ValidationError as e:
        fields = sorted({".".join(str(loc) for loc in err["loc"]) for err in e.errors()})
        raise MalformedResponseError(f"Model output failed validation: {', '.join(fields)}") from e

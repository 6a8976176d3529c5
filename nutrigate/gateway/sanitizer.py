"""Defanging of untrusted text before it is embedded into a model prompt.

Allow-lists are used wherever the value space is small. Everything else is
stripped of known instruction markers and truncated. This is a best-effort
mitigation against prompt injection, not a guarantee.
"""

import re

from .schemas import ChatTurn

MEAL_TYPES = frozenset({
    "breakfast", "lunch", "dinner", "snack",
    "早餐", "午餐", "晚餐", "小食",
})

USER_GOALS = frozenset({"lose_weight", "gain_weight", "maintain", "build_muscle"})

MAX_HINT_LENGTH = 50
MAX_MESSAGE_LENGTH = 2000
MAX_HISTORY_CONTENT_LENGTH = 1500

_INSTRUCTION_MARKERS = re.compile(r"\[SYSTEM\]|\[/?INST\]|<<SYS>>|</s>", re.IGNORECASE)
_HINT_FORBIDDEN = re.compile(r"```|[<>{}]")
_SYSTEM_FENCE = re.compile(r"```system", re.IGNORECASE)
_CODE_BLOCK = re.compile(r"```[\s\S]*?```")
_ROLE_PREFIX = re.compile(r"^[ \t]*(system|assistant|model)[ \t]*:", re.IGNORECASE | re.MULTILINE)
_SUSPICIOUS_CODE_WORDS = ("ignore", "system", "instruction")


def _strip_until_stable(text: str, *patterns: re.Pattern) -> str:
    # Removing one marker can splice two halves into a new one ("[SYS[SYSTEM]TEM]")
    previous = None
    while previous != text:
        previous = text
        for pattern in patterns:
            text = pattern.sub("", text)
    return text


def _defang_hint(value: str, allowed: frozenset, max_length: int) -> str | None:
    cleaned = _strip_until_stable(value, _INSTRUCTION_MARKERS, _HINT_FORBIDDEN)
    cleaned = cleaned.strip()[:max_length].strip()
    if cleaned.lower() in allowed:
        return cleaned.lower()
    return cleaned or None


def sanitize_meal_type(meal_type: str | None, max_length: int = MAX_HINT_LENGTH) -> str | None:
    """Return a prompt-safe meal type hint, or None when nothing usable is left.

    Known meal types (case-insensitive, trimmed) map to their canonical
    lower-case form. Anything else is defanged and truncated.
    """
    if not meal_type:
        return None

    normalized = meal_type.strip().lower()
    if normalized in MEAL_TYPES:
        return normalized

    return _defang_hint(meal_type, MEAL_TYPES, max_length)


def sanitize_user_goal(goal: str | None, max_length: int = MAX_HINT_LENGTH) -> str | None:
    """Same policy as :func:`sanitize_meal_type` for the chat goal hint."""
    if not goal:
        return None

    normalized = goal.strip().lower()
    if normalized in USER_GOALS:
        return normalized

    return _defang_hint(goal, USER_GOALS, max_length)


def _neutralize_code_block(match: re.Match) -> str:
    block = match.group(0)
    lowered = block.lower()
    if any(word in lowered for word in _SUSPICIOUS_CODE_WORDS):
        return "[code removed]"
    return block


def sanitize_user_input(text: str, max_length: int = MAX_MESSAGE_LENGTH) -> str:
    """Strip injection markers and role overrides from free chat text.

    Fenced code blocks survive unless they mention instructions, in which
    case they are replaced by a placeholder.

    Args:
        text: Raw user text.
        max_length: Maximum length of the result.

    Returns:
        Sanitized text, possibly empty.
    """
    cleaned = _strip_until_stable(text, _INSTRUCTION_MARKERS, _SYSTEM_FENCE, _ROLE_PREFIX)
    cleaned = _CODE_BLOCK.sub(_neutralize_code_block, cleaned)
    return cleaned.strip()[:max_length]


def sanitize_chat_history(
    history: list[ChatTurn] | None,
    max_turns: int,
    max_length: int = MAX_HISTORY_CONTENT_LENGTH,
) -> list[ChatTurn]:
    """Keep the most recent ``max_turns`` turns and sanitize their content.

    Turns that are empty after sanitizing are dropped.
    """
    if not history or max_turns <= 0:
        return []

    sanitized = []
    for turn in history[-max_turns:]:
        content = sanitize_user_input(turn.content, max_length)
        if content:
            sanitized.append(ChatTurn(role=turn.role, content=content))
    return sanitized

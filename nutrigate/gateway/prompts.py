"""Instruction text and generation parameters for each use case."""

from .schemas import ChatContext

ANALYSIS_GENERATION_CONFIG = {
    "temperature": 0.1,
    "maxOutputTokens": 1024,
}

CHAT_GENERATION_CONFIG = {
    "temperature": 0.7,
    "maxOutputTokens": 1024,
    "topP": 0.8,
}

CHAT_SAFETY_SETTINGS = [
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_ONLY_HIGH"},
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_ONLY_HIGH"},
]

CHAT_ACKNOWLEDGEMENT = "Understood! I'm your AI nutrition assistant. How can I help?"

GOAL_LABELS = {
    "lose_weight": "lose weight",
    "gain_weight": "gain weight",
    "maintain": "maintain current weight",
    "build_muscle": "build muscle",
}

_ANALYSIS_TEMPLATE = """You are a professional dietitian assistant. Analyse the food in this photo and provide:

1. The food name
2. Estimated portion size in grams
3. Nutrition for that portion: calories (kcal), protein (g), carbohydrates (g), fat (g), fiber (g), sodium (mg)
4. Your confidence in the identification, between 0 and 1
{meal_hint}
If you are unsure what the food is, include one clarification question with a few options.

Reply with JSON only, in exactly this shape:
{{
  "food_name": "name",
  "portion_size_grams": number,
  "nutrition": {{
    "calories": number,
    "protein": number,
    "carbs": number,
    "fat": number,
    "fiber": number,
    "sodium": number
  }},
  "confidence": number between 0 and 1,
  "clarification_needed": null or {{"question": "question", "options": ["option 1", "option 2"]}}
}}"""

_CHAT_TEMPLATE = """You are NutriTrack's AI nutrition assistant, helping users manage their diet and nutrition.

Your role:
- Give nutrition advice and knowledge
- Recommend foods based on what the user has eaten today
- Answer questions about diet, nutrients and health
- Reply in the language the user writes in

Guidelines:
- For medical questions, recommend consulting a doctor
- Keep advice practical and specific
- Stay friendly and encouraging
{context}"""


def build_analysis_prompt(meal_type: str | None = None) -> str:
    """Instructions for the food photo analysis. ``meal_type`` must already be sanitized."""
    meal_hint = f"\nThe user says this is their {meal_type}.\n" if meal_type else ""
    return _ANALYSIS_TEMPLATE.format(meal_hint=meal_hint)


def format_chat_context(context: ChatContext | None, user_goal: str | None = None) -> str:
    """Render today's intake and the user's goal as plain text.

    Args:
        context: Client-supplied nutrition context.
        user_goal: Sanitized goal hint; overrides ``context.user_goal``.
    """
    if context is None:
        return ""

    parts: list[str] = []

    if context.daily_nutrition and context.daily_targets:
        n = context.daily_nutrition
        t = context.daily_targets
        parts.append(
            "User's intake today:\n"
            f"- Calories: {n.calories:g}/{t.calories.max:g} kcal\n"
            f"- Protein: {n.protein:g}/{t.protein.max:g} g\n"
            f"- Carbohydrates: {n.carbs:g}/{t.carbs.max:g} g\n"
            f"- Fat: {n.fat:g}/{t.fat.max:g} g"
        )

    if user_goal:
        parts.append(f"User's goal: {GOAL_LABELS.get(user_goal, user_goal)}")

    return "\n\n".join(parts)


def build_chat_instructions(context: ChatContext | None, user_goal: str | None = None) -> str:
    rendered = format_chat_context(context, user_goal)
    return _CHAT_TEMPLATE.format(context=f"\n{rendered}" if rendered else "")

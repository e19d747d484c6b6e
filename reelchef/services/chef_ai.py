"""
ChefAI — Claude API integration service.

All reasoning-service calls (recipe extraction, meal-plan drafting and
optimization, grocery smart merge) are routed through this class. Methods
return the raw response text; callers decode it with ``decode_json_model``,
the single strict boundary between untrusted model output and typed values.
"""

import json
import re
from functools import lru_cache

from pydantic import TypeAdapter, ValidationError

from reelchef.config import get_settings
from reelchef.errors import ResponseDecodeError

RECIPE_JSON_SCHEMA = """\
Return valid JSON matching this exact structure:
{
  "title": "Recipe Name",
  "servings": 4,
  "cookTimeMinutes": 25,
  "difficulty": "easy|medium|hard",
  "isVegetarian": false,
  "isVegan": false,
  "isGlutenFree": true,
  "category": "Main Course",
  "thumbnailQuery": "grilled chicken",
  "ingredients": [{"name": "chicken breast", "quantity": "500", "unit": "g"}],
  "steps": [{"order": 1, "description": "Season the chicken breast with salt and pepper.", "highlightedWords": ["chicken breast", "salt", "pepper"]}],
  "nutrition": {"calories": 350, "protein": 30, "carbs": 20, "fat": 15}
}
"quantity" is always a string. Return ONLY the JSON, no markdown fences or extra text."""

GROCERY_CATEGORIES = (
    '"Produce", "Meat & Seafood", "Dairy & Eggs", "Pantry", "Spices & Seasonings", '
    '"Grains & Bread", "Frozen", "Beverages", "Other"'
)


def _extract_json(text: str) -> str:
    """Strip markdown fences and any prose around the outermost JSON value."""
    text = text.strip()
    m = re.search(r"```(?:json)?\s*([\s\S]*?)```", text)
    if m:
        text = m.group(1).strip()
    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        return text
    start = min(starts)
    end = max(text.rfind("}"), text.rfind("]"))
    return text[start:end + 1] if end > start else text[start:]


def decode_json_model(text: str, type_):
    """Decode response text into ``type_`` or raise ResponseDecodeError."""
    if not text or not text.strip():
        raise ResponseDecodeError("Empty response from reasoning service")
    try:
        return TypeAdapter(type_).validate_json(_extract_json(text))
    except ValidationError as e:
        raise ResponseDecodeError(f"Invalid response: {e.error_count()} error(s): {e.errors()[0]['msg']}") from e


class ChefAI:
    """All AI features powered by the Anthropic Claude API."""

    def __init__(self):
        settings = get_settings()
        self.model = settings.CLAUDE_MODEL
        self.api_key = settings.ANTHROPIC_API_KEY
        self.parse_timeout = settings.PARSE_TIMEOUT_SECONDS
        self._client = None

    @property
    def client(self):
        if self._client is None and self.api_key:
            import anthropic
            self._client = anthropic.AsyncAnthropic(api_key=self.api_key, max_retries=0)
        return self._client

    async def _call_claude(
        self,
        system: str,
        user_message: str,
        max_tokens: int = 4096,
        temperature: float = 0.3,
        timeout: float | None = None,
    ) -> str:
        """Make a call to the Claude API. Returns the text response."""
        if not self.client:
            raise RuntimeError("Anthropic API key not configured")
        kwargs = {}
        if timeout is not None:
            kwargs["timeout"] = timeout
        response = await self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            temperature=temperature,
            system=system,
            messages=[{"role": "user", "content": user_message}],
            **kwargs,
        )
        return "".join(block.text for block in response.content if block.type == "text")

    # ── Recipe Extraction ────────────────────────────────────────────

    async def extract_recipe(self, transcript: str, language: str = "en") -> str:
        """Extract a structured recipe from a cooking video transcript."""
        system = (
            "You are a culinary expert that extracts recipe information from cooking video transcripts. "
            "Extract: a descriptive title; servings (default 4 if not mentioned); every ingredient with "
            "quantity and unit; ordered steps, listing the ingredient names each step mentions as "
            "highlightedWords (exactly as written in the step); estimated nutrition if possible; "
            "total cook time in minutes; difficulty (easy: 1-5 simple steps, medium: 6-10 steps or some "
            "technique, hard: complex techniques); dietary flags (isVegetarian: no meat or fish, isVegan: "
            "no animal products, isGlutenFree: no wheat, barley, rye); a category from Pasta, Salad, Soup, "
            "Dessert, Meat, Seafood, Breakfast, Drink, Main Course, Appetizer, Snack, Bread, Vegetarian; "
            "and a 1-3 word thumbnailQuery naming the primary food item for a food photo search "
            "(avoid words with non-food meanings like street, garden, country, home). "
            + RECIPE_JSON_SCHEMA
        )
        user_msg = (
            f"Write the recipe text in the language with ISO 639-1 code '{language}'.\n\n"
            f"Extract the recipe from this cooking video transcript:\n\n{transcript}"
        )
        return await self._call_claude(system, user_msg, max_tokens=4096, timeout=self.parse_timeout)

    # ── Meal Planning ────────────────────────────────────────────────

    async def draft_meal_plan(self, recipes: list[dict], duration: int, timeout: float | None = None) -> str:
        """Assign recipes to breakfast/lunch/dinner slots for ``duration`` days."""
        system = (
            "You are a meal planning expert. Build a practical meal plan using ONLY the recipes "
            "provided, referenced by their exact IDs. Return ONLY a JSON array (no markdown) with "
            "exactly one entry per day, days numbered from 1:\n"
            '[{"day": 1, "breakfast": {"recipeId": "<id>", "servings": 1}, '
            '"lunch": {"recipeId": "<id>", "servings": 1}, '
            '"dinner": {"recipeId": "<id>", "servings": 1}, "snacks": []}]\n'
            "A slot may be null when no recipe suits it."
        )
        recipe_list = "\n".join(
            f"- {r['id']}: {r['title']} ({r.get('category') or '?'}, "
            f"{r.get('cook_time_minutes') or '?'} min, {r.get('difficulty') or '?'})"
            for r in recipes
        )
        user_msg = f"Create a {duration}-day meal plan using these recipes:\n{recipe_list}"
        return await self._call_claude(system, user_msg, max_tokens=4096, temperature=0.5, timeout=timeout)

    async def optimize_meal_plan(
        self, draft: list[dict], recipes: list[dict], timeout: float | None = None
    ) -> str:
        """Reshuffle a draft plan for ingredient reuse and variety."""
        system = (
            "You are a meal planning optimizer. Improve the draft meal plan by (1) reusing ingredients "
            "across nearby days to reduce waste and shopping, and (2) keeping variety so the same recipe "
            "is not served at consecutive meals. Use ONLY the recipe IDs provided. Keep exactly the same "
            "number of days, numbered from 1. Return ONLY the JSON array in the same structure as the "
            "draft, no markdown or commentary."
        )
        recipe_list = "\n".join(
            f"- {r['id']}: {r['title']} | ingredients: {', '.join(r.get('ingredients', [])) or 'unknown'}"
            for r in recipes
        )
        user_msg = (
            f"Available recipes:\n{recipe_list}\n\n"
            f"Draft plan ({len(draft)} days):\n{json.dumps(draft)}"
        )
        return await self._call_claude(system, user_msg, max_tokens=4096, temperature=0.4, timeout=timeout)

    # ── Grocery ──────────────────────────────────────────────────────

    async def smart_merge(self, items: list[dict], timeout: float | None = None) -> str:
        """Merge semantic duplicates in a grocery list and categorize each item."""
        system = (
            "You are a smart grocery list optimizer. Given a numbered list of ingredients:\n"
            '1. Merge only true duplicates (e.g. "garlic cloves" and "minced garlic" -> "garlic", '
            '"soy sauce" and "light soy sauce" -> "soy sauce").\n'
            "2. Sum quantities when merging. When units differ, pick the most practical unit and convert.\n"
            f"3. Put each item in exactly one category: {GROCERY_CATEGORIES}.\n"
            "4. Use clean, display-friendly names.\n"
            "5. For every output item list in \"sources\" the numbers of ALL input lines it represents. "
            "Every input number must appear in exactly one output item. Never drop items.\n"
            'Respond with JSON: {"items": [{"name": "...", "quantity": number, "unit": "..." or null, '
            '"category": "...", "sources": [1, 2]}]}\n'
            "Sort items by category. Return ONLY the JSON."
        )
        item_list = "\n".join(
            f"{idx}. {i['quantity']:g}{' ' + i['unit'] if i.get('unit') else ''} {i['name']}"
            for idx, i in enumerate(items, start=1)
        )
        user_msg = f"Here is my grocery list:\n{item_list}"
        return await self._call_claude(system, user_msg, max_tokens=2048, temperature=0.1, timeout=timeout)


@lru_cache
def get_chef_ai() -> ChefAI:
    return ChefAI()

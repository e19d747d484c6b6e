"""
Grocery Aggregation Engine.

Local aggregation is a pure fold over tagged ingredients: names match
case-insensitively and exactly, quantities add up, contributing recipe ids
are unioned. Smart merge hands the unchecked items to the reasoning service
for semantic deduplication and categorization, and only replaces the list
once the response has passed every contract check.
"""

import asyncio
import logging
import re
from typing import Iterable
from uuid import uuid4

from reelchef.config import get_settings
from reelchef.errors import ResponseDecodeError, SmartMergeError
from reelchef.schemas.grocery import (
    CATEGORY_ORDER,
    GroceryItem,
    SmartMergeItemIn,
    SmartMergeItemOut,
    SmartMergeResponse,
)
from reelchef.schemas.meal_plan import MealPlanDay
from reelchef.schemas.recipe import Ingredient
from reelchef.services.chef_ai import ChefAI, decode_json_model

logger = logging.getLogger(__name__)

_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

TaggedIngredient = tuple[Ingredient, str]


def parse_quantity(quantity) -> float:
    """Leading number of a quantity string; 1 when there is none.

    "2 cloves" -> 2.0, "1.5" -> 1.5, "a pinch" -> 1.0. Fractions are read up
    to the slash ("1/2" -> 1.0), matching how existing lists were built.
    """
    if isinstance(quantity, bool):
        return 1.0
    if isinstance(quantity, (int, float)):
        return float(quantity)
    m = _LEADING_NUMBER.match(str(quantity or ""))
    if not m:
        return 1.0
    return float(m.group(1))


def aggregate_ingredients(
    tagged: Iterable[TaggedIngredient], existing: list[GroceryItem]
) -> list[GroceryItem]:
    """Merge ``tagged`` (ingredient, recipe id) pairs into a copy of ``existing``."""
    items = [item.model_copy(deep=True) for item in existing]
    by_name: dict[str, GroceryItem] = {}
    for item in items:
        by_name.setdefault(item.name.lower(), item)

    for ingredient, recipe_id in tagged:
        key = ingredient.name.lower()
        qty = parse_quantity(ingredient.quantity)
        match = by_name.get(key)
        if match is not None:
            match.quantity += qty
            if recipe_id not in match.recipe_ids:
                match.recipe_ids.append(recipe_id)
        else:
            item = GroceryItem(
                name=ingredient.name,
                quantity=qty,
                unit=ingredient.unit,
                recipe_ids=[recipe_id],
            )
            items.append(item)
            by_name[key] = item
    return items


def _ingredients_of(recipe) -> list[Ingredient]:
    # ORM rows hold ingredients as JSON dicts, schema objects as models
    return [
        i if isinstance(i, Ingredient) else Ingredient.model_validate(i)
        for i in (recipe.ingredients or [])
    ]


def ingredients_from_recipes(recipes) -> list[TaggedIngredient]:
    """Tag every ingredient of each recipe with the recipe's id."""
    return [(ing, str(r.id)) for r in recipes for ing in _ingredients_of(r)]


def ingredients_from_meal_plan(days: list[MealPlanDay], recipes_by_id: dict) -> list[TaggedIngredient]:
    """One tagged ingredient per planned occurrence; unknown recipes are skipped."""
    tagged = []
    for day in days:
        for slot in day.slots():
            recipe = recipes_by_id.get(slot.recipe_id)
            if recipe is None:
                continue
            tagged.extend((ing, str(recipe.id)) for ing in _ingredients_of(recipe))
    return tagged


def scale_quantity(quantity: str, ratio: float) -> str:
    m = _LEADING_NUMBER.match(quantity)
    if not m or ratio == 1:
        return quantity
    scaled = round(float(m.group(1)) * ratio, 2)
    return f"{scaled:g}{quantity[m.end():]}"


def scale_ingredients(recipe, servings: int) -> list[Ingredient]:
    """Ingredients of ``recipe`` rescaled from its own servings to ``servings``.

    Only quantities that start with a number change; "a pinch" stays as is.
    """
    ingredients = _ingredients_of(recipe)
    base = recipe.servings or 1
    if servings <= 0:
        return ingredients
    ratio = servings / base
    return [
        i.model_copy(update={"quantity": scale_quantity(i.quantity, ratio)})
        for i in ingredients
    ]


def group_by_category(items: list[GroceryItem]) -> dict[str, list[GroceryItem]]:
    groups: dict[str, list[GroceryItem]] = {c: [] for c in CATEGORY_ORDER}
    for item in items:
        groups[item.category or "Other"].append(item)
    return {c: members for c, members in groups.items() if members}


# ── Smart merge ──────────────────────────────────────────────────

def check_merge_contract(merged: list[SmartMergeItemOut], input_count: int) -> None:
    """Every input position must land in exactly one output item."""
    if len(merged) > input_count:
        raise ResponseDecodeError(f"Merge grew the list from {input_count} to {len(merged)} items")
    seen: set[int] = set()
    for item in merged:
        for pos in item.sources:
            if not 1 <= pos <= input_count:
                raise ResponseDecodeError(f"{item.name!r} cites unknown item {pos}")
            if pos in seen:
                raise ResponseDecodeError(f"Item {pos} was merged into more than one entry")
            seen.add(pos)
    missing = sorted(set(range(1, input_count + 1)) - seen)
    if missing:
        raise ResponseDecodeError(f"Items {missing} were dropped")


class SmartMerger:
    def __init__(self, ai: ChefAI, timeout: float | None = None):
        self.ai = ai
        self.timeout = timeout or get_settings().SMART_MERGE_TIMEOUT_SECONDS

    async def merge(self, items: list[SmartMergeItemIn]) -> list[SmartMergeItemOut]:
        if not items:
            return []
        payload = [i.model_dump() for i in items]
        try:
            text = await asyncio.wait_for(
                self.ai.smart_merge(payload, timeout=self.timeout), timeout=self.timeout
            )
            merged = decode_json_model(text, SmartMergeResponse).items
            check_merge_contract(merged, len(items))
        except asyncio.TimeoutError:
            raise SmartMergeError(f"Smart merge timed out after {self.timeout:g}s")
        except ResponseDecodeError as e:
            logger.warning(f"Rejected smart merge response: {e}")
            raise SmartMergeError(f"Invalid smart merge response: {e}") from e
        except Exception as e:
            raise SmartMergeError(f"Smart merge request failed: {e}") from e
        logger.info(f"Smart merge reduced {len(items)} items to {len(merged)}")
        return merged


async def smart_merge_items(items: list[GroceryItem], merger: SmartMerger) -> list[GroceryItem]:
    """Return a new list with the unchecked items merged and checked items kept as-is.

    Raises SmartMergeError without touching ``items`` when the merge fails.
    """
    unchecked = [i for i in items if not i.checked]
    checked = [i for i in items if i.checked]
    if not unchecked:
        return [i.model_copy(deep=True) for i in items]

    merged = await merger.merge(
        [SmartMergeItemIn(name=i.name, quantity=i.quantity, unit=i.unit) for i in unchecked]
    )
    optimized = []
    for out in merged:
        recipe_ids: list[str] = []
        for pos in sorted(out.sources):
            for rid in unchecked[pos - 1].recipe_ids:
                if rid not in recipe_ids:
                    recipe_ids.append(rid)
        optimized.append(GroceryItem(
            id=str(uuid4()),
            name=out.name,
            quantity=out.quantity,
            unit=out.unit,
            recipe_ids=recipe_ids,
            category=out.category,
        ))
    return optimized + [i.model_copy(deep=True) for i in checked]

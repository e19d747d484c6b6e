"""
KitchenStore — client-side state for recipes, meal plans and the grocery list.

The store is an explicit object with an injected persistence adapter; every
mutation writes a JSON snapshot through it. Nothing here talks to the
database, and only ``smart_merge`` reaches the reasoning service.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from reelchef.errors import ValidationError
from reelchef.schemas.grocery import GroceryItem
from reelchef.schemas.meal_plan import MealPlanDay, MealPlanRecord, MealSlot, MealType
from reelchef.schemas.recipe import Difficulty, RecipeResponse
from reelchef.services import meal_planner
from reelchef.services.grocery import (
    SmartMerger,
    aggregate_ingredients,
    ingredients_from_meal_plan,
    ingredients_from_recipes,
    smart_merge_items,
)

logger = logging.getLogger(__name__)


class PersistenceAdapter(Protocol):
    def load(self) -> dict | None: ...

    def save(self, snapshot: dict) -> None: ...


class MemoryAdapter:
    def __init__(self, snapshot: dict | None = None):
        self.snapshot = snapshot

    def load(self) -> dict | None:
        return self.snapshot

    def save(self, snapshot: dict) -> None:
        self.snapshot = snapshot


class JsonFileAdapter:
    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> dict | None:
        if not self.path.exists():
            return None
        return json.loads(self.path.read_text(encoding="utf-8"))

    def save(self, snapshot: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(snapshot), encoding="utf-8")
        tmp.replace(self.path)


def dedupe_items(items: list[GroceryItem]) -> list[GroceryItem]:
    """Collapse case-insensitive duplicate names left by older snapshots.

    The first occurrence keeps its id, unit and checked state; quantities are
    summed and recipe ids unioned into it.
    """
    kept: dict[str, GroceryItem] = {}
    for item in items:
        key = item.name.lower()
        first = kept.get(key)
        if first is None:
            kept[key] = item.model_copy(deep=True)
            continue
        first.quantity += item.quantity
        for rid in item.recipe_ids:
            if rid not in first.recipe_ids:
                first.recipe_ids.append(rid)
    return list(kept.values())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class KitchenStore:
    def __init__(self, adapter: PersistenceAdapter | None = None):
        self.adapter = adapter or MemoryAdapter()
        self.recipes: dict[str, RecipeResponse] = {}
        self.meal_plans: dict[str, MealPlanRecord] = {}
        self.grocery_items: list[GroceryItem] = []
        self._load()

    def _load(self) -> None:
        snapshot = self.adapter.load()
        if not snapshot:
            return
        self.recipes = {
            k: RecipeResponse.model_validate(v) for k, v in snapshot.get("recipes", {}).items()
        }
        self.meal_plans = {
            k: MealPlanRecord.model_validate(v) for k, v in snapshot.get("mealPlans", {}).items()
        }
        items = [GroceryItem.model_validate(i) for i in snapshot.get("groceryItems", [])]
        self.grocery_items = dedupe_items(items)
        if len(self.grocery_items) != len(items):
            logger.info(f"Merged {len(items) - len(self.grocery_items)} duplicate grocery items on load")
            self._save()

    def snapshot(self) -> dict:
        return {
            "recipes": {k: v.model_dump(mode="json", by_alias=True) for k, v in self.recipes.items()},
            "mealPlans": {k: v.model_dump(mode="json", by_alias=True) for k, v in self.meal_plans.items()},
            "groceryItems": [i.model_dump(mode="json", by_alias=True) for i in self.grocery_items],
        }

    def _save(self) -> None:
        self.adapter.save(self.snapshot())

    # ── Recipes ──────────────────────────────────────────────────

    def add_recipe(self, recipe: RecipeResponse) -> None:
        self.recipes[str(recipe.id)] = recipe
        self._save()

    def get_recipe(self, recipe_id: str) -> RecipeResponse | None:
        return self.recipes.get(recipe_id)

    def remove_recipe(self, recipe_id: str) -> None:
        if self.recipes.pop(recipe_id, None) is not None:
            self._save()

    def filter_recipes(
        self,
        max_cook_time: int | None = None,
        difficulty: Difficulty | None = None,
        vegetarian: bool = False,
        vegan: bool = False,
        gluten_free: bool = False,
    ) -> list[RecipeResponse]:
        result = []
        for r in self.recipes.values():
            if max_cook_time and r.cook_time_minutes and r.cook_time_minutes > max_cook_time:
                continue
            if difficulty and r.difficulty != difficulty:
                continue
            if vegetarian and not r.is_vegetarian:
                continue
            if vegan and not r.is_vegan:
                continue
            if gluten_free and not r.is_gluten_free:
                continue
            result.append(r)
        return result

    # ── Meal plans ───────────────────────────────────────────────

    def add_meal_plan(self, plan: MealPlanRecord) -> None:
        self.meal_plans[plan.id] = plan
        self._save()

    def _plan(self, plan_id: str) -> MealPlanRecord:
        plan = self.meal_plans.get(plan_id)
        if plan is None:
            raise ValidationError(f"Meal plan {plan_id} not found")
        return plan

    def _replace_plan(self, plan: MealPlanRecord, **updates) -> MealPlanRecord:
        updated = plan.model_copy(update={**updates, "updated_at": _now()})
        self.meal_plans[plan.id] = updated
        self._save()
        return updated

    def update_meal_plan(self, plan_id: str, **updates) -> MealPlanRecord:
        """Apply field updates (name, description, days...) to a stored plan."""
        plan = self._plan(plan_id)
        data = {**plan.model_dump(), **updates, "id": plan.id, "updated_at": _now()}
        updated = MealPlanRecord.model_validate(data)
        self.meal_plans[plan.id] = updated
        self._save()
        return updated

    def delete_meal_plan(self, plan_id: str) -> None:
        if self.meal_plans.pop(plan_id, None) is not None:
            self._save()

    def update_meal_day(self, plan_id: str, day: int, day_data: MealPlanDay) -> MealPlanRecord:
        plan = self._plan(plan_id)
        days = [day_data if d.day == day else d for d in plan.days]
        return self._replace_plan(plan, days=days)

    def set_meal_for_day(
        self, plan_id: str, day: int, meal_type: MealType, slot: MealSlot
    ) -> MealPlanRecord:
        plan = self._plan(plan_id)
        days = meal_planner.set_meal_for_day(plan.days, day, meal_type, slot)
        return self._replace_plan(plan, days=days)

    def remove_meal_from_day(
        self, plan_id: str, day: int, meal_type: MealType, index: int | None = None
    ) -> MealPlanRecord:
        plan = self._plan(plan_id)
        days = meal_planner.remove_meal_from_day(plan.days, day, meal_type, index)
        return self._replace_plan(plan, days=days)

    # ── Grocery list ─────────────────────────────────────────────

    def add_from_recipes(self, recipe_ids: list[str]) -> list[GroceryItem]:
        recipes = [self.recipes[rid] for rid in recipe_ids if rid in self.recipes]
        self.grocery_items = aggregate_ingredients(ingredients_from_recipes(recipes), self.grocery_items)
        self._save()
        return self.grocery_items

    def add_from_meal_plan(self, plan_id: str) -> list[GroceryItem]:
        plan = self._plan(plan_id)
        tagged = ingredients_from_meal_plan(plan.days, self.recipes)
        self.grocery_items = aggregate_ingredients(tagged, self.grocery_items)
        self._save()
        return self.grocery_items

    async def smart_merge(self, merger: SmartMerger) -> list[GroceryItem]:
        """Replace the unchecked items with their smart-merged form.

        On SmartMergeError the list is left exactly as it was.
        """
        merged = await smart_merge_items(self.grocery_items, merger)
        self.grocery_items = merged
        self._save()
        return self.grocery_items

    def toggle_item(self, item_id: str) -> None:
        self.grocery_items = [
            i.model_copy(update={"checked": not i.checked}) if i.id == item_id else i
            for i in self.grocery_items
        ]
        self._save()

    def remove_item(self, item_id: str) -> None:
        self.grocery_items = [i for i in self.grocery_items if i.id != item_id]
        self._save()

    def clear_checked(self) -> None:
        self.grocery_items = [i for i in self.grocery_items if not i.checked]
        self._save()

    def clear_all(self) -> None:
        self.grocery_items = []
        self._save()

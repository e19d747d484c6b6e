"""
Meal-Plan Orchestrator — two-phase plan generation over saved recipes.

Phase 1 (draft) assigns recipes to day/meal slots; any failure there aborts
the request. Phase 2 (optimize) reshuffles the draft for ingredient reuse
and variety; any failure there silently falls back to the draft.
"""

import asyncio
import logging
from uuid import UUID

from sqlalchemy.orm import Session

from reelchef.config import get_settings
from reelchef.errors import (
    DraftGenerationError,
    NoMatchingRecipesError,
    OptimizationDegraded,
    RecipesNotFoundError,
    ResponseDecodeError,
    ValidationError,
)
from reelchef.models.meal_plan import MealPlan
from reelchef.models.recipe import Recipe
from reelchef.schemas.meal_plan import (
    MAIN_MEALS,
    GenerateMealPlanRequest,
    MealPlanDay,
    MealPlanPreferences,
    MealSlot,
    MealType,
)
from reelchef.services.chef_ai import ChefAI, decode_json_model
from reelchef.services.meal_plan_store import save_meal_plan
from reelchef.services.recipe_cache import RecipeCache

logger = logging.getLogger(__name__)


def filter_recipes(recipes: list[Recipe], preferences: MealPlanPreferences | None) -> list[Recipe]:
    """Drop recipes that fail any requested preference.

    A recipe with no known cook time passes the max-cook-time filter.
    """
    if preferences is None:
        return list(recipes)

    def keep(r: Recipe) -> bool:
        if preferences.vegetarian and not r.is_vegetarian:
            return False
        if preferences.vegan and not r.is_vegan:
            return False
        if preferences.gluten_free and not r.is_gluten_free:
            return False
        if (
            preferences.max_cook_time
            and r.cook_time_minutes
            and r.cook_time_minutes > preferences.max_cook_time
        ):
            return False
        return True

    return [r for r in recipes if keep(r)]


def check_plan_shape(days: list[MealPlanDay], duration: int, recipe_ids: set[str]) -> None:
    """Raise ResponseDecodeError unless the plan has exactly ``duration`` days,
    numbered from 1, referencing only known recipes."""
    if len(days) != duration:
        raise ResponseDecodeError(f"Expected {duration} days, got {len(days)}")
    for i, d in enumerate(days, start=1):
        if d.day != i:
            raise ResponseDecodeError(f"Day {i} is numbered {d.day}")
        for slot in d.slots():
            if slot.recipe_id not in recipe_ids:
                raise ResponseDecodeError(f"Day {i} references unknown recipe {slot.recipe_id}")


def _recipe_summary(r: Recipe) -> dict:
    return {
        "id": str(r.id),
        "title": r.title or "Untitled",
        "category": r.category,
        "cook_time_minutes": r.cook_time_minutes,
        "difficulty": r.difficulty,
        "ingredients": [i.get("name", "") for i in (r.ingredients or [])],
    }


def _dump_days(days: list[MealPlanDay]) -> list[dict]:
    return [d.model_dump(mode="json", by_alias=True, exclude_none=True) for d in days]


class MealPlanOrchestrator:
    def __init__(
        self,
        db: Session,
        ai: ChefAI,
        draft_timeout: float | None = None,
        optimize_timeout: float | None = None,
    ):
        settings = get_settings()
        self.db = db
        self.ai = ai
        self.draft_timeout = draft_timeout or settings.MEAL_PLAN_DRAFT_TIMEOUT_SECONDS
        self.optimize_timeout = optimize_timeout or settings.MEAL_PLAN_OPTIMIZE_TIMEOUT_SECONDS

    def load_candidates(self, recipe_ids: list[str]) -> list[Recipe]:
        ids = []
        for rid in recipe_ids:
            try:
                ids.append(UUID(rid))
            except ValueError:
                logger.info(f"Ignoring malformed recipe id {rid!r}")
        return RecipeCache(self.db).get_many(ids)

    async def generate(self, request: GenerateMealPlanRequest) -> MealPlan:
        recipes = self.load_candidates(request.recipe_ids)
        if not recipes:
            raise RecipesNotFoundError("The specified recipe IDs do not exist")

        candidates = filter_recipes(recipes, request.preferences)
        if not candidates:
            raise NoMatchingRecipesError(
                "No recipes found that match the specified dietary preferences"
            )

        summaries = [_recipe_summary(r) for r in candidates]
        draft = await self.draft(summaries, request.duration)
        final = await self.optimize(draft, summaries, request.duration)

        return save_meal_plan(
            self.db,
            name=f"{request.duration}-Day Meal Plan",
            description="AI Optimized Meal Plan",
            duration=request.duration,
            days=_dump_days(final),
        )

    async def draft(self, summaries: list[dict], duration: int) -> list[MealPlanDay]:
        recipe_ids = {s["id"] for s in summaries}
        try:
            text = await asyncio.wait_for(
                self.ai.draft_meal_plan(summaries, duration, timeout=self.draft_timeout),
                timeout=self.draft_timeout,
            )
            days = decode_json_model(text, list[MealPlanDay])
            check_plan_shape(days, duration, recipe_ids)
        except asyncio.TimeoutError:
            raise DraftGenerationError(f"Meal plan draft timed out after {self.draft_timeout:g}s")
        except ResponseDecodeError as e:
            raise DraftGenerationError(f"Invalid meal plan draft: {e}") from e
        except Exception as e:
            raise DraftGenerationError(f"Meal plan draft request failed: {e}") from e
        logger.info(f"Drafted {duration}-day meal plan over {len(summaries)} recipes")
        return days

    async def optimize(
        self, draft: list[MealPlanDay], summaries: list[dict], duration: int
    ) -> list[MealPlanDay]:
        """Return the optimized plan, or ``draft`` itself if optimization fails."""
        recipe_ids = {s["id"] for s in summaries}
        try:
            try:
                text = await asyncio.wait_for(
                    self.ai.optimize_meal_plan(
                        _dump_days(draft), summaries, timeout=self.optimize_timeout
                    ),
                    timeout=self.optimize_timeout,
                )
                days = decode_json_model(text, list[MealPlanDay])
                check_plan_shape(days, duration, recipe_ids)
            except asyncio.TimeoutError:
                raise OptimizationDegraded(f"timed out after {self.optimize_timeout:g}s")
            except ResponseDecodeError as e:
                raise OptimizationDegraded(str(e)) from e
            except Exception as e:
                raise OptimizationDegraded(f"request failed: {e}") from e
        except OptimizationDegraded as e:
            logger.warning(f"Meal plan optimization degraded, using draft: {e}")
            return draft
        return days


# ── Slot editing ─────────────────────────────────────────────────

def _locate_day(days: list[MealPlanDay], day: int) -> int:
    for idx, d in enumerate(days):
        if d.day == day:
            return idx
    raise ValidationError(f"Day {day} is not part of this meal plan")


def set_meal_for_day(
    days: list[MealPlanDay], day: int, meal_type: MealType, slot: MealSlot
) -> list[MealPlanDay]:
    """Assign ``slot`` to one meal of one day; snacks are appended."""
    idx = _locate_day(days, day)
    current = days[idx]
    if meal_type == "snack":
        updated = current.model_copy(update={"snacks": [*current.snacks, slot]})
    elif meal_type in MAIN_MEALS:
        updated = current.model_copy(update={meal_type: slot})
    else:
        raise ValidationError(f"Unknown meal slot {meal_type!r}")
    return [*days[:idx], updated, *days[idx + 1:]]


def remove_meal_from_day(
    days: list[MealPlanDay], day: int, meal_type: MealType, index: int | None = None
) -> list[MealPlanDay]:
    """Clear one meal of one day. Snacks are removed by position (default: last)."""
    idx = _locate_day(days, day)
    current = days[idx]
    if meal_type == "snack":
        snacks = list(current.snacks)
        if not snacks:
            raise ValidationError(f"Day {day} has no snacks")
        pos = len(snacks) - 1 if index is None else index
        if not 0 <= pos < len(snacks):
            raise ValidationError(f"Day {day} has no snack at position {pos}")
        del snacks[pos]
        updated = current.model_copy(update={"snacks": snacks})
    elif meal_type in MAIN_MEALS:
        updated = current.model_copy(update={meal_type: None})
    else:
        raise ValidationError(f"Unknown meal slot {meal_type!r}")
    return [*days[:idx], updated, *days[idx + 1:]]

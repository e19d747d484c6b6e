from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from reelchef.database import get_db
from reelchef.errors import NotFoundError
from reelchef.models.meal_plan import MealPlan
from reelchef.schemas.meal_plan import (
    GenerateMealPlanRequest,
    MealPlanDetailResponse,
    MealPlanResponse,
    MealSlot,
    MealSlotUpdate,
    MealType,
)
from reelchef.services.chef_ai import ChefAI, get_chef_ai
from reelchef.services.meal_plan_store import delete_meal_plan, get_meal_plan, plan_days, replace_days
from reelchef.services.meal_planner import MealPlanOrchestrator, remove_meal_from_day, set_meal_for_day
from reelchef.services.recipe_cache import RecipeCache

router = APIRouter()


def _get_plan(db: Session, plan_id: UUID) -> MealPlan:
    plan = get_meal_plan(db, plan_id)
    if not plan:
        raise NotFoundError("Meal plan not found")
    return plan


def _detail(plan: MealPlan) -> MealPlanDetailResponse:
    return MealPlanDetailResponse(
        id=plan.id,
        name=plan.name,
        description=plan.description,
        duration=plan.duration,
        days=plan_days(plan),
        created_at=plan.created_at,
        updated_at=plan.updated_at,
    )


@router.post("/generate", response_model=MealPlanResponse)
async def generate_plan(
    body: GenerateMealPlanRequest,
    db: Session = Depends(get_db),
    ai: ChefAI = Depends(get_chef_ai),
):
    plan = await MealPlanOrchestrator(db, ai).generate(body)
    return MealPlanResponse(id=plan.id, name=plan.name, duration=plan.duration, days=plan_days(plan))


@router.get("/{plan_id}", response_model=MealPlanDetailResponse)
def get_plan(plan_id: UUID, db: Session = Depends(get_db)):
    return _detail(_get_plan(db, plan_id))


@router.delete("/{plan_id}", status_code=204)
def delete_plan(plan_id: UUID, db: Session = Depends(get_db)):
    delete_meal_plan(db, _get_plan(db, plan_id))


# ── Slot editing ─────────────────────────────────────────────────

@router.put("/{plan_id}/days/{day}/{meal_type}", response_model=MealPlanDetailResponse)
def set_meal(
    plan_id: UUID,
    day: int,
    meal_type: MealType,
    body: MealSlotUpdate,
    db: Session = Depends(get_db),
):
    plan = _get_plan(db, plan_id)
    try:
        recipe = RecipeCache(db).get_by_id(UUID(body.recipe_id))
    except ValueError:
        recipe = None
    if not recipe:
        raise NotFoundError("Recipe not found")

    slot = MealSlot(recipe_id=str(recipe.id), servings=body.servings)
    days = set_meal_for_day(plan_days(plan), day, meal_type, slot)
    return _detail(replace_days(db, plan, days))


@router.delete("/{plan_id}/days/{day}/{meal_type}", response_model=MealPlanDetailResponse)
def remove_meal(
    plan_id: UUID,
    day: int,
    meal_type: MealType,
    index: int | None = Query(None, ge=0),
    db: Session = Depends(get_db),
):
    plan = _get_plan(db, plan_id)
    days = remove_meal_from_day(plan_days(plan), day, meal_type, index)
    return _detail(replace_days(db, plan, days))

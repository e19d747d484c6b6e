from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.orm import Session

from reelchef.models.meal_plan import MealPlan
from reelchef.schemas.meal_plan import MealPlanDay


def save_meal_plan(
    db: Session, name: str, duration: int, days: list[dict], description: str | None = None
) -> MealPlan:
    plan = MealPlan(name=name, description=description, duration=duration, days=days)
    db.add(plan)
    db.commit()
    db.refresh(plan)
    return plan


def get_meal_plan(db: Session, plan_id: UUID) -> MealPlan | None:
    return db.query(MealPlan).filter(MealPlan.id == plan_id).first()


def delete_meal_plan(db: Session, plan: MealPlan) -> None:
    db.delete(plan)
    db.commit()


def plan_days(plan: MealPlan) -> list[MealPlanDay]:
    return [MealPlanDay.model_validate(d) for d in plan.days or []]


def replace_days(db: Session, plan: MealPlan, days: list[MealPlanDay]) -> MealPlan:
    """Re-save a plan after a slot edit and bump its updated timestamp."""
    plan.days = [d.model_dump(mode="json", by_alias=True, exclude_none=True) for d in days]
    plan.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(plan)
    return plan

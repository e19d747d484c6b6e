from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import Field, field_validator

from reelchef.schemas.base import CamelModel

MealType = Literal["breakfast", "lunch", "dinner", "snack"]
MAIN_MEALS = ("breakfast", "lunch", "dinner")


class MealSlot(CamelModel):
    recipe_id: str
    servings: int = Field(1, ge=1)


class MealPlanDay(CamelModel):
    day: int = Field(ge=1)
    breakfast: MealSlot | None = None
    lunch: MealSlot | None = None
    dinner: MealSlot | None = None
    snacks: list[MealSlot] = []

    @field_validator("snacks", mode="before")
    @classmethod
    def null_snacks(cls, v):
        return [] if v is None else v

    def slots(self) -> list[MealSlot]:
        """All filled slots of the day, main meals first."""
        main = [getattr(self, m) for m in MAIN_MEALS]
        return [s for s in main if s is not None] + list(self.snacks)


class MealPlanPreferences(CamelModel):
    vegetarian: bool | None = None
    vegan: bool | None = None
    gluten_free: bool | None = None
    max_cook_time: int | None = Field(None, ge=1)


class GenerateMealPlanRequest(CamelModel):
    recipe_ids: list[str] = Field(min_length=1)
    duration: int = Field(ge=1, le=30)
    preferences: MealPlanPreferences | None = None


class MealPlanResponse(CamelModel):
    id: UUID
    name: str
    duration: int
    days: list[MealPlanDay]


class MealPlanDetailResponse(MealPlanResponse):
    description: str | None = None
    created_at: datetime
    updated_at: datetime


class MealSlotUpdate(CamelModel):
    recipe_id: str
    servings: int = Field(1, ge=1)


class MealPlanRecord(CamelModel):
    """A meal plan as held by a client-side KitchenStore."""

    id: str
    name: str
    description: str | None = None
    duration: int = Field(ge=1)
    days: list[MealPlanDay]
    created_at: datetime
    updated_at: datetime

from typing import Literal
from uuid import uuid4

from pydantic import Field

from reelchef.schemas.base import CamelModel
from reelchef.schemas.recipe import Ingredient

GroceryCategory = Literal[
    "Produce",
    "Meat & Seafood",
    "Dairy & Eggs",
    "Pantry",
    "Spices & Seasonings",
    "Grains & Bread",
    "Frozen",
    "Beverages",
    "Other",
]

CATEGORY_ORDER: tuple[str, ...] = (
    "Produce",
    "Meat & Seafood",
    "Dairy & Eggs",
    "Pantry",
    "Spices & Seasonings",
    "Grains & Bread",
    "Frozen",
    "Beverages",
    "Other",
)


class GroceryItem(CamelModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    quantity: float
    unit: str | None = None
    checked: bool = False
    recipe_ids: list[str] = []
    category: GroceryCategory | None = None


# ── Smart merge ──────────────────────────────────────────────────

class SmartMergeItemIn(CamelModel):
    name: str = Field(min_length=1)
    quantity: float
    unit: str | None = None


class SmartMergeRequest(CamelModel):
    items: list[SmartMergeItemIn]


class SmartMergeItemOut(CamelModel):
    name: str = Field(min_length=1)
    quantity: float = Field(ge=0)
    unit: str | None = None
    category: GroceryCategory
    # 1-based positions of the input items folded into this one
    sources: list[int] = Field(min_length=1)


class SmartMergeResponse(CamelModel):
    items: list[SmartMergeItemOut]


class SmartMergeResultItem(CamelModel):
    name: str
    quantity: float
    unit: str | None = None
    category: GroceryCategory


class SmartMergeResult(CamelModel):
    items: list[SmartMergeResultItem]


# ── Stateless aggregation ────────────────────────────────────────

class RecipeIngredients(CamelModel):
    id: str
    ingredients: list[Ingredient]


class AggregateRequest(CamelModel):
    recipes: list[RecipeIngredients] = []
    existing: list[GroceryItem] = []


class AggregateResponse(CamelModel):
    items: list[GroceryItem]

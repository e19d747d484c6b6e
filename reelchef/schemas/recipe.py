from datetime import datetime
from typing import Literal
from urllib.parse import urlparse
from uuid import UUID

from pydantic import Field, field_validator, model_validator

from reelchef.schemas.base import CamelModel

Platform = Literal["youtube", "tiktok", "instagram"]
Difficulty = Literal["easy", "medium", "hard"]
RecipeCategory = Literal[
    "Pasta",
    "Salad",
    "Soup",
    "Dessert",
    "Meat",
    "Seafood",
    "Breakfast",
    "Drink",
    "Main Course",
    "Appetizer",
    "Snack",
    "Bread",
    "Vegetarian",
]
DEFAULT_CATEGORY = "Main Course"


class Ingredient(CamelModel):
    name: str
    quantity: str
    unit: str | None = None
    image_url: str | None = None

    @field_validator("quantity", mode="before")
    @classmethod
    def _quantity_as_text(cls, v):
        # Quantities are free text; models sometimes answer with bare numbers
        if isinstance(v, bool):
            return v
        if isinstance(v, (int, float)):
            return f"{v:g}"
        return v


class Step(CamelModel):
    order: int = Field(ge=1)
    description: str
    highlighted_words: list[str] = []

    @model_validator(mode="after")
    def _keep_highlights_in_description(self):
        text = self.description.lower()
        self.highlighted_words = [
            w for w in self.highlighted_words if w.strip() and w.lower() in text
        ]
        return self


class Nutrition(CamelModel):
    calories: float | None = None
    protein: float | None = None
    carbs: float | None = None
    fat: float | None = None


class ParsedRecipe(CamelModel):
    """Structured recipe as returned by the reasoning service."""

    title: str = Field(min_length=1)
    servings: int = Field(ge=1)
    ingredients: list[Ingredient]
    steps: list[Step]
    nutrition: Nutrition | None = None
    cook_time_minutes: int | None = None
    difficulty: Difficulty | None = None
    is_vegetarian: bool = False
    is_vegan: bool = False
    is_gluten_free: bool = False
    category: RecipeCategory = DEFAULT_CATEGORY
    thumbnail_query: str | None = None

    @field_validator("category", mode="before")
    @classmethod
    def _default_category(cls, v):
        return DEFAULT_CATEGORY if v is None else v

    @model_validator(mode="after")
    def _order_steps(self):
        self.steps = sorted(self.steps, key=lambda s: s.order)
        return self


# ── API Request / Response Schemas ────────────────────────────────

class AnalyzeRequest(CamelModel):
    url: str
    language: str = Field("en", min_length=2, max_length=2)

    @field_validator("url")
    @classmethod
    def _must_be_http_url(cls, v: str) -> str:
        v = v.strip()
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("url must be an absolute http(s) URL")
        return v

    @field_validator("language")
    @classmethod
    def _lower_language(cls, v: str) -> str:
        if not v.isalpha():
            raise ValueError("language must be a two-letter code")
        return v.lower()


class RecipeResponse(CamelModel):
    id: UUID
    url: str
    platform: Platform
    title: str | None
    thumbnail_url: str | None
    servings: int | None
    ingredients: list[Ingredient]
    steps: list[Step]
    nutrition: Nutrition | None = None
    cook_time_minutes: int | None = None
    difficulty: Difficulty | None = None
    is_vegetarian: bool = False
    is_vegan: bool = False
    is_gluten_free: bool = False
    category: RecipeCategory | None = None
    created_at: datetime


class AnalyzeResponse(RecipeResponse):
    cached: bool


class RecipeLookupRequest(CamelModel):
    ids: list[UUID] = Field(min_length=1, max_length=100)

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from reelchef.database import get_db
from reelchef.errors import NotFoundError
from reelchef.schemas.recipe import RecipeLookupRequest, RecipeResponse
from reelchef.services.recipe_cache import RecipeCache

router = APIRouter()


@router.get("/{recipe_id}", response_model=RecipeResponse)
def get_recipe(recipe_id: UUID, db: Session = Depends(get_db)):
    recipe = RecipeCache(db).get_by_id(recipe_id)
    if not recipe:
        raise NotFoundError("Recipe not found")
    return recipe


@router.post("/lookup", response_model=list[RecipeResponse])
def lookup_recipes(body: RecipeLookupRequest, db: Session = Depends(get_db)):
    """Batch fetch by id, in request order; unknown ids are skipped."""
    found = {r.id: r for r in RecipeCache(db).get_many(body.ids)}
    return [found[i] for i in body.ids if i in found]

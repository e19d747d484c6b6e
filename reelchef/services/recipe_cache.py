"""
Recipe Cache — fingerprint-keyed store for extracted recipes.

At most one row exists per url_hash; the unique constraint on the column is
the only guard against concurrent duplicate extractions.
"""

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from reelchef.errors import PersistenceConflict
from reelchef.models.recipe import Recipe

logger = logging.getLogger(__name__)


class RecipeCache:
    def __init__(self, db: Session):
        self.db = db

    def get(self, url_hash: str) -> Recipe | None:
        return self.db.query(Recipe).filter(Recipe.url_hash == url_hash).first()

    def put(self, recipe: Recipe) -> Recipe:
        """Insert a new recipe. Raises PersistenceConflict if the fingerprint is taken."""
        self.db.add(recipe)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"Cache write conflict for url_hash {recipe.url_hash}")
            raise PersistenceConflict(recipe.url_hash)
        self.db.refresh(recipe)
        return recipe

    def get_by_id(self, recipe_id: UUID) -> Recipe | None:
        return self.db.query(Recipe).filter(Recipe.id == recipe_id).first()

    def get_many(self, recipe_ids: list[UUID]) -> list[Recipe]:
        if not recipe_ids:
            return []
        return self.db.query(Recipe).filter(Recipe.id.in_(recipe_ids)).all()

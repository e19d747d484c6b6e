import asyncio
import logging

from reelchef.config import get_settings
from reelchef.errors import ExtractionParseError, ResponseDecodeError
from reelchef.schemas.recipe import ParsedRecipe
from reelchef.services.chef_ai import ChefAI, decode_json_model

logger = logging.getLogger(__name__)


class StructuredRecipeExtractor:
    """Turns a transcript into a validated ParsedRecipe via the reasoning service."""

    def __init__(self, ai: ChefAI, timeout: float | None = None):
        self.ai = ai
        self.timeout = timeout or get_settings().PARSE_TIMEOUT_SECONDS

    async def extract(self, transcript: str, language: str = "en") -> ParsedRecipe:
        try:
            text = await asyncio.wait_for(
                self.ai.extract_recipe(transcript, language), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            raise ExtractionParseError(f"Recipe extraction timed out after {self.timeout:g}s")
        except Exception as e:
            raise ExtractionParseError(f"Recipe extraction request failed: {e}") from e

        try:
            recipe = decode_json_model(text, ParsedRecipe)
        except ResponseDecodeError as e:
            logger.warning(f"Rejected reasoning-service recipe: {e}")
            raise ExtractionParseError(f"Failed to parse recipe: {e}") from e

        if not recipe.ingredients or not recipe.steps:
            raise ExtractionParseError("Failed to parse recipe: no ingredients or steps found")
        return recipe

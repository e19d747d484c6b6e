"""
Extraction Orchestrator — video URL to persisted Recipe.

    INIT -> CACHE_CHECK -> HIT -> DONE
                        -> MISS -> FETCH_TRANSCRIPT -> PARSE
                                -> RESOLVE_THUMBNAIL -> PERSIST -> DONE

Stages run strictly in order. Nothing is written until PARSE and
RESOLVE_THUMBNAIL have both completed, so a failed run leaves no trace.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from reelchef.errors import PersistenceConflict
from reelchef.models.recipe import Recipe
from reelchef.services.fingerprint import fingerprint
from reelchef.services.recipe_cache import RecipeCache
from reelchef.services.recipe_extractor import StructuredRecipeExtractor
from reelchef.services.thumbnails import ThumbnailResolver
from reelchef.services.transcripts import TranscriptClient

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    INIT = "init"
    CACHE_CHECK = "cache_check"
    FETCH_TRANSCRIPT = "fetch_transcript"
    PARSE = "parse"
    RESOLVE_THUMBNAIL = "resolve_thumbnail"
    PERSIST = "persist"
    DONE = "done"


@dataclass
class ExtractionResult:
    recipe: Recipe
    cached: bool


@dataclass
class ExtractionPipeline:
    cache: RecipeCache
    transcripts: TranscriptClient
    extractor: StructuredRecipeExtractor
    thumbnails: ThumbnailResolver
    history: list[PipelineState] = field(default_factory=lambda: [PipelineState.INIT])

    @property
    def state(self) -> PipelineState:
        return self.history[-1]

    def _enter(self, state: PipelineState) -> None:
        logger.debug(f"Extraction {self.state.value} -> {state.value}")
        self.history.append(state)

    async def run(self, url: str, language: str = "en") -> ExtractionResult:
        if self.state is not PipelineState.INIT:
            raise RuntimeError("ExtractionPipeline instances are single-use")

        self._enter(PipelineState.CACHE_CHECK)
        url_hash = fingerprint(url)
        cached = self.cache.get(url_hash)
        if cached is not None:
            logger.info(f"Cache hit for {url} ({url_hash})")
            self._enter(PipelineState.DONE)
            return ExtractionResult(recipe=cached, cached=True)
        logger.info(f"Cache miss for {url} ({url_hash})")

        self._enter(PipelineState.FETCH_TRANSCRIPT)
        transcript = await self.transcripts.fetch(url, language)

        self._enter(PipelineState.PARSE)
        parsed = await self.extractor.extract(transcript.text, language)

        self._enter(PipelineState.RESOLVE_THUMBNAIL)
        thumbnail_url = await self.thumbnails.resolve(
            parsed.title, parsed.category, parsed.thumbnail_query
        )

        self._enter(PipelineState.PERSIST)
        recipe = Recipe(
            url=url,
            url_hash=url_hash,
            platform=transcript.platform,
            title=parsed.title,
            thumbnail_url=thumbnail_url,
            servings=parsed.servings,
            ingredients=[
                i.model_dump(mode="json", by_alias=True, exclude_none=True)
                for i in parsed.ingredients
            ],
            steps=[s.model_dump(mode="json", by_alias=True) for s in parsed.steps],
            nutrition=(
                parsed.nutrition.model_dump(mode="json", exclude_none=True)
                if parsed.nutrition else None
            ),
            raw_transcript=transcript.text,
            cook_time_minutes=parsed.cook_time_minutes,
            difficulty=parsed.difficulty,
            is_vegetarian=parsed.is_vegetarian,
            is_vegan=parsed.is_vegan,
            is_gluten_free=parsed.is_gluten_free,
            category=parsed.category,
        )
        try:
            stored = self.cache.put(recipe)
            cached_flag = False
        except PersistenceConflict:
            # A concurrent run for the same URL won the insert; serve its row
            stored = self.cache.get(url_hash)
            if stored is None:
                raise
            logger.info(f"Resolved duplicate extraction for {url_hash} to existing recipe {stored.id}")
            cached_flag = True

        self._enter(PipelineState.DONE)
        return ExtractionResult(recipe=stored, cached=cached_flag)

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from reelchef.database import get_db
from reelchef.schemas.recipe import AnalyzeRequest, AnalyzeResponse, RecipeResponse
from reelchef.services.chef_ai import ChefAI, get_chef_ai
from reelchef.services.extraction import ExtractionPipeline
from reelchef.services.recipe_cache import RecipeCache
from reelchef.services.recipe_extractor import StructuredRecipeExtractor
from reelchef.services.thumbnails import ThumbnailResolver
from reelchef.services.transcripts import TranscriptClient

router = APIRouter()


def get_transcript_client() -> TranscriptClient:
    return TranscriptClient()


def get_thumbnail_resolver() -> ThumbnailResolver:
    return ThumbnailResolver()


@router.post("", response_model=AnalyzeResponse)
async def analyze_video(
    body: AnalyzeRequest,
    db: Session = Depends(get_db),
    ai: ChefAI = Depends(get_chef_ai),
    transcripts: TranscriptClient = Depends(get_transcript_client),
    thumbnails: ThumbnailResolver = Depends(get_thumbnail_resolver),
):
    pipeline = ExtractionPipeline(
        cache=RecipeCache(db),
        transcripts=transcripts,
        extractor=StructuredRecipeExtractor(ai),
        thumbnails=thumbnails,
    )
    result = await pipeline.run(body.url, body.language)
    recipe = RecipeResponse.model_validate(result.recipe)
    return AnalyzeResponse(**recipe.model_dump(), cached=result.cached)

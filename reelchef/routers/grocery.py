from fastapi import APIRouter, Depends

from reelchef.schemas.grocery import (
    AggregateRequest,
    AggregateResponse,
    SmartMergeRequest,
    SmartMergeResult,
    SmartMergeResultItem,
)
from reelchef.services.chef_ai import ChefAI, get_chef_ai
from reelchef.services.grocery import SmartMerger, aggregate_ingredients, ingredients_from_recipes

router = APIRouter()


@router.post("/smart-merge", response_model=SmartMergeResult)
async def smart_merge(body: SmartMergeRequest, ai: ChefAI = Depends(get_chef_ai)):
    items = await SmartMerger(ai).merge(body.items)
    return SmartMergeResult(
        items=[SmartMergeResultItem(**i.model_dump(exclude={"sources"})) for i in items]
    )


@router.post("/aggregate", response_model=AggregateResponse)
def aggregate(body: AggregateRequest):
    items = aggregate_ingredients(ingredients_from_recipes(body.recipes), body.existing)
    return AggregateResponse(items=items)

import json

import pytest

from reelchef.errors import ResponseDecodeError
from reelchef.schemas.recipe import AnalyzeRequest, Ingredient, ParsedRecipe
from reelchef.services.chef_ai import _extract_json, decode_json_model

from conftest import RECIPE_PAYLOAD


def test_parsed_recipe_orders_steps_and_filters_highlights():
    recipe = decode_json_model(json.dumps(RECIPE_PAYLOAD), ParsedRecipe)
    assert [s.order for s in recipe.steps] == [1, 2]
    # "parsley" does not occur in the step text
    assert recipe.steps[1].highlighted_words == ["spaghetti", "Garlic"]
    assert recipe.ingredients[2].quantity == "2"
    assert recipe.cook_time_minutes == 20
    assert recipe.is_vegetarian is True
    assert recipe.is_vegan is False


def test_optional_fields_take_defaults():
    recipe = ParsedRecipe.model_validate({
        "title": "Toast",
        "servings": 1,
        "ingredients": [{"name": "bread", "quantity": "1 slice"}],
        "steps": [{"order": 1, "description": "Toast the bread."}],
        "category": None,
    })
    assert recipe.category == "Main Course"
    assert recipe.is_gluten_free is False
    assert recipe.nutrition is None
    assert recipe.difficulty is None
    assert recipe.thumbnail_query is None


def test_decode_strips_markdown_fences_and_prose():
    text = "Here you go:\n```json\n" + json.dumps(RECIPE_PAYLOAD) + "\n```\nEnjoy!"
    assert decode_json_model(text, ParsedRecipe).title == "Garlic Butter Pasta"


def test_extract_json_finds_outer_array():
    assert _extract_json('Plan: [{"day": 1}] done') == '[{"day": 1}]'


@pytest.mark.parametrize("text", [
    "",
    "   ",
    "not json at all",
    '{"title": "No servings", "ingredients": [], "steps": []}',
    '{"title": "", "servings": 2, "ingredients": [], "steps": []}',
    '{"title": "Bad level", "servings": 2, "ingredients": [], "steps": [], "difficulty": "expert"}',
])
def test_decode_rejects_bad_responses(text):
    with pytest.raises(ResponseDecodeError):
        decode_json_model(text, ParsedRecipe)


def test_ingredient_accepts_numeric_quantity():
    assert Ingredient.model_validate({"name": "eggs", "quantity": 2}).quantity == "2"
    assert Ingredient.model_validate({"name": "milk", "quantity": 0.5}).quantity == "0.5"


def test_analyze_request_validation():
    req = AnalyzeRequest.model_validate({"url": "  https://youtu.be/abc  ", "language": "FR"})
    assert req.url == "https://youtu.be/abc"
    assert req.language == "fr"
    assert AnalyzeRequest(url="https://youtu.be/abc").language == "en"

    with pytest.raises(ValueError):
        AnalyzeRequest(url="youtu.be/abc")
    with pytest.raises(ValueError):
        AnalyzeRequest(url="https://youtu.be/abc", language="eng")
    with pytest.raises(ValueError):
        AnalyzeRequest(url="https://youtu.be/abc", language="e1")

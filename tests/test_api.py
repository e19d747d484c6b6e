import uuid

import pytest

from reelchef.models.recipe import Recipe
from reelchef.services.fingerprint import fingerprint

from conftest import THUMBNAIL

URL = "https://www.tiktok.com/@chef/video/7301"


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
    root = client.get("/").json()
    assert root["name"] == "ReelChef API"
    assert root["status"] == "running"


# ── Analyze ──────────────────────────────────────────────────────

def test_analyze_twice_serves_cache(client, db, fake_ai, fake_transcripts):
    first = client.post("/api/v1/analyze", json={"url": URL})
    assert first.status_code == 200
    body = first.json()
    assert body["cached"] is False
    assert body["platform"] == "tiktok"
    assert body["title"] == "Garlic Butter Pasta"
    assert body["thumbnailUrl"] == THUMBNAIL
    assert body["cookTimeMinutes"] == 20
    assert body["isVegetarian"] is True
    assert body["steps"][0] == {
        "order": 1,
        "description": "Boil the spaghetti.",
        "highlightedWords": ["spaghetti"],
    }
    assert "rawTranscript" not in body

    second = client.post("/api/v1/analyze", json={"url": URL + "/", "language": "EN"})
    assert second.status_code == 200
    again = second.json()
    assert again["cached"] is True
    assert again["id"] == body["id"]
    assert again["ingredients"] == body["ingredients"]
    assert again["steps"] == body["steps"]

    row = db.query(Recipe).one()
    assert row.url_hash == fingerprint(URL)
    assert fake_transcripts.urls == [URL]
    assert fake_ai.called("extract_recipe") == 1


def test_analyze_unsupported_platform(client, fake_transcripts):
    resp = client.post("/api/v1/analyze", json={"url": "https://vimeo.com/123"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "UnsupportedPlatformError"
    assert fake_transcripts.urls == []


def test_analyze_parse_failure(client, db, fake_ai):
    fake_ai.responses["extract_recipe"] = "I could not find a recipe."
    resp = client.post("/api/v1/analyze", json={"url": URL})
    assert resp.status_code == 502
    assert resp.json()["error"] == "ExtractionParseError"
    assert db.query(Recipe).count() == 0


@pytest.mark.parametrize("payload", [
    {},
    {"url": "not a url"},
    {"url": URL, "language": "english"},
])
def test_analyze_rejects_bad_input(client, payload):
    resp = client.post("/api/v1/analyze", json=payload)
    assert resp.status_code == 400
    assert resp.json()["error"] == "ValidationError"
    assert resp.json()["message"]


# ── Recipes ──────────────────────────────────────────────────────

def test_get_recipe(client, make_recipe):
    recipe = make_recipe("Shakshuka", category="Breakfast")
    resp = client.get(f"/api/v1/recipes/{recipe.id}")
    assert resp.status_code == 200
    assert resp.json()["title"] == "Shakshuka"
    assert resp.json()["category"] == "Breakfast"

    missing = client.get(f"/api/v1/recipes/{uuid.uuid4()}")
    assert missing.status_code == 404
    assert missing.json() == {"error": "NotFoundError", "message": "Recipe not found"}
    assert client.get("/api/v1/recipes/not-a-uuid").status_code == 400


def test_lookup_recipes_keeps_request_order(client, make_recipe):
    a = make_recipe("A")
    b = make_recipe("B")
    resp = client.post("/api/v1/recipes/lookup", json={"ids": [str(b.id), str(uuid.uuid4()), str(a.id)]})
    assert resp.status_code == 200
    assert [r["title"] for r in resp.json()] == ["B", "A"]


# ── Meal plans ───────────────────────────────────────────────────

def _draft(ids, duration):
    return [
        {"day": d, "breakfast": None, "lunch": {"recipeId": ids[d % len(ids)], "servings": 1},
         "dinner": {"recipeId": ids[(d + 1) % len(ids)], "servings": 2}, "snacks": []}
        for d in range(1, duration + 1)
    ]


@pytest.fixture
def plan_id(client, fake_ai, make_recipe):
    ids = [str(make_recipe(f"Recipe {n}").id) for n in range(3)]
    fake_ai.responses["draft_meal_plan"] = _draft(ids, 2)
    fake_ai.responses["optimize_meal_plan"] = _draft(ids, 2)
    resp = client.post("/api/v1/meal-plans/generate", json={"recipeIds": ids, "duration": 2})
    assert resp.status_code == 200
    return resp.json()["id"]


def test_generate_meal_plan(client, fake_ai, make_recipe):
    ids = [str(make_recipe(f"Recipe {n}").id) for n in range(3)]
    fake_ai.responses["draft_meal_plan"] = _draft(ids, 5)
    fake_ai.responses["optimize_meal_plan"] = RuntimeError("optimizer down")

    resp = client.post("/api/v1/meal-plans/generate", json={"recipeIds": ids, "duration": 5})
    assert resp.status_code == 200
    body = resp.json()
    assert body["name"] == "5-Day Meal Plan"
    assert body["duration"] == 5
    assert [d["day"] for d in body["days"]] == [1, 2, 3, 4, 5]
    assert body["days"][0]["lunch"] == {"recipeId": ids[1], "servings": 1}
    assert body["days"][0]["breakfast"] is None


def test_generate_meal_plan_errors(client, fake_ai, make_recipe):
    resp = client.post("/api/v1/meal-plans/generate", json={"recipeIds": [str(uuid.uuid4())], "duration": 3})
    assert resp.status_code == 404
    assert resp.json()["error"] == "RecipesNotFoundError"

    ids = [str(make_recipe("Steak").id)]
    resp = client.post(
        "/api/v1/meal-plans/generate",
        json={"recipeIds": ids, "duration": 3, "preferences": {"vegan": True}},
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "NoMatchingRecipesError"

    fake_ai.responses["draft_meal_plan"] = "oops"
    resp = client.post("/api/v1/meal-plans/generate", json={"recipeIds": ids, "duration": 3})
    assert resp.status_code == 502
    assert resp.json()["error"] == "DraftGenerationError"

    for bad in ({"recipeIds": [], "duration": 3}, {"recipeIds": ids, "duration": 31}):
        resp = client.post("/api/v1/meal-plans/generate", json=bad)
        assert resp.status_code == 400


def test_get_and_delete_meal_plan(client, plan_id):
    resp = client.get(f"/api/v1/meal-plans/{plan_id}")
    assert resp.status_code == 200
    assert resp.json()["description"] == "AI Optimized Meal Plan"
    assert len(resp.json()["days"]) == 2

    assert client.delete(f"/api/v1/meal-plans/{plan_id}").status_code == 204
    gone = client.get(f"/api/v1/meal-plans/{plan_id}")
    assert gone.status_code == 404
    assert gone.json() == {"error": "NotFoundError", "message": "Meal plan not found"}


def test_edit_meal_slots(client, plan_id, make_recipe):
    extra = str(make_recipe("Granola").id)

    resp = client.put(f"/api/v1/meal-plans/{plan_id}/days/1/breakfast", json={"recipeId": extra, "servings": 2})
    assert resp.status_code == 200
    assert resp.json()["days"][0]["breakfast"] == {"recipeId": extra, "servings": 2}

    resp = client.put(f"/api/v1/meal-plans/{plan_id}/days/2/snack", json={"recipeId": extra})
    assert resp.json()["days"][1]["snacks"] == [{"recipeId": extra, "servings": 1}]

    resp = client.delete(f"/api/v1/meal-plans/{plan_id}/days/2/snack", params={"index": 0})
    assert resp.status_code == 200
    assert resp.json()["days"][1]["snacks"] == []

    resp = client.delete(f"/api/v1/meal-plans/{plan_id}/days/1/dinner")
    assert resp.json()["days"][0]["dinner"] is None

    persisted = client.get(f"/api/v1/meal-plans/{plan_id}").json()
    assert persisted["days"][0]["breakfast"]["recipeId"] == extra
    assert persisted["days"][0]["dinner"] is None


def test_edit_meal_slot_errors(client, plan_id):
    resp = client.put(f"/api/v1/meal-plans/{plan_id}/days/1/lunch", json={"recipeId": str(uuid.uuid4())})
    assert resp.status_code == 404
    assert resp.json()["error"] == "NotFoundError"

    resp = client.delete(f"/api/v1/meal-plans/{plan_id}/days/9/lunch")
    assert resp.status_code == 400
    assert resp.json()["error"] == "ValidationError"

    resp = client.delete(f"/api/v1/meal-plans/{plan_id}/days/1/brunch")
    assert resp.status_code == 400


# ── Grocery ──────────────────────────────────────────────────────

def test_smart_merge_endpoint(client, fake_ai):
    fake_ai.responses["smart_merge"] = {
        "items": [{"name": "garlic", "quantity": 5, "unit": "cloves", "category": "Produce", "sources": [1, 2]}]
    }
    resp = client.post("/api/v1/grocery/smart-merge", json={"items": [
        {"name": "garlic cloves", "quantity": 3, "unit": "cloves"},
        {"name": "garlic", "quantity": 2},
    ]})
    assert resp.status_code == 200
    assert resp.json() == {"items": [
        {"name": "garlic", "quantity": 5.0, "unit": "cloves", "category": "Produce"},
    ]}


def test_smart_merge_empty_list(client, fake_ai):
    resp = client.post("/api/v1/grocery/smart-merge", json={"items": []})
    assert resp.json() == {"items": []}
    assert fake_ai.calls == []


def test_smart_merge_contract_violation(client, fake_ai):
    fake_ai.responses["smart_merge"] = {"items": []}
    resp = client.post("/api/v1/grocery/smart-merge", json={"items": [{"name": "garlic", "quantity": 1}]})
    assert resp.status_code == 502
    assert resp.json()["error"] == "SmartMergeError"


def test_aggregate_endpoint(client):
    resp = client.post("/api/v1/grocery/aggregate", json={
        "recipes": [
            {"id": "r1", "ingredients": [{"name": "garlic", "quantity": "3", "unit": "cloves"}]},
            {"id": "r2", "ingredients": [{"name": "Garlic", "quantity": "a few"}, {"name": "lemon", "quantity": "1"}]},
        ],
        "existing": [{"id": "keep", "name": "garlic", "quantity": 1, "checked": True, "recipeIds": ["r0"]}],
    })
    assert resp.status_code == 200
    items = resp.json()["items"]
    assert [(i["id"] == "keep", i["name"], i["quantity"]) for i in items] == [
        (True, "garlic", 5.0),
        (False, "lemon", 1.0),
    ]
    assert items[0]["recipeIds"] == ["r0", "r1", "r2"]
    assert items[0]["checked"] is True

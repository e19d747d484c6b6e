"""
Pytest configuration and shared fixtures.

The app runs against an in-memory SQLite database, and every external
collaborator (reasoning service, transcript service, image search) is
replaced with a canned fake.
"""

import asyncio
import json
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ANTHROPIC_API_KEY"] = ""
os.environ["SCRAPECREATORS_API_KEY"] = ""
os.environ["UNSPLASH_ACCESS_KEY"] = ""

import pytest
from fastapi.testclient import TestClient

from reelchef.database import Base, SessionLocal, engine, get_db
from reelchef.main import app
from reelchef.models.recipe import Recipe
from reelchef.routers.analyze import get_thumbnail_resolver, get_transcript_client
from reelchef.services.chef_ai import get_chef_ai
from reelchef.services.fingerprint import fingerprint
from reelchef.services.transcripts import Transcript, detect_platform

THUMBNAIL = "https://images.example.com/garlic-pasta.jpg"

RECIPE_PAYLOAD = {
    "title": "Garlic Butter Pasta",
    "servings": 2,
    "cookTimeMinutes": 20,
    "difficulty": "easy",
    "isVegetarian": True,
    "category": "Pasta",
    "thumbnailQuery": "garlic pasta",
    "ingredients": [
        {"name": "spaghetti", "quantity": "200", "unit": "g"},
        {"name": "garlic", "quantity": "3", "unit": "cloves"},
        {"name": "butter", "quantity": 2, "unit": "tbsp"},
    ],
    "steps": [
        {
            "order": 2,
            "description": "Toss the spaghetti with the garlic butter.",
            "highlightedWords": ["spaghetti", "Garlic", "parsley"],
        },
        {"order": 1, "description": "Boil the spaghetti.", "highlightedWords": ["spaghetti"]},
    ],
    "nutrition": {"calories": 520, "protein": 14},
}


class FakeChefAI:
    """Stands in for ChefAI; answers each method with a canned response.

    A response may be a str (returned as-is), a JSON-serializable value, or an
    exception instance (raised). ``delays`` holds per-method sleeps in seconds.
    """

    def __init__(self, **responses):
        self.responses = {"extract_recipe": json.dumps(RECIPE_PAYLOAD), **responses}
        self.delays: dict[str, float] = {}
        self.calls: list[tuple[str, tuple]] = []

    async def _respond(self, name: str, *args):
        self.calls.append((name, args))
        if name in self.delays:
            await asyncio.sleep(self.delays[name])
        value = self.responses.get(name)
        if isinstance(value, Exception):
            raise value
        if value is None:
            raise RuntimeError(f"No canned response for {name}")
        return value if isinstance(value, str) else json.dumps(value)

    def called(self, name: str) -> int:
        return sum(1 for n, _ in self.calls if n == name)

    async def extract_recipe(self, transcript, language="en"):
        return await self._respond("extract_recipe", transcript, language)

    async def draft_meal_plan(self, recipes, duration, timeout=None):
        return await self._respond("draft_meal_plan", recipes, duration)

    async def optimize_meal_plan(self, draft, recipes, timeout=None):
        return await self._respond("optimize_meal_plan", draft, recipes)

    async def smart_merge(self, items, timeout=None):
        return await self._respond("smart_merge", items)


class FakeTranscripts:
    def __init__(self, text="Boil the spaghetti, then toss it with garlic butter."):
        self.text = text
        self.urls: list[str] = []

    async def fetch(self, url, language="en"):
        platform = detect_platform(url)
        self.urls.append(url)
        return Transcript(text=self.text, platform=platform)


class FakeThumbnails:
    def __init__(self, url=THUMBNAIL):
        self.url = url
        self.calls: list[tuple] = []

    async def resolve(self, title, category, search_query=None):
        self.calls.append((title, category, search_query))
        return self.url


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_ai():
    return FakeChefAI()


@pytest.fixture
def fake_transcripts():
    return FakeTranscripts()


@pytest.fixture
def fake_thumbnails():
    return FakeThumbnails()


@pytest.fixture
def client(db, fake_ai, fake_transcripts, fake_thumbnails):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_chef_ai] = lambda: fake_ai
    app.dependency_overrides[get_transcript_client] = lambda: fake_transcripts
    app.dependency_overrides[get_thumbnail_resolver] = lambda: fake_thumbnails
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_recipe(db):
    """Factory that inserts a Recipe row and returns it."""
    counter = {"n": 0}

    def _make(title="Test Recipe", ingredients=None, **fields):
        counter["n"] += 1
        url = fields.pop("url", f"https://www.youtube.com/watch?v=test{counter['n']}")
        recipe = Recipe(
            url=url,
            url_hash=fingerprint(url),
            platform="youtube",
            title=title,
            servings=fields.pop("servings", 2),
            ingredients=ingredients if ingredients is not None else [
                {"name": "salt", "quantity": "1", "unit": "tsp"},
            ],
            steps=[{"order": 1, "description": "Cook it.", "highlightedWords": []}],
            is_vegetarian=fields.pop("is_vegetarian", False),
            is_vegan=fields.pop("is_vegan", False),
            is_gluten_free=fields.pop("is_gluten_free", False),
            category=fields.pop("category", "Main Course"),
            **fields,
        )
        db.add(recipe)
        db.commit()
        db.refresh(recipe)
        return recipe

    return _make

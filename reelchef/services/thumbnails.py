"""
Thumbnail Resolver — best-effort Unsplash lookup for recipe images.

Any failure falls back to a static image for the recipe category, so this
step never fails the extraction pipeline.
"""

import logging

import httpx

from reelchef.config import get_settings

logger = logging.getLogger(__name__)

CATEGORY_FALLBACKS = {
    "Pasta": "https://images.unsplash.com/photo-1473093226795-af9932fe5856?q=80&w=800&auto=format&fit=crop",
    "Salad": "https://images.unsplash.com/photo-1512621776951-a57141f2eefd?q=80&w=800&auto=format&fit=crop",
    "Soup": "https://images.unsplash.com/photo-1547592166-23ac45744acd?q=80&w=800&auto=format&fit=crop",
    "Dessert": "https://images.unsplash.com/photo-1563729784474-d77dbb933a9e?q=80&w=800&auto=format&fit=crop",
    "Meat": "https://images.unsplash.com/photo-1432139555190-58524dae6a55?q=80&w=800&auto=format&fit=crop",
    "Seafood": "https://images.unsplash.com/photo-1519708227418-c8fd9a32b7a2?q=80&w=800&auto=format&fit=crop",
    "Breakfast": "https://images.unsplash.com/photo-1482049016688-2d3e1b311543?q=80&w=800&auto=format&fit=crop",
    "Drink": "https://images.unsplash.com/photo-1544145945-f904253d0c7e?q=80&w=800&auto=format&fit=crop",
    "Main Course": "https://images.unsplash.com/photo-1504674900247-0877df9cc836?q=80&w=800&auto=format&fit=crop",
    "Appetizer": "https://images.unsplash.com/photo-1541014741259-df5290ce50ca?q=80&w=800&auto=format&fit=crop",
    "Snack": "https://images.unsplash.com/photo-1599490659223-ef52b4bc8c93?q=80&w=800&auto=format&fit=crop",
    "Bread": "https://images.unsplash.com/photo-1509440159596-0249088772ff?q=80&w=800&auto=format&fit=crop",
    "Vegetarian": "https://images.unsplash.com/photo-1540914124281-342729f3aa3f?q=80&w=800&auto=format&fit=crop",
}
DEFAULT_THUMBNAIL = CATEGORY_FALLBACKS["Main Course"]


def category_fallback(category: str | None) -> str:
    return CATEGORY_FALLBACKS.get(category or "", DEFAULT_THUMBNAIL)


def build_search_query(title: str, category: str | None, search_query: str | None = None) -> str:
    # "food" first keeps results in the food-photography space
    if search_query and search_query.strip():
        return f"food {search_query.strip()}"
    return f"food {title} {(category or 'main course').lower()}"


class ThumbnailResolver:
    def __init__(
        self,
        access_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        settings = get_settings()
        self.access_key = settings.UNSPLASH_ACCESS_KEY if access_key is None else access_key
        self.base_url = (base_url or settings.UNSPLASH_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.IMAGE_TIMEOUT_SECONDS
        self._client = client

    async def resolve(self, title: str, category: str | None, search_query: str | None = None) -> str:
        fallback = category_fallback(category)
        if not self.access_key:
            logger.info("Unsplash access key missing, using category fallback")
            return fallback

        query = build_search_query(title, category, search_query)
        logger.info(f"Searching Unsplash for: {query!r}")
        try:
            url = await self._search(query)
        except Exception as e:
            # Non-fatal: any failure degrades to the fallback
            logger.warning(f"Unsplash lookup failed ({e}), using category fallback")
            return fallback
        if not url:
            logger.warning("Unsplash returned no results, using category fallback")
            return fallback
        return url

    async def _search(self, query: str) -> str | None:
        params = {
            "query": query,
            "orientation": "squarish",
            "per_page": "3",
            "client_id": self.access_key,
        }
        endpoint = f"{self.base_url}/search/photos"
        if self._client is not None:
            response = await self._client.get(endpoint, params=params, timeout=self.timeout)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(endpoint, params=params)
        response.raise_for_status()

        results = response.json().get("results") or []
        if not results:
            return None
        urls = results[0].get("urls") or {}
        return urls.get("small") or urls.get("regular")

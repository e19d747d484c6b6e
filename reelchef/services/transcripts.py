"""
Transcript Extractor — fetches spoken/caption transcripts for short-form
cooking videos from the ScrapeCreators API, one endpoint per platform.
"""

import logging
from dataclasses import dataclass

import httpx

from reelchef.config import get_settings
from reelchef.errors import UnsupportedPlatformError, UpstreamFetchError

logger = logging.getLogger(__name__)

# Substring match against the lower-cased URL, checked in order
PLATFORM_PATTERNS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("youtube", ("youtube.com", "youtu.be")),
    ("tiktok", ("tiktok.com",)),
    ("instagram", ("instagram.com",)),
)

PLATFORM_ENDPOINTS = {
    "youtube": "/v1/youtube/video/transcript",
    "tiktok": "/v1/tiktok/video/transcript",
    "instagram": "/v1/instagram/media/transcript",
}


@dataclass
class Transcript:
    text: str
    platform: str
    title: str | None = None
    thumbnail_url: str | None = None


def detect_platform(url: str) -> str:
    lowered = url.lower()
    for platform, needles in PLATFORM_PATTERNS:
        if any(n in lowered for n in needles):
            return platform
    raise UnsupportedPlatformError(f"Unsupported platform for URL: {url}")


def _transcript_text(payload: dict) -> str:
    """Pull plain transcript text out of the per-platform response shapes."""
    text = payload.get("transcript_only_text")
    if isinstance(text, str) and text.strip():
        return text.strip()

    raw = payload.get("transcript")
    if isinstance(raw, str):
        return raw.strip()
    if isinstance(raw, list):
        return " ".join(
            seg.get("text", "").strip() for seg in raw if isinstance(seg, dict)
        ).strip()

    # Instagram returns one transcript per media item in a carousel
    items = payload.get("transcripts")
    if isinstance(items, list):
        return "\n".join(
            t.get("text", "").strip() for t in items if isinstance(t, dict)
        ).strip()
    return ""


class TranscriptClient:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        settings = get_settings()
        self.api_key = settings.SCRAPECREATORS_API_KEY if api_key is None else api_key
        self.base_url = (base_url or settings.SCRAPECREATORS_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.TRANSCRIPT_TIMEOUT_SECONDS
        self._client = client

    async def fetch(self, url: str, language: str = "en") -> Transcript:
        """Fetch the transcript for a video URL.

        Platform detection happens before any network call, so an
        unsupported URL never reaches the service.
        """
        platform = detect_platform(url)
        if not self.api_key:
            raise UpstreamFetchError("Transcript service API key not configured")

        endpoint = f"{self.base_url}{PLATFORM_ENDPOINTS[platform]}"
        params = {"url": url}
        if platform != "instagram":
            params["language"] = language

        try:
            if self._client is not None:
                response = await self._get(self._client, endpoint, params)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await self._get(client, endpoint, params)
        except httpx.TimeoutException:
            raise UpstreamFetchError(f"Transcript service timed out after {self.timeout:g}s")
        except httpx.HTTPError as e:
            raise UpstreamFetchError(f"Transcript service request failed: {e}")

        if not response.is_success:
            raise UpstreamFetchError(
                f"Transcript service error: {response.status_code} - {response.text[:200]}"
            )

        try:
            payload = response.json()
        except ValueError:
            raise UpstreamFetchError("Transcript service returned invalid JSON")
        if not isinstance(payload, dict):
            raise UpstreamFetchError("Transcript service returned an unexpected payload")

        text = _transcript_text(payload)
        if not text:
            raise UpstreamFetchError("No transcript found in video")

        logger.info(f"Fetched {platform} transcript ({len(text)} chars) for {url}")
        return Transcript(
            text=text,
            platform=platform,
            title=payload.get("title") or None,
            thumbnail_url=payload.get("thumbnail") or None,
        )

    async def _get(self, client: httpx.AsyncClient, endpoint: str, params: dict) -> httpx.Response:
        return await client.get(
            endpoint,
            params=params,
            headers={"x-api-key": self.api_key},
            timeout=self.timeout,
        )

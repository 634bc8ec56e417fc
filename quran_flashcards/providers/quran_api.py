from __future__ import annotations

import logging
import time

import httpx

from quran_flashcards.models import ChapterDetail, Translation
from quran_flashcards.providers.base import ContentProvider, NetworkError, NotFound

log = logging.getLogger("quran_flashcards.api")


class QuranAPIProvider(ContentProvider):
    """Client for the Quran text/translation REST API."""

    def __init__(
        self,
        base_url: str = "https://quran-api.asrulmunir.workers.dev",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def request(self, endpoint: str, params: dict | None = None):
        """GET an API endpoint and return the decoded JSON body."""
        url = f"{self.base_url}{endpoint}"
        t0 = time.monotonic()
        try:
            resp = await self._get_client().get(url, params=params)
        except httpx.HTTPError as e:
            log.warning("GET %s failed: %s", url, e)
            raise NetworkError(f"Request to {endpoint} failed: {e}") from e
        elapsed = time.monotonic() - t0
        log.info("GET %s -> %d (%.2fs)", url, resp.status_code, elapsed)

        if resp.status_code == 404:
            raise NotFound(f"Not found: {endpoint}")
        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            log.warning("API error response: %s", resp.text[:200])
            raise NetworkError(f"HTTP {resp.status_code}: {resp.reason_phrase}") from e
        try:
            return resp.json()
        except ValueError as e:
            raise NetworkError(f"Invalid JSON from {endpoint}") from e

    # ── ContentProvider ───────────────────────────────────────────────────

    async def get_chapter_detail(self, chapter_id: int) -> ChapterDetail:
        data = await self.request(f"/api/chapters/{chapter_id}")
        try:
            return ChapterDetail.from_api(data, chapter_id=chapter_id)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise NetworkError(f"Malformed chapter payload for {chapter_id}: {e}") from e

    async def get_verse_translations(self, chapter_id: int, verse_number: int) -> dict[str, Translation]:
        data = await self.request(f"/api/compare/{chapter_id}/{verse_number}")
        raw = data.get("translations") if isinstance(data, dict) else None
        if not isinstance(raw, dict):
            return {}
        return {
            key: Translation.from_api(key, value)
            for key, value in raw.items()
            if isinstance(value, dict)
        }

    def name(self) -> str:
        return f"quran-api/{self.base_url.split('://', 1)[-1]}"

    # ── Raw endpoints (pass-through) ──────────────────────────────────────

    async def get_info(self) -> dict:
        return await self.request("/api/info")

    async def get_chapters(self) -> list[dict]:
        return await self.request("/api/chapters")

    async def get_chapter(self, chapter_id: int) -> dict:
        return await self.request(f"/api/chapters/{chapter_id}")

    async def get_verse(self, chapter_id: int, verse_number: int) -> dict:
        return await self.request(f"/api/verses/{chapter_id}/{verse_number}")

    async def compare(self, chapter_id: int, verse_number: int) -> dict:
        return await self.request(f"/api/compare/{chapter_id}/{verse_number}")

    async def search(self, query: str, search_type: str = "text", normalize: bool = True, limit: int = 10) -> dict:
        params = {
            "q": query,
            "type": search_type,
            "normalize": "true" if normalize else "false",
            "limit": limit,
        }
        return await self.request("/api/search", params=params)

    async def search_translation(
        self,
        query: str,
        lang: str = "en",
        search_type: str = "text",
        include_arabic: bool = False,
        limit: int = 10,
    ) -> dict:
        params = {
            "q": query,
            "lang": lang,
            "type": search_type,
            "include_arabic": "true" if include_arabic else "false",
            "limit": limit,
        }
        return await self.request("/api/search/translation", params=params)

    async def get_translations(self) -> dict:
        return await self.request("/api/translations")

    async def get_stats(self) -> dict:
        return await self.request("/api/stats")

"""Shared test fixtures."""
from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from quran_flashcards.models import ChapterDetail, Token, Translation, Verse
from quran_flashcards.providers.base import ContentProvider, NetworkError, NotFound
from quran_flashcards.providers.quran_api import QuranAPIProvider

API_BASE = "https://api.test"


class FakeProvider(ContentProvider):
    """In-memory provider that records every call."""

    def __init__(self, chapters, translations, fail_translations=False):
        self.chapters = chapters
        self.translations = translations
        self.fail_translations = fail_translations
        self.chapter_calls: list[int] = []
        self.translation_calls: list[tuple[int, int]] = []
        self.gates: dict[int, asyncio.Event] = {}

    async def get_chapter_detail(self, chapter_id: int) -> ChapterDetail:
        self.chapter_calls.append(chapter_id)
        gate = self.gates.get(chapter_id)
        if gate is not None:
            await gate.wait()
        if chapter_id not in self.chapters:
            raise NotFound(f"Not found: /api/chapters/{chapter_id}")
        return self.chapters[chapter_id]

    async def get_verse_translations(self, chapter_id: int, verse_number: int) -> dict[str, Translation]:
        self.translation_calls.append((chapter_id, verse_number))
        if self.fail_translations:
            raise NetworkError("HTTP 503: Service Unavailable")
        return self.translations.get((chapter_id, verse_number), {})

    def name(self) -> str:
        return "fake"


@pytest.fixture
def sample_chapters():
    return {
        # Two verses: tokens A, B then C
        1: ChapterDetail(1, "Al-Fatihah", [
            Verse(1, "A B", [Token(1, "A"), Token(2, "B")]),
            Verse(2, "C", [Token(1, "C")]),
        ]),
        # No verses at all
        2: ChapterDetail(2, "Al-Baqarah", []),
        # First verse has no tokens; no name from the API
        3: ChapterDetail(3, "", [
            Verse(1, "", []),
            Verse(2, "X Y Z", [Token(1, "X"), Token(2, "Y"), Token(3, "Z")]),
        ]),
    }


@pytest.fixture
def sample_translations():
    return {
        (1, 1): {
            "en.hilali": Translation("en.hilali", "First verse", "Hilali & Khan", "English"),
            "ms.basmeih": Translation("ms.basmeih", "Ayat pertama", "Basmeih", "Malay"),
        },
        (1, 2): {
            "en.hilali": Translation("en.hilali", "Second verse", "Hilali & Khan", "English"),
        },
        (3, 2): {
            "en.hilali": Translation("en.hilali", "Say &quot;He is One&quot;", "Hilali & Khan", "English"),
        },
    }


@pytest.fixture
def fake_provider(sample_chapters, sample_translations):
    return FakeProvider(sample_chapters, sample_translations)


# ── Fake remote API (httpx.MockTransport) ─────────────────────────────────

API_DATA = {
    "/api/info": {"name": "Quran API", "version": "1.0"},
    "/api/chapters": [
        {"number": 1, "name": "Al-Fatihah", "verseCount": 2},
        {"number": 2, "name": "Al-Baqarah", "verseCount": 0},
    ],
    "/api/chapters/1": {
        "number": 1,
        "name": "Al-Fatihah",
        "verseCount": 2,
        "tokenCount": 3,
        "verses": [
            {"number": 1, "text": "A B", "tokenCount": 2,
             "tokens": [{"number": 1, "text": "A"}, {"number": 2, "text": "B"}]},
            {"number": 2, "text": "C", "tokenCount": 1,
             "tokens": [{"number": 1, "text": "C"}]},
        ],
    },
    "/api/chapters/2": {"number": 2, "name": "Al-Baqarah", "verseCount": 0, "verses": []},
    "/api/chapters/5": {
        "number": 5,
        "name": "Al-Ma'idah",
        "verses": [{"number": 1, "text": "D", "tokens": [{"number": 1, "text": "D"}]}],
    },
    "/api/chapters/4": {"number": 4, "name": "An-Nisa", "verses": [{"text": "no number"}]},
    "/api/compare/1/1": {
        "chapter": 1,
        "verse": 1,
        "translations": {
            "en.hilali": {"text": "First verse", "translator": "Hilali & Khan", "languageName": "English"},
            "ms.basmeih": {"text": "Ayat pertama", "translator": "Basmeih", "languageName": "Malay"},
            "zh.jian": {"text": "第一节", "translator": "Ma Jian", "languageName": "Chinese"},
        },
    },
    "/api/compare/1/2": {
        "translations": {
            "en.hilali": {"text": "Second verse", "translator": "Hilali & Khan", "languageName": "English"},
        },
    },
    "/api/chapters/7": {
        "number": 7,
        "name": "Al-A'raf",
        "verses": [{"number": 1, "text": "E", "tokens": [{"number": 1, "text": "E"}]}],
    },
    # Translation present but its text is null
    "/api/compare/7/1": {"translations": {"en.hilali": {"text": None, "translator": None}}},
    "/api/verses/1/1": {"chapterNumber": 1, "verseNumber": 1, "text": "A B"},
    "/api/translations": {"en.hilali": {"language": "English"}},
    "/api/stats": {"chapters": 114, "verses": 6236},
}

# Paths that answer with a server error
FAILING_PATHS = {"/api/chapters/3", "/api/compare/5/1"}


def make_transport(requests: list | None = None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        path = request.url.path
        if path in FAILING_PATHS:
            return httpx.Response(500, text="boom")
        if path in ("/api/search", "/api/search/translation"):
            return httpx.Response(200, json={"params": dict(request.url.params), "results": []})
        if path == "/api/chapters/6":
            return httpx.Response(200, text="<html>not json</html>")
        if path in API_DATA:
            return httpx.Response(200, content=json.dumps(API_DATA[path]),
                                  headers={"content-type": "application/json"})
        return httpx.Response(404, json={"error": "Not found"})

    return httpx.MockTransport(handler)


@pytest.fixture
def api_requests():
    return []


@pytest.fixture
def api_provider(api_requests):
    return QuranAPIProvider(base_url=API_BASE, transport=make_transport(api_requests))

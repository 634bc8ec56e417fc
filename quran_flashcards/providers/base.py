from __future__ import annotations

from abc import ABC, abstractmethod

from quran_flashcards.models import ChapterDetail, Translation


class ContentProviderError(Exception):
    """Base class for content lookup failures."""


class NotFound(ContentProviderError):
    """The requested chapter or verse does not exist."""


class NetworkError(ContentProviderError):
    """Transport failure, non-404 HTTP error, or an unreadable response."""


class ContentProvider(ABC):
    @abstractmethod
    async def get_chapter_detail(self, chapter_id: int) -> ChapterDetail:
        ...

    @abstractmethod
    async def get_verse_translations(self, chapter_id: int, verse_number: int) -> dict[str, Translation]:
        """Return all translations of one verse, keyed by translation key."""
        ...

    @abstractmethod
    def name(self) -> str:
        ...

    async def close(self) -> None:
        pass

    async def __aenter__(self) -> ContentProvider:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

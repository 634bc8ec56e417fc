"""Flashcard deck construction and traversal for one chapter's words."""
from __future__ import annotations

import html
import logging
import random
from typing import TYPE_CHECKING

from quran_flashcards.languages import (
    chapter_name,
    language_name,
    normalize_language,
    translation_key,
)
from quran_flashcards.models import Progress, WordCard
from quran_flashcards.providers.base import ContentProviderError

if TYPE_CHECKING:
    from quran_flashcards.models import ChapterDetail, Translation
    from quran_flashcards.providers.base import ContentProvider

log = logging.getLogger("quran_flashcards.flashcards")

TRANSLATION_MISSING = "Translation not available"


class ContentUnavailable(Exception):
    """Chapter or translation content could not be loaded."""


def shuffle_cards(cards: list, rng: random.Random | None = None) -> list:
    """Return a uniformly shuffled copy of `cards` (Fisher-Yates)."""
    rng = rng or random
    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def build_deck(chapter: ChapterDetail, translations: dict[int, dict[str, Translation]], key: str) -> list[WordCard]:
    """One card per token, in verse order then token order.

    `translations` maps verse number to that verse's translations.
    """
    deck = []
    for verse in chapter.verses:
        if not verse.tokens:
            continue
        translation = translations.get(verse.number, {}).get(key)
        text = html.unescape(translation.text) if translation and translation.text else TRANSLATION_MISSING
        for token in verse.tokens:
            deck.append(WordCard(
                arabic_text=token.text,
                location=(chapter.number, verse.number),
                position_label=f"Word {token.number}",
                verse_translation_text=text,
                verse_arabic_text=verse.text,
            ))
    return deck


class FlashcardSession:
    """Ordered deck of word cards with a cursor and a flip flag.

    All operations except `build` are in-memory and never raise; on an
    empty deck they do nothing.
    """

    def __init__(self, rng: random.Random | None = None):
        self.deck: list[WordCard] = []
        self.current_index = 0
        self.flipped = False
        self.chapter_id: int | None = None
        self.chapter_name = ""
        self.language_code = normalize_language(None)
        self._rng = rng or random.Random()
        self._generation = 0

    async def build(self, provider: ContentProvider, chapter_id: int, language_code: str | None) -> FlashcardSession:
        """Load `chapter_id` from `provider` and replace the deck.

        Translations are fetched once per verse that has tokens. On failure
        ContentUnavailable is raised and the previous deck is kept. If another
        build was started while this one was in flight, the newer build wins
        and this result is dropped.
        """
        self._generation += 1
        generation = self._generation
        language = normalize_language(language_code)
        key = translation_key(language)

        try:
            chapter = await provider.get_chapter_detail(chapter_id)
            translations: dict[int, dict[str, Translation]] = {}
            for verse in chapter.verses:
                if not verse.tokens or verse.number in translations:
                    continue
                translations[verse.number] = await provider.get_verse_translations(chapter_id, verse.number)
        except ContentProviderError as e:
            log.warning("Failed to load chapter %s: %s", chapter_id, e)
            raise ContentUnavailable(f"Chapter {chapter_id}: {e}") from e

        deck = build_deck(chapter, translations, key)

        if generation != self._generation:
            log.info("Dropping stale build of chapter %s (superseded)", chapter_id)
            return self

        self.deck = deck
        self.current_index = 0
        self.flipped = False
        self.chapter_id = chapter_id
        self.chapter_name = chapter_name(chapter_id, chapter.name)
        self.language_code = language
        log.info(
            "Built deck for chapter %s (%s): %d cards from %d verses",
            chapter_id, key, len(deck), len(chapter.verses),
        )
        return self

    @property
    def is_empty(self) -> bool:
        return not self.deck

    def shuffle(self) -> None:
        if not self.deck:
            return
        self.deck = shuffle_cards(self.deck, self._rng)
        self.current_index = 0
        self.flipped = False

    def next(self) -> None:
        if not self.deck:
            return
        self.current_index = (self.current_index + 1) % len(self.deck)
        self.flipped = False

    def previous(self) -> None:
        if not self.deck:
            return
        if self.current_index == 0:
            self.current_index = len(self.deck) - 1
        else:
            self.current_index -= 1
        self.flipped = False

    def flip(self) -> None:
        if not self.deck:
            return
        self.flipped = not self.flipped

    def reset(self) -> None:
        self.current_index = 0
        if self.deck:
            self.flipped = False

    def current(self) -> WordCard | None:
        if not self.deck:
            return None
        return self.deck[self.current_index]

    def progress(self) -> Progress:
        total = len(self.deck)
        if total == 0:
            return Progress(0, 0, 0.0)
        position = self.current_index + 1
        return Progress(position, total, position / total)

    def stats(self) -> dict:
        return {
            "chapter_id": self.chapter_id,
            "chapter_name": self.chapter_name,
            "language_code": self.language_code,
            "language_name": language_name(self.language_code),
            "translation_key": translation_key(self.language_code),
            "total_words": len(self.deck),
        }

    def to_dict(self) -> dict:
        card = self.current()
        return {
            "card": card.to_dict() if card else None,
            "progress": self.progress().to_dict(),
            "flipped": self.flipped,
            "stats": self.stats(),
        }

"""Language codes, translation keys and chapter display names."""
from __future__ import annotations

DEFAULT_LANGUAGE = "en"

TRANSLATION_KEYS = {
    "en": "en.hilali",
    "ms": "ms.basmeih",
    "zh": "zh.jian",
    "ta": "ta.tamil",
}

LANGUAGE_NAMES = {
    "en": "English",
    "ms": "Malay",
    "zh": "Chinese",
    "ta": "Tamil",
}

LANGUAGE_CLASSES = {
    "zh": "chinese-text",
    "ta": "tamil-text",
    "ms": "malay-text",
    "en": "english-text",
}

CHAPTER_COUNT = 114

# Names shown when the API's chapter list is unavailable
FALLBACK_CHAPTER_NAMES = {
    1: "Al-Fatihah",
    2: "Al-Baqarah",
    3: "Ali 'Imran",
    18: "Al-Kahf",
    36: "Ya-Sin",
    67: "Al-Mulk",
    112: "Al-Ikhlas",
}


def normalize_language(code: str | None) -> str:
    if code in TRANSLATION_KEYS:
        return code
    return DEFAULT_LANGUAGE


def translation_key(code: str | None) -> str:
    return TRANSLATION_KEYS[normalize_language(code)]


def language_name(code: str | None) -> str:
    return LANGUAGE_NAMES[normalize_language(code)]


def language_class(code: str | None) -> str:
    return LANGUAGE_CLASSES.get(code or "", "")


def is_valid_chapter(number: int) -> bool:
    return 1 <= number <= CHAPTER_COUNT


def chapter_name(number: int, name: str | None = None) -> str:
    if name:
        return name
    return FALLBACK_CHAPTER_NAMES.get(number, f"Chapter {number}")


def chapter_label(number: int, name: str | None = None) -> str:
    return f"{number}. {chapter_name(number, name)}"

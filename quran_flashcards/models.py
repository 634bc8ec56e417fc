from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Token:
    number: int
    text: str


@dataclass
class Verse:
    number: int
    text: str
    tokens: list[Token] = field(default_factory=list)


@dataclass
class ChapterDetail:
    number: int
    name: str
    verses: list[Verse] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict, chapter_id: int | None = None) -> ChapterDetail:
        """Parse a `/api/chapters/{id}` payload.

        Raises KeyError/TypeError/ValueError on a malformed payload.
        """
        verses = []
        for v in data.get("verses") or []:
            tokens = [
                Token(number=int(t["number"]), text=t["text"])
                for t in v.get("tokens") or []
            ]
            verses.append(Verse(number=int(v["number"]), text=v.get("text", ""), tokens=tokens))
        number = data.get("number", chapter_id)
        return cls(
            number=int(number) if number is not None else 0,
            name=data.get("name") or "",
            verses=verses,
        )

    @property
    def token_count(self) -> int:
        return sum(len(v.tokens) for v in self.verses)


@dataclass
class Translation:
    key: str  # e.g. en.hilali
    text: str
    translator: str = ""
    language_name: str = ""

    @classmethod
    def from_api(cls, key: str, data: dict) -> Translation:
        return cls(
            key=key,
            text=data.get("text") or "",
            translator=data.get("translator") or "",
            language_name=data.get("languageName") or data.get("language") or "",
        )


@dataclass(frozen=True)
class WordCard:
    arabic_text: str
    location: tuple[int, int]  # (chapter, verse)
    position_label: str  # "Word 3"
    verse_translation_text: str
    verse_arabic_text: str

    @property
    def location_label(self) -> str:
        return f"{self.location[0]}:{self.location[1]}"

    def to_dict(self) -> dict:
        return {
            "arabic_text": self.arabic_text,
            "location": self.location_label,
            "chapter": self.location[0],
            "verse": self.location[1],
            "position": self.position_label,
            "verse_translation": self.verse_translation_text,
            "verse_arabic": self.verse_arabic_text,
        }


@dataclass(frozen=True)
class Progress:
    position: int
    total: int
    fraction: float

    def to_dict(self) -> dict:
        return {
            "position": self.position,
            "total": self.total,
            "fraction": self.fraction,
            "percent": round(self.fraction * 100, 1),
        }

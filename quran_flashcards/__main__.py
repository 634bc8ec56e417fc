"""CLI entry point for quran-flashcards.

Usage:
  uv run python -m quran_flashcards serve [--port PORT] [--host HOST]
  uv run python -m quran_flashcards stop
  uv run python -m quran_flashcards restart [--port PORT]
  uv run python -m quran_flashcards status
  uv run python -m quran_flashcards deck CHAPTER [--lang CODE] [--shuffle]
"""
from __future__ import annotations

import asyncio
import os
import signal
import sys
from pathlib import Path

PID_FILE = Path(__file__).resolve().parent.parent / ".server.pid"


def main():
    args = sys.argv[1:]
    command = args[0] if args else "serve"

    if command == "serve":
        _serve(args[1:])
    elif command == "stop":
        _stop()
    elif command == "restart":
        _restart(args[1:])
    elif command == "status":
        _status()
    elif command == "deck":
        _deck(args[1:])
    else:
        print(f"Unknown command: {command}")
        print("Commands: serve, stop, restart, status, deck")
        sys.exit(1)


def _parse_flag(args: list[str], name: str, default: str) -> str:
    for i, a in enumerate(args):
        if a == name and i + 1 < len(args):
            return args[i + 1]
    return default


def _read_pid() -> int | None:
    """Read PID from file, return None if stale or missing."""
    if not PID_FILE.exists():
        return None
    try:
        pid = int(PID_FILE.read_text().strip())
        os.kill(pid, 0)
        return pid
    except (ValueError, ProcessLookupError, PermissionError):
        PID_FILE.unlink(missing_ok=True)
        return None


def _write_pid() -> None:
    PID_FILE.write_text(str(os.getpid()))


def _remove_pid() -> None:
    PID_FILE.unlink(missing_ok=True)


def _stop() -> bool:
    """Stop a running server. Returns True if a server was stopped."""
    pid = _read_pid()
    if pid is None:
        print("Server is not running.")
        return False
    try:
        os.kill(pid, signal.SIGTERM)
        print(f"Stopped server (PID {pid}).")
        PID_FILE.unlink(missing_ok=True)
        return True
    except ProcessLookupError:
        print("Server was not running (stale PID file removed).")
        PID_FILE.unlink(missing_ok=True)
        return False


def _status():
    pid = _read_pid()
    if pid is None:
        print("Server is not running.")
    else:
        print(f"Server is running (PID {pid}).")


def _restart(args: list[str]):
    import time
    _stop()
    time.sleep(1)
    _serve(args)


def _serve(args: list[str]):
    import uvicorn

    from quran_flashcards.config import load_settings

    existing = _read_pid()
    if existing is not None:
        print(f"Server already running (PID {existing}). Use 'restart' or 'stop' first.")
        sys.exit(1)

    settings = load_settings()
    port = int(_parse_flag(args, "--port", str(settings.port)))
    host = _parse_flag(args, "--host", settings.host)
    _write_pid()

    print(f"Starting Quran Flashcards on http://{host}:{port}")
    print("Press Ctrl+C to stop\n")
    try:
        uvicorn.run(
            "quran_flashcards.app:app",
            host=host,
            port=port,
            reload=False,
            timeout_graceful_shutdown=5,
        )
    finally:
        _remove_pid()


def _deck(args: list[str]):
    if not args or not args[0].isdigit():
        print("Usage: deck CHAPTER [--lang CODE] [--shuffle]")
        sys.exit(1)

    from quran_flashcards.config import load_settings
    from quran_flashcards.flashcards import ContentUnavailable
    from quran_flashcards.languages import is_valid_chapter

    chapter = int(args[0])
    if not is_valid_chapter(chapter):
        print(f"Chapter must be between 1 and 114, got {chapter}")
        sys.exit(1)

    settings = load_settings()
    language = _parse_flag(args, "--lang", settings.default_language)
    try:
        session = asyncio.run(_build_deck(settings, chapter, language, "--shuffle" in args))
    except ContentUnavailable as e:
        print(f"Failed to load flashcard data: {e}")
        sys.exit(1)

    stats = session.stats()
    print(f"{stats['chapter_name']} - {stats['language_name']} ({stats['translation_key']})")
    print("=" * 40)
    for i, card in enumerate(session.deck, 1):
        print(f"[{i}/{len(session.deck)}] {card.location_label} {card.position_label}: {card.arabic_text}")
        print(f"    {card.verse_translation_text}")
    print(f"\nTotal words: {stats['total_words']}")


async def _build_deck(settings, chapter: int, language: str, shuffle: bool):
    from quran_flashcards.flashcards import FlashcardSession
    from quran_flashcards.providers.quran_api import QuranAPIProvider

    async with QuranAPIProvider(base_url=settings.api_base, timeout=settings.request_timeout) as provider:
        session = await FlashcardSession().build(provider, chapter, language)
    if shuffle:
        session.shuffle()
    return session


if __name__ == "__main__":
    main()

"""FastAPI application: static front end, flashcard sessions, API pass-through."""
from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from pathlib import Path

logging.basicConfig(level=logging.INFO, format="%(name)s | %(message)s")

from fastapi import FastAPI, HTTPException, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import FileResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from quran_flashcards.config import Settings, load_settings
from quran_flashcards.flashcards import ContentUnavailable, FlashcardSession
from quran_flashcards.languages import CHAPTER_COUNT, is_valid_chapter
from quran_flashcards.providers.base import NetworkError, NotFound
from quran_flashcards.providers.quran_api import QuranAPIProvider

log = logging.getLogger("quran_flashcards.app")

app = FastAPI(title="Quran Flashcards")

# Global state (initialized in startup)
_provider: QuranAPIProvider | None = None
_settings: Settings | None = None
_sessions: OrderedDict[str, FlashcardSession] = OrderedDict()  # session_id -> session, oldest first


def get_provider() -> QuranAPIProvider:
    assert _provider is not None
    return _provider


def get_settings() -> Settings:
    assert _settings is not None
    return _settings


@app.on_event("startup")
async def startup():
    global _provider, _settings
    if _provider is not None:
        return  # Already initialized (e.g. by tests)
    _settings = load_settings()
    _provider = QuranAPIProvider(base_url=_settings.api_base, timeout=_settings.request_timeout)
    log.info("Using content API %s", _settings.api_base)


@app.on_event("shutdown")
async def shutdown():
    if _provider:
        await _provider.close()


# ── Response headers ──────────────────────────────────────────────────────

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


def content_security_policy(api_host: str) -> str:
    return (
        "default-src 'self'; "
        "script-src 'self' 'unsafe-inline'; "
        "style-src 'self' 'unsafe-inline' fonts.googleapis.com; "
        "font-src 'self' fonts.gstatic.com; "
        f"connect-src 'self' {api_host}; "
        "img-src 'self' data:; "
        "base-uri 'self';"
    )


def cache_control(content_type: str, status_code: int = 200) -> str:
    if status_code >= 400 or "application/json" in content_type:
        return "no-store"
    if "text/html" in content_type:
        return "public, max-age=300"  # 5 minutes
    if "text/css" in content_type or "javascript" in content_type:
        return "public, max-age=86400"  # 1 day
    return "public, max-age=31536000"  # 1 year


@app.middleware("http")
async def add_headers(request: Request, call_next):
    response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
        response.headers[name] = value
    api_host = _settings.api_host if _settings else ""
    response.headers["Content-Security-Policy"] = content_security_policy(api_host)
    response.headers["Cache-Control"] = cache_control(
        response.headers.get("content-type", ""), response.status_code,
    )
    return response


@app.exception_handler(StarletteHTTPException)
async def not_found_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and not request.url.path.startswith("/api/"):
        return PlainTextResponse("Page not found", status_code=404)
    return await http_exception_handler(request, exc)


# ── Static files ──────────────────────────────────────────────────────────

static_dir = Path(__file__).parent / "static"


@app.get("/")
async def index():
    return FileResponse(static_dir / "index.html", media_type="text/html")


@app.get("/style.css")
async def style():
    return FileResponse(static_dir / "style.css", media_type="text/css")


@app.get("/app.js")
async def script():
    return FileResponse(static_dir / "app.js", media_type="application/javascript")


app.mount("/static", StaticFiles(directory=static_dir), name="static")


# ── API: Flashcards ───────────────────────────────────────────────────────

def _parse_chapter(value) -> int:
    try:
        chapter = int(value)
    except (TypeError, ValueError):
        raise HTTPException(400, "Please select a chapter")
    if not is_valid_chapter(chapter):
        raise HTTPException(400, f"Chapter must be between 1 and {CHAPTER_COUNT}")
    return chapter


def _get_session(session_id: str) -> FlashcardSession:
    session = _sessions.get(session_id)
    if session is None:
        raise HTTPException(404, "Session not found")
    return session


def _session_state(session_id: str, session: FlashcardSession) -> dict:
    return {"session_id": session_id, **session.to_dict()}


def _parse_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


async def _json_body(request: Request) -> dict:
    if not await request.body():
        return {}
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(400, "Request body must be valid JSON")
    if not isinstance(body, dict):
        raise HTTPException(400, "Request body must be a JSON object")
    return body


def _store_session(session_id: str, session: FlashcardSession) -> None:
    """Keep at most `max_sessions` sessions, dropping the least recently started."""
    _sessions[session_id] = session
    _sessions.move_to_end(session_id)
    limit = max(1, get_settings().max_sessions)
    while len(_sessions) > limit:
        evicted, _ = _sessions.popitem(last=False)
        log.info("Evicted flashcard session %s (limit %d)", evicted, limit)


@app.post("/api/flashcards/start")
async def api_flashcards_start(request: Request):
    body = await _json_body(request)
    s = get_settings()
    chapter = _parse_chapter(body.get("chapter"))
    language = body.get("language") or s.default_language
    shuffle = _parse_bool(body.get("shuffle", s.shuffle_on_start))
    session_id = body.get("session_id") or uuid.uuid4().hex

    session = _sessions.get(session_id) or FlashcardSession()
    try:
        await session.build(get_provider(), chapter, language)
    except ContentUnavailable as e:
        raise HTTPException(502, f"Failed to load flashcard data: {e}")

    if shuffle:
        session.shuffle()
    _store_session(session_id, session)
    return _session_state(session_id, session)


@app.get("/api/flashcards/{session_id}")
async def api_flashcards_state(session_id: str):
    return _session_state(session_id, _get_session(session_id))


@app.post("/api/flashcards/{session_id}/next")
async def api_flashcards_next(session_id: str):
    session = _get_session(session_id)
    session.next()
    return _session_state(session_id, session)


@app.post("/api/flashcards/{session_id}/previous")
async def api_flashcards_previous(session_id: str):
    session = _get_session(session_id)
    session.previous()
    return _session_state(session_id, session)


@app.post("/api/flashcards/{session_id}/flip")
async def api_flashcards_flip(session_id: str):
    session = _get_session(session_id)
    session.flip()
    return _session_state(session_id, session)


@app.post("/api/flashcards/{session_id}/shuffle")
async def api_flashcards_shuffle(session_id: str):
    session = _get_session(session_id)
    session.shuffle()
    return _session_state(session_id, session)


@app.post("/api/flashcards/{session_id}/reset")
async def api_flashcards_reset(session_id: str):
    session = _get_session(session_id)
    session.reset()
    return _session_state(session_id, session)


@app.delete("/api/flashcards/{session_id}")
async def api_flashcards_delete(session_id: str):
    _get_session(session_id)
    del _sessions[session_id]
    return {"ok": True}


# ── API: Pass-through to the content API ──────────────────────────────────

async def _passthrough(coro):
    try:
        return await coro
    except NotFound as e:
        raise HTTPException(404, str(e))
    except NetworkError as e:
        raise HTTPException(502, f"API Error: {e}")


@app.get("/api/info")
async def api_info():
    return await _passthrough(get_provider().get_info())


@app.get("/api/chapters")
async def api_chapters():
    return await _passthrough(get_provider().get_chapters())


@app.get("/api/chapters/{chapter_id}")
async def api_chapter(chapter_id: int):
    return await _passthrough(get_provider().get_chapter(_parse_chapter(chapter_id)))


@app.get("/api/verses/{chapter_id}/{verse_number}")
async def api_verse(chapter_id: int, verse_number: int):
    return await _passthrough(get_provider().get_verse(_parse_chapter(chapter_id), verse_number))


@app.get("/api/compare/{chapter_id}/{verse_number}")
async def api_compare(chapter_id: int, verse_number: int):
    return await _passthrough(get_provider().compare(_parse_chapter(chapter_id), verse_number))


@app.get("/api/search")
async def api_search(q: str = "", type: str = "text", normalize: bool = True, limit: int = 10):
    if not q.strip():
        raise HTTPException(400, "Please enter a search query")
    return await _passthrough(get_provider().search(q, search_type=type, normalize=normalize, limit=limit))


@app.get("/api/search/translation")
async def api_search_translation(
    q: str = "",
    lang: str = "en",
    type: str = "text",
    include_arabic: bool = False,
    limit: int = 10,
):
    if not q.strip():
        raise HTTPException(400, "Please enter a search query")
    return await _passthrough(get_provider().search_translation(
        q, lang=lang, search_type=type, include_arabic=include_arabic, limit=limit,
    ))


@app.get("/api/translations")
async def api_translations():
    return await _passthrough(get_provider().get_translations())


@app.get("/api/stats")
async def api_stats():
    return await _passthrough(get_provider().get_stats())

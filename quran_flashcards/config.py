from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.json"

API_BASE_ENV = "QURAN_FLASHCARDS_API_BASE"

DEFAULTS = {
    "api_base": "https://quran-api.asrulmunir.workers.dev",
    "request_timeout": 30.0,
    "default_language": "en",
    "shuffle_on_start": True,
    "host": "127.0.0.1",
    "port": 8766,
    "max_sessions": 200,
}


@dataclass
class Settings:
    api_base: str = DEFAULTS["api_base"]
    request_timeout: float = DEFAULTS["request_timeout"]
    default_language: str = DEFAULTS["default_language"]
    shuffle_on_start: bool = DEFAULTS["shuffle_on_start"]
    host: str = DEFAULTS["host"]
    port: int = DEFAULTS["port"]
    max_sessions: int = DEFAULTS["max_sessions"]

    @property
    def project_root(self) -> Path:
        return Path(__file__).resolve().parent.parent

    @property
    def api_host(self) -> str:
        """Host part of api_base, used in the Content-Security-Policy."""
        return self.api_base.split("://", 1)[-1].split("/", 1)[0]

    def to_dict(self) -> dict:
        return {
            "api_base": self.api_base,
            "request_timeout": self.request_timeout,
            "default_language": self.default_language,
            "shuffle_on_start": self.shuffle_on_start,
            "host": self.host,
            "port": self.port,
            "max_sessions": self.max_sessions,
        }


def load_settings() -> Settings:
    if CONFIG_PATH.exists():
        raw = json.loads(CONFIG_PATH.read_text())
        known = {f.name for f in Settings.__dataclass_fields__.values()}
        filtered = {k: v for k, v in raw.items() if k in known}
        settings = Settings(**filtered)
    else:
        settings = Settings()
    # Env var wins over the config file
    env_base = os.environ.get(API_BASE_ENV)
    if env_base:
        settings.api_base = env_base
    return settings


def save_settings(settings: Settings) -> None:
    CONFIG_PATH.write_text(json.dumps(settings.to_dict(), indent=4) + "\n")

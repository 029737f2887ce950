"""
Environment-driven settings.

Values are read lazily (on each call) so tests can monkeypatch the
environment without reloading modules.
"""

from __future__ import annotations

import os

DEFAULT_DB_SCHEMA = "musicfeed"
DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://127.0.0.1:5173"


def env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, "").strip() or default


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_list(name: str, default: str = "") -> list[str]:
    raw = env_str(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def db_schema() -> str:
    return env_str("DB_SCHEMA", DEFAULT_DB_SCHEMA)


def cors_origins() -> list[str]:
    return env_list("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)


def log_level() -> str:
    return env_str("LOG_LEVEL", "INFO").upper()

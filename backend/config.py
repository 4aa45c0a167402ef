"""
Runtime settings read from the environment.
"""
from __future__ import annotations

import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent

_DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
)


def get_database_path() -> Path:
    """SQLite file; PICKLEBALL_DB_PATH overrides <project>/data/pickleball.db."""
    raw = os.environ.get("PICKLEBALL_DB_PATH", "").strip()
    if raw:
        return Path(raw)
    return PROJECT_ROOT / "data" / "pickleball.db"


def get_log_level() -> str:
    return os.environ.get("PICKLEBALL_LOG_LEVEL", "INFO").strip().upper() or "INFO"


def get_cors_origins() -> list[str]:
    raw = os.environ.get("PICKLEBALL_CORS_ORIGINS", "").strip()
    if not raw:
        return list(_DEFAULT_CORS_ORIGINS)
    return [o.strip() for o in raw.split(",") if o.strip()]


def get_default_courts() -> int:
    """Court count used when a request omits numCourts. Never below 1."""
    try:
        value = int(os.environ.get("PICKLEBALL_DEFAULT_COURTS", "1"))
    except ValueError:
        return 1
    return max(value, 1)


__all__ = [
    "PROJECT_ROOT",
    "get_database_path",
    "get_log_level",
    "get_cors_origins",
    "get_default_courts",
]

"""
Database connection and initialization.
"""
from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from backend.config import get_database_path

from .schema import all_schema_sql, index_schema

logger = logging.getLogger(__name__)


def _table_columns(conn: sqlite3.Connection, table: str) -> list[str]:
    cur = conn.execute(f"PRAGMA table_info({table})")
    return [row[1] for row in cur.fetchall()]


def _run_legacy_email_reset(conn: sqlite3.Connection) -> None:
    """Players tables from the email-era schema are dropped (with matches) and recreated fresh."""
    if "email" not in _table_columns(conn, "players"):
        return
    logger.warning("Legacy players table with email column found; dropping players and matches")
    conn.execute("DROP TABLE IF EXISTS matches")
    conn.execute("DROP TABLE IF EXISTS players")


def _run_player_column_migrations(conn: sqlite3.Connection) -> None:
    """Add available/phone to players created before those columns existed."""
    cols = _table_columns(conn, "players")
    if "available" not in cols:
        logger.info("Adding players.available column")
        conn.execute("ALTER TABLE players ADD COLUMN available INTEGER DEFAULT 1")
    if "phone" not in cols:
        logger.info("Adding players.phone column")
        conn.execute("ALTER TABLE players ADD COLUMN phone TEXT")


def _run_match_column_migrations(conn: sqlite3.Connection) -> None:
    """Add match_group/num_courts to matches. Existing rows keep NULL (treated as court count 0)."""
    cols = _table_columns(conn, "matches")
    if "match_group" not in cols:
        logger.info("Adding matches.match_group column")
        conn.execute("ALTER TABLE matches ADD COLUMN match_group INTEGER")
    if "num_courts" not in cols:
        logger.info("Adding matches.num_courts column")
        conn.execute("ALTER TABLE matches ADD COLUMN num_courts INTEGER")


_db_path: Path | None = None


def set_db_path(path: str | Path) -> None:
    """Set the database path. Call before first get_connection if not using default."""
    global _db_path
    _db_path = Path(path)


def get_db_path() -> Path:
    """Return the current database path."""
    if _db_path is not None:
        return _db_path
    return get_database_path()


def get_connection(db_path: str | Path | None = None) -> sqlite3.Connection:
    """
    Return a new SQLite connection with foreign keys enforced.
    Use as context manager or ensure close() is called.
    """
    path = Path(db_path) if db_path else get_db_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: str | Path | None = None) -> None:
    """
    Create or ensure all tables exist, then reconcile columns of older databases.
    Safe to call on every startup.
    """
    path = Path(db_path) if db_path else get_db_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    try:
        _run_legacy_email_reset(conn)
        conn.executescript(all_schema_sql())
        _run_player_column_migrations(conn)
        _run_match_column_migrations(conn)
        conn.executescript(index_schema())
        conn.commit()
        logger.info("Database ready at %s", path)
    finally:
        conn.close()

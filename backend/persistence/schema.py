"""
SQLite schema for roster and match entities.
Migration-friendly: each table created with IF NOT EXISTS.
"""
from __future__ import annotations


def players_schema() -> str:
    """available is stored as 0/1. phone is optional, validated before write."""
    return """
    CREATE TABLE IF NOT EXISTS players (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        available INTEGER DEFAULT 1,
        phone TEXT,
        created_at TEXT NOT NULL
    );
    """


def matches_schema() -> str:
    """player1/player2 = serving team, player3/player4 = receiving team."""
    return """
    CREATE TABLE IF NOT EXISTS matches (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        player1_id INTEGER REFERENCES players(id),
        player2_id INTEGER REFERENCES players(id),
        player3_id INTEGER REFERENCES players(id),
        player4_id INTEGER REFERENCES players(id),
        match_group INTEGER,
        num_courts INTEGER,
        created_at TEXT NOT NULL
    );
    """
    # Indexes live in index_schema(): legacy tables may lack the indexed columns


def index_schema() -> str:
    """Run after column reconciliation."""
    return """
    CREATE INDEX IF NOT EXISTS ix_players_available ON players(available);
    CREATE INDEX IF NOT EXISTS ix_matches_group ON matches(num_courts, match_group);
    """


def all_schema_sql() -> str:
    """Combine all schema DDL for a single execution. Order: players, matches."""
    return "\n".join([
        players_schema(),
        matches_schema(),
    ])

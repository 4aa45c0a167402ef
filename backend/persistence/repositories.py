"""
Repository interfaces for roster and match data.
No business logic — only read/write operations.
"""
from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import Sequence

from backend.models import PLAYERS_PER_MATCH, Match, MatchDetail, Player


def _parse_datetime(s: str | None) -> datetime:
    if s is None:
        raise ValueError("expected datetime string")
    return datetime.fromisoformat(s.replace("Z", "+00:00"))


def _has_col(conn: sqlite3.Connection, table: str, col: str) -> bool:
    cur = conn.execute(f"PRAGMA table_info({table})")
    return col in [row[1] for row in cur.fetchall()]


def _row_to_player(row: sqlite3.Row) -> Player:
    r = dict(row)
    return Player(
        id=r["id"],
        name=r["name"],
        # Legacy rows may carry NULL; column default is available
        available=bool(r["available"]) if r.get("available") is not None else True,
        phone=r.get("phone"),
        created_at=_parse_datetime(r["created_at"]),
    )


def _row_to_match(row: sqlite3.Row) -> Match:
    r = dict(row)
    return Match(
        id=r["id"],
        player1_id=r["player1_id"],
        player2_id=r["player2_id"],
        player3_id=r["player3_id"],
        player4_id=r["player4_id"],
        match_group=r.get("match_group"),
        num_courts=r.get("num_courts"),
        created_at=_parse_datetime(r["created_at"]),
    )


# ---------- PlayerRepository ----------


_PLAYER_COLS = "id, name, available, phone, created_at"


class PlayerRepository:
    """CRUD for the roster. Deleting a player also deletes its matches."""

    def create(self, conn: sqlite3.Connection, name: str) -> Player:
        now = datetime.utcnow().isoformat()
        cur = conn.execute(
            "INSERT INTO players (name, available, created_at) VALUES (?, 1, ?)",
            (name, now),
        )
        conn.commit()
        return self.get(conn, cur.lastrowid) or Player(
            id=cur.lastrowid, name=name, available=True, created_at=datetime.fromisoformat(now),
        )

    def get(self, conn: sqlite3.Connection, player_id: int) -> Player | None:
        row = conn.execute(
            f"SELECT {_PLAYER_COLS} FROM players WHERE id = ?", (player_id,)
        ).fetchone()
        if row is None:
            return None
        return _row_to_player(row)

    def list_all(self, conn: sqlite3.Connection) -> list[Player]:
        """Available players first, newest first within each half."""
        rows = conn.execute(
            f"SELECT {_PLAYER_COLS} FROM players ORDER BY available DESC, julianday(created_at) DESC, id DESC"
        ).fetchall()
        return [_row_to_player(r) for r in rows]

    def list_available(self, conn: sqlite3.Connection) -> list[Player]:
        rows = conn.execute(
            f"SELECT {_PLAYER_COLS} FROM players WHERE available = 1 ORDER BY julianday(created_at) DESC, id DESC"
        ).fetchall()
        return [_row_to_player(r) for r in rows]

    def set_availability(self, conn: sqlite3.Connection, player_id: int, available: bool) -> Player | None:
        """Returns None when the player does not exist."""
        conn.execute(
            "UPDATE players SET available = ? WHERE id = ?",
            (1 if available else 0, player_id),
        )
        conn.commit()
        return self.get(conn, player_id)

    def set_phone(self, conn: sqlite3.Connection, player_id: int, phone: str | None) -> Player | None:
        """Stores phone as given; validation belongs to the caller. None when the player does not exist."""
        conn.execute("UPDATE players SET phone = ? WHERE id = ?", (phone, player_id))
        conn.commit()
        return self.get(conn, player_id)

    def delete(self, conn: sqlite3.Connection, player_id: int) -> bool:
        """
        Delete the player and every match referencing it in any slot.
        Single transaction. Returns False when the player does not exist.
        """
        try:
            conn.execute(
                """DELETE FROM matches
                   WHERE player1_id = ? OR player2_id = ? OR player3_id = ? OR player4_id = ?""",
                (player_id, player_id, player_id, player_id),
            )
            cur = conn.execute("DELETE FROM players WHERE id = ?", (player_id,))
            if cur.rowcount == 0:
                conn.rollback()
                return False
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise
        return True

    def count(self, conn: sqlite3.Connection) -> int:
        return conn.execute("SELECT COUNT(*) FROM players").fetchone()[0]


# ---------- MatchRepository ----------


_MATCH_COLS = "id, player1_id, player2_id, player3_id, player4_id, match_group, num_courts, created_at"


class MatchRepository:
    """Matches and the per-court-count group counter."""

    def next_group(self, conn: sqlite3.Connection, num_courts: int) -> int:
        """
        max(match_group) + 1 among matches with this court count; 1 when there are none.
        NULL num_courts counts as 0, so legacy rows never collide with a real court count.
        Plain read: callers wanting a reservation must hold a write transaction.
        """
        if not (_has_col(conn, "matches", "match_group") and _has_col(conn, "matches", "num_courts")):
            return 1
        row = conn.execute(
            "SELECT MAX(match_group) AS max_group FROM matches WHERE COALESCE(num_courts, 0) = ?",
            (num_courts,),
        ).fetchone()
        max_group = row["max_group"] if row is not None else None
        return (max_group or 0) + 1

    def create(
        self,
        conn: sqlite3.Connection,
        player_ids: Sequence[int],
        match_group: int,
        num_courts: int,
        commit: bool = True,
    ) -> Match:
        """player_ids order: serving1, serving2, receiving1, receiving2."""
        if len(player_ids) != PLAYERS_PER_MATCH:
            raise ValueError("Match must have exactly 4 players")
        if len(set(player_ids)) != PLAYERS_PER_MATCH:
            raise ValueError("Match players must be distinct")
        now = datetime.utcnow().isoformat()
        p1, p2, p3, p4 = player_ids
        cur = conn.execute(
            """INSERT INTO matches (
                player1_id, player2_id, player3_id, player4_id, match_group, num_courts, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (p1, p2, p3, p4, match_group, num_courts, now),
        )
        if commit:
            conn.commit()
        return Match(
            id=cur.lastrowid,
            player1_id=p1,
            player2_id=p2,
            player3_id=p3,
            player4_id=p4,
            match_group=match_group,
            num_courts=num_courts,
            created_at=datetime.fromisoformat(now),
        )

    def get(self, conn: sqlite3.Connection, match_id: int) -> Match | None:
        row = conn.execute(
            f"SELECT {_MATCH_COLS} FROM matches WHERE id = ?", (match_id,)
        ).fetchone()
        if row is None:
            return None
        return _row_to_match(row)

    def list_by_group(self, conn: sqlite3.Connection, match_group: int, num_courts: int) -> list[Match]:
        rows = conn.execute(
            f"""SELECT {_MATCH_COLS} FROM matches
                WHERE match_group = ? AND COALESCE(num_courts, 0) = ?
                ORDER BY id""",
            (match_group, num_courts),
        ).fetchall()
        return [_row_to_match(r) for r in rows]

    def list_with_players(self, conn: sqlite3.Connection) -> list[MatchDetail]:
        """All matches with player names, newest group first."""
        rows = conn.execute(
            """SELECT
                   m.id, m.created_at, m.match_group, m.num_courts,
                   m.player1_id, p1.name AS player1_name,
                   m.player2_id, p2.name AS player2_name,
                   m.player3_id, p3.name AS player3_name,
                   m.player4_id, p4.name AS player4_name
               FROM matches m
               LEFT JOIN players p1 ON m.player1_id = p1.id
               LEFT JOIN players p2 ON m.player2_id = p2.id
               LEFT JOIN players p3 ON m.player3_id = p3.id
               LEFT JOIN players p4 ON m.player4_id = p4.id
               ORDER BY m.match_group DESC, julianday(m.created_at) DESC, m.id DESC"""
        ).fetchall()
        result: list[MatchDetail] = []
        for r in rows:
            rd = dict(r)
            result.append(MatchDetail(
                id=rd["id"],
                player1_id=rd["player1_id"],
                player2_id=rd["player2_id"],
                player3_id=rd["player3_id"],
                player4_id=rd["player4_id"],
                match_group=rd["match_group"],
                num_courts=rd["num_courts"],
                created_at=_parse_datetime(rd["created_at"]),
                player1_name=rd["player1_name"],
                player2_name=rd["player2_name"],
                player3_name=rd["player3_name"],
                player4_name=rd["player4_name"],
            ))
        return result

    def count(self, conn: sqlite3.Connection) -> int:
        return conn.execute("SELECT COUNT(*) FROM matches").fetchone()[0]

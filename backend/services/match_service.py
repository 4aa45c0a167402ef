"""
Match service: group numbering, per-court persistence, whole-round generation.

Two ways to produce a round:
- Client-driven: next_group() then one record_match() per court. Each call commits on
  its own, so two clients asking for the same court count can receive the same group
  number, and a failure halfway leaves an incomplete round.
- Server-driven: generate_round() reads the counter and writes every court inside one
  BEGIN IMMEDIATE transaction. Concurrent generations serialize on the SQLite write lock.
"""
from __future__ import annotations

import logging
import sqlite3
from typing import Sequence

from backend.matching import SeededRNG, partition
from backend.models import GeneratedRound, Match, MatchDetail, MatchRound, Player
from backend.persistence.repositories import MatchRepository, PlayerRepository

logger = logging.getLogger(__name__)


class UnknownPlayerError(ValueError):
    """A match referenced a player id that is not on the roster."""


def _validate_court_count(num_courts: int) -> None:
    if num_courts < 1:
        raise ValueError("numCourts must be at least 1")


def group_into_rounds(
    matches: Sequence[MatchDetail],
    available_players: Sequence[Player] = (),
) -> list[MatchRound]:
    """
    Bucket matches by (num_courts, match_group), newest round first.
    A round's age is its most recent match; ties fall back to the higher match id.
    Legacy rows without num_courts are read as one court.
    Each round lists the available players it left off the courts.
    """
    rounds: dict[tuple[int, int | None], MatchRound] = {}
    for m in matches:
        courts = m.num_courts or 1
        key = (courts, m.match_group)
        if key not in rounds:
            rounds[key] = MatchRound(match_group=m.match_group, num_courts=courts)
        rounds[key].matches.append(m)
    for rnd in rounds.values():
        playing = rnd.player_ids
        rnd.sitting_out = [p for p in available_players if p.id not in playing]
    return sorted(
        rounds.values(),
        key=lambda r: (r.latest_at, max(m.id for m in r.matches)),
        reverse=True,
    )


class MatchService:
    """
    Domain logic for match rounds.
    Persistence is delegated to repositories.
    """

    def __init__(self) -> None:
        self._match_repo = MatchRepository()
        self._player_repo = PlayerRepository()

    def next_group(self, conn: sqlite3.Connection, num_courts: int) -> int:
        _validate_court_count(num_courts)
        return self._match_repo.next_group(conn, num_courts)

    def record_match(
        self,
        conn: sqlite3.Connection,
        player_ids: Sequence[int],
        match_group: int,
        num_courts: int,
    ) -> Match:
        """Persist one court of a client-generated round. Raises ValueError on bad input."""
        _validate_court_count(num_courts)
        try:
            return self._match_repo.create(conn, player_ids, match_group, num_courts)
        except sqlite3.IntegrityError as e:
            conn.rollback()
            raise UnknownPlayerError("playerIds must reference existing players") from e

    def list_matches(self, conn: sqlite3.Connection) -> list[MatchDetail]:
        return self._match_repo.list_with_players(conn)

    def list_rounds(self, conn: sqlite3.Connection) -> list[MatchRound]:
        return group_into_rounds(
            self._match_repo.list_with_players(conn),
            self._player_repo.list_available(conn),
        )

    def generate_round(
        self,
        conn: sqlite3.Connection,
        num_courts: int,
        rng: SeededRNG | None = None,
    ) -> GeneratedRound:
        """
        List available players, take the next group number, partition, persist each court.
        Raises NotEnoughPlayersError (nothing written) when the roster is short.
        """
        _validate_court_count(num_courts)
        conn.execute("BEGIN IMMEDIATE")
        try:
            available = self._player_repo.list_available(conn)
            courts = partition(available, num_courts, rng)
            group = self._match_repo.next_group(conn, num_courts)
            matches = [
                self._match_repo.create(conn, c.player_ids, group, num_courts, commit=False)
                for c in courts
            ]
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        logger.info(
            "Generated match group %s with %s court(s) from %s available players",
            group, num_courts, len(available),
        )
        return GeneratedRound(match_group=group, num_courts=num_courts, courts=courts, matches=matches)

"""
Court partitioning for one round.

The available roster is shuffled once, then sliced into consecutive chunks of four:
court 0 gets shuffled[0:4], court 1 gets shuffled[4:8], and so on. Within a chunk
the first two players serve and the last two receive. Courts never share a player
because the chunks do not overlap. Players past 4 * num_courts sit out the round.
"""
from __future__ import annotations

from typing import Sequence

from backend.models import PLAYERS_PER_MATCH, CourtAssignment, Player

from .rng import SeededRNG


class NotEnoughPlayersError(ValueError):
    """Fewer available players than 4 per requested court."""

    def __init__(self, needed: int, available: int, num_courts: int) -> None:
        self.needed = needed
        self.available = available
        self.num_courts = num_courts
        super().__init__(
            f"Not enough available players. Need {needed} players for {num_courts} court(s), "
            f"but only {available} are available."
        )


def players_needed(num_courts: int) -> int:
    return PLAYERS_PER_MATCH * num_courts


def partition(
    available_players: Sequence[Player],
    num_courts: int,
    rng: SeededRNG | None = None,
) -> list[CourtAssignment]:
    """
    Randomly assign players to num_courts courts, four per court.
    Raises ValueError for num_courts < 1, NotEnoughPlayersError when the roster is short.
    The input sequence is not modified.
    """
    if num_courts < 1:
        raise ValueError("numCourts must be at least 1")
    needed = players_needed(num_courts)
    if len(available_players) < needed:
        raise NotEnoughPlayersError(needed, len(available_players), num_courts)
    rng = rng or SeededRNG()
    shuffled = list(available_players)
    rng.shuffle(shuffled)
    courts: list[CourtAssignment] = []
    for court in range(num_courts):
        chunk = shuffled[court * PLAYERS_PER_MATCH : (court + 1) * PLAYERS_PER_MATCH]
        courts.append(CourtAssignment(
            court=court,
            serving=(chunk[0], chunk[1]),
            receiving=(chunk[2], chunk[3]),
        ))
    return courts

"""
Data models for the pickleball matcher backend.
Domain objects only — no persistence or API logic.

Roster-centric: players are registered once and flagged available per session;
matches are generated in rounds (match groups) scoped to a court count.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

# Players per court: two serving, two receiving
PLAYERS_PER_MATCH = 4


# ---------- Player ----------
@dataclass
class Player:
    """
    A roster member.
    available: eligible for the next round. phone: optional, validated on write.
    """
    id: int
    name: str
    available: bool
    created_at: datetime
    phone: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "available": self.available,
            "phone": self.phone,
            "created_at": self.created_at.isoformat(),
        }


# ---------- Match ----------
@dataclass
class Match:
    """
    One court of one round.
    player1/player2 serve, player3/player4 receive. Immutable once stored.
    """
    id: int
    player1_id: int
    player2_id: int
    player3_id: int
    player4_id: int
    match_group: int | None
    num_courts: int | None
    created_at: datetime

    @property
    def player_ids(self) -> list[int]:
        return [self.player1_id, self.player2_id, self.player3_id, self.player4_id]

    @property
    def serving_ids(self) -> tuple[int, int]:
        return (self.player1_id, self.player2_id)

    @property
    def receiving_ids(self) -> tuple[int, int]:
        return (self.player3_id, self.player4_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "player1_id": self.player1_id,
            "player2_id": self.player2_id,
            "player3_id": self.player3_id,
            "player4_id": self.player4_id,
            "match_group": self.match_group,
            "num_courts": self.num_courts,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class MatchDetail(Match):
    """Match joined with player names. A name is None when that player row is gone."""
    player1_name: str | None = None
    player2_name: str | None = None
    player3_name: str | None = None
    player4_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d.update({
            "player1_name": self.player1_name,
            "player2_name": self.player2_name,
            "player3_name": self.player3_name,
            "player4_name": self.player4_name,
        })
        return d


# ---------- Court assignment (pre-persistence) ----------
@dataclass
class CourtAssignment:
    """Four players placed on one court by the partitioner. court is 0-based."""
    court: int
    serving: tuple[Player, Player]
    receiving: tuple[Player, Player]

    @property
    def players(self) -> list[Player]:
        return [*self.serving, *self.receiving]

    @property
    def player_ids(self) -> list[int]:
        """Slot order: serving pair, then receiving pair."""
        return [p.id for p in self.players]

    def to_dict(self) -> dict[str, Any]:
        return {
            "court": self.court,
            "serving": [p.to_dict() for p in self.serving],
            "receiving": [p.to_dict() for p in self.receiving],
        }


# ---------- Round (derived match group) ----------
@dataclass
class MatchRound:
    """
    Matches sharing (num_courts, match_group).
    complete is False when fewer matches than courts were persisted; duplicated is True
    when two generations raced onto the same group number and stored more than num_courts.
    sitting_out: currently available players who are not on any court of this round.
    """
    match_group: int | None
    num_courts: int | None
    matches: list[MatchDetail] = field(default_factory=list)
    sitting_out: list[Player] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return len(self.matches) >= (self.num_courts or 1)

    @property
    def duplicated(self) -> bool:
        return len(self.matches) > (self.num_courts or 1)

    @property
    def latest_at(self) -> datetime | None:
        return max((m.created_at for m in self.matches), default=None)

    @property
    def player_ids(self) -> set[int]:
        return {pid for m in self.matches for pid in m.player_ids}

    def to_dict(self) -> dict[str, Any]:
        latest = self.latest_at
        return {
            "match_group": self.match_group,
            "num_courts": self.num_courts,
            "created_at": latest.isoformat() if latest else None,
            "complete": self.complete,
            "duplicated": self.duplicated,
            "sitting_out": [p.to_dict() for p in self.sitting_out],
            "matches": [m.to_dict() for m in self.matches],
        }


@dataclass
class GeneratedRound:
    """Result of one server-side generation: the group number and what was stored."""
    match_group: int
    num_courts: int
    courts: list[CourtAssignment]
    matches: list[Match]

    def to_dict(self) -> dict[str, Any]:
        return {
            "match_group": self.match_group,
            "num_courts": self.num_courts,
            "courts": [c.to_dict() for c in self.courts],
            "matches": [m.to_dict() for m in self.matches],
        }

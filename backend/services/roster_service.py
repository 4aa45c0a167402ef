"""
Roster service: registration, availability, phone numbers, removal.
Validation lives here; persistence is delegated to PlayerRepository.
"""
from __future__ import annotations

import logging
import re
import sqlite3

from backend.models import Player
from backend.persistence.repositories import PlayerRepository

logger = logging.getLogger(__name__)

# Digits plus common separators; 7-20 characters after trimming
PHONE_PATTERN = re.compile(r"^[0-9+\-().\s]{7,20}$")


# ---------- Exceptions ----------


class PlayerNotFoundError(LookupError):
    """No player with the given id."""

    def __init__(self, player_id: int) -> None:
        self.player_id = player_id
        super().__init__("Player not found")


class InvalidNameError(ValueError):
    """Player name missing or blank."""


class InvalidPhoneError(ValueError):
    """Phone number missing or not a plausible phone string."""


def normalize_phone(phone: str | None) -> str:
    """Return the trimmed phone number or raise InvalidPhoneError."""
    if not phone or not isinstance(phone, str):
        raise InvalidPhoneError("Phone number is required")
    trimmed = phone.strip()
    if not trimmed or not PHONE_PATTERN.match(trimmed):
        raise InvalidPhoneError("Phone number is invalid")
    return trimmed


# ---------- RosterService ----------


class RosterService:
    """Roster operations with input validation and not-found guards."""

    def __init__(self) -> None:
        self._player_repo = PlayerRepository()

    def register(self, conn: sqlite3.Connection, name: str | None) -> Player:
        """New players start available."""
        if name is None or not name.strip():
            raise InvalidNameError("Name is required")
        player = self._player_repo.create(conn, name.strip())
        logger.info("Registered player %s (%s)", player.id, player.name)
        return player

    def list_players(self, conn: sqlite3.Connection) -> list[Player]:
        return self._player_repo.list_all(conn)

    def list_available(self, conn: sqlite3.Connection) -> list[Player]:
        return self._player_repo.list_available(conn)

    def get(self, conn: sqlite3.Connection, player_id: int) -> Player:
        player = self._player_repo.get(conn, player_id)
        if player is None:
            raise PlayerNotFoundError(player_id)
        return player

    def set_availability(self, conn: sqlite3.Connection, player_id: int, available: bool) -> Player:
        player = self._player_repo.set_availability(conn, player_id, available)
        if player is None:
            raise PlayerNotFoundError(player_id)
        return player

    def set_phone(self, conn: sqlite3.Connection, player_id: int, phone: str | None) -> Player:
        trimmed = normalize_phone(phone)
        player = self._player_repo.set_phone(conn, player_id, trimmed)
        if player is None:
            raise PlayerNotFoundError(player_id)
        return player

    def remove(self, conn: sqlite3.Connection, player_id: int) -> None:
        """Deletes the player and every match that references it."""
        if not self._player_repo.delete(conn, player_id):
            raise PlayerNotFoundError(player_id)
        logger.info("Removed player %s and their matches", player_id)

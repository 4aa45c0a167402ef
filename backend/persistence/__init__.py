"""
Persistence layer for roster and match data.
No business logic, no randomness — only read/write interfaces.
"""
from .db import get_connection, init_db
from .repositories import (
    PlayerRepository,
    MatchRepository,
)

__all__ = [
    "get_connection",
    "init_db",
    "PlayerRepository",
    "MatchRepository",
]

"""
Service layer: roster validation, match numbering and round generation.
Services orchestrate repositories; they never format HTTP responses.
"""
from .match_service import MatchService, UnknownPlayerError, group_into_rounds
from .roster_service import (
    RosterService,
    PlayerNotFoundError,
    InvalidNameError,
    InvalidPhoneError,
    normalize_phone,
)

__all__ = [
    "MatchService",
    "UnknownPlayerError",
    "group_into_rounds",
    "RosterService",
    "PlayerNotFoundError",
    "InvalidNameError",
    "InvalidPhoneError",
    "normalize_phone",
]

"""
Match generation: seeded shuffling and court partitioning.
Pure functions only; persistence is handled by the service layer.
"""
from .partition import NotEnoughPlayersError, partition, players_needed
from .rng import SeededRNG

__all__ = [
    "NotEnoughPlayersError",
    "partition",
    "players_needed",
    "SeededRNG",
]

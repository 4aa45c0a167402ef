"""
Seeded RNG for deterministic, replayable match generation.
"""
from __future__ import annotations

import random
from typing import MutableSequence


class SeededRNG:
    """Wrapper around random.Random so tests and callers can pin a seed."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)
        self._seed = seed

    @property
    def seed(self) -> int | None:
        return self._seed

    def randint(self, a: int, b: int) -> int:
        """Uniform integer in [a, b], both ends inclusive."""
        return self._rng.randint(a, b)

    def shuffle(self, seq: MutableSequence) -> None:
        """In-place Fisher–Yates: for i from last down to 1, swap with j uniform in [0, i]."""
        for i in range(len(seq) - 1, 0, -1):
            j = self.randint(0, i)
            seq[i], seq[j] = seq[j], seq[i]

"""Deterministic RNG wrapper built on top of random.Random."""
from __future__ import annotations

from random import Random

DEFAULT_SEED = 0x5EED1234


class RNG:
    """Seeded source for every random decision a simulation makes."""

    def __init__(self, seed: int = DEFAULT_SEED) -> None:
        self.seed = seed
        self._random = Random(seed)

    def random(self) -> float:
        """Return the next random floating point number in the range [0.0, 1.0)."""
        return self._random.random()

    def uniform(self, a: float, b: float) -> float:
        return a + (b - a) * self._random.random()

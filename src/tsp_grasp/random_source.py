"""Seeded random source handed to the randomized construction steps.

Each run owns its generator, so two runs with the same seed draw the same
sequence whatever else happens in the process.
"""
from __future__ import annotations

from typing import List, MutableSequence, Optional, Sequence, TypeVar

import numpy as np

T = TypeVar("T")


class RandomSource:
    def __init__(self, seed: Optional[int] = None, *, generator: Optional[np.random.Generator] = None):
        self.seed = seed
        self._rng = generator if generator is not None else np.random.default_rng(seed)

    def __repr__(self) -> str:
        return f"RandomSource(seed={self.seed!r})"

    def randrange(self, stop: int) -> int:
        """Uniform integer in ``[0, stop)``."""
        if stop <= 0:
            raise ValueError(f"randrange() needs a positive bound, got {stop}")
        return int(self._rng.integers(stop))

    def choice(self, items: Sequence[T]) -> T:
        if not items:
            raise IndexError("Cannot choose from an empty sequence")
        return items[self.randrange(len(items))]

    def shuffle(self, items: MutableSequence) -> None:
        # Fisher-Yates over our own draws keeps list element types untouched
        for i in range(len(items) - 1, 0, -1):
            j = self.randrange(i + 1)
            items[i], items[j] = items[j], items[i]

    def spawn(self, count: int) -> List["RandomSource"]:
        """Independent child sources, e.g. one per parallel restart."""
        return [RandomSource(generator=g) for g in self._rng.spawn(count)]

"""
Random source for the study engines.

Every engine takes a Shuffler so tests can seed it and callers can swap it.
Permutations are uniform (Fisher-Yates via random.Random.shuffle).
"""
from __future__ import annotations

import random
from typing import List, Optional, Sequence, TypeVar

T = TypeVar("T")


class Shuffler:
    def __init__(self, rng: Optional[random.Random] = None, seed: Optional[int] = None):
        self._rng = rng if rng is not None else random.Random(seed)

    def permute(self, items: Sequence[T]) -> List[T]:
        """Return a shuffled copy of items; the input is left untouched"""
        shuffled = list(items)
        self._rng.shuffle(shuffled)
        return shuffled

    def sample(self, items: Sequence[T], k: int) -> List[T]:
        """Pick up to k distinct items, uniformly without replacement"""
        k = max(0, min(k, len(items)))
        return self._rng.sample(list(items), k)

    def choice(self, items: Sequence[T]) -> T:
        return self._rng.choice(list(items))

# manito_matching/pairing/shuffle.py
from __future__ import annotations

import random
from typing import List, Optional, Sequence, TypeVar, Protocol

T = TypeVar("T")


class RandomSource(Protocol):
    def random(self) -> float: ...


def ensure_rng(rng: Optional[RandomSource]) -> RandomSource:
    return random.Random() if rng is None else rng


def fisher_yates(items: Sequence[T], rng: RandomSource) -> List[T]:
    """
    Return a shuffled copy of `items`.

    Only `rng.random()` is used, so tests can drive the permutation with a
    scripted source of floats in [0, 1).
    """
    out = list(items)
    for i in range(len(out) - 1, 0, -1):
        j = int(rng.random() * (i + 1))
        out[i], out[j] = out[j], out[i]
    return out

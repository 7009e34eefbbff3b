# manito_matching/roster/forbidden.py
from __future__ import annotations

from typing import Iterable, Set, Tuple


class ForbiddenPairs:
    """
    Symmetric deny-list of name pairs.

    Every input pair (a, b) is stored as both (a, b) and (b, a), so one
    entry blocks the giver->receiver edge in either direction.
    """

    def __init__(self, pairs: Iterable[Tuple[str, str]] = ()):
        self._keys: Set[Tuple[str, str]] = set()
        for pair in pairs:
            self.add(*pair)

    def add(self, a: str, b: str) -> None:
        a = (a or "").strip()
        b = (b or "").strip()
        if not a or not b:
            return
        self._keys.add((a, b))
        self._keys.add((b, a))

    def blocks(self, giver: str, receiver: str) -> bool:
        return (giver, receiver) in self._keys

    def __contains__(self, pair: Tuple[str, str]) -> bool:
        return tuple(pair) in self._keys

    def __len__(self) -> int:
        # Unordered pairs: (a, b) and (b, a) count once.
        return len({frozenset(k) for k in self._keys})

# manito_matching/roster/registry.py
from __future__ import annotations

from typing import Iterable, List

from ..models import Category, Participant


def _tagged(names: Iterable[str], category: Category) -> List[Participant]:
    # Whitespace-only names never become participants.
    return [
        Participant(name=n.strip(), category=category)
        for n in names
        if n and n.strip()
    ]


def build_participants(
    ordinary: Iterable[str],
    newcomers: Iterable[str],
    leads: Iterable[str],
) -> List[Participant]:
    """
    Tag the three raw name lists with their category.

    Names are trimmed. Order is ordinary, newcomer, lead. Duplicate names are
    kept as-is.
    """
    return (
        _tagged(ordinary, Category.ORDINARY)
        + _tagged(newcomers, Category.NEWCOMER)
        + _tagged(leads, Category.LEAD)
    )

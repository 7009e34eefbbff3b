# manito_matching/roster/toy_roster.py
from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import List, Tuple, Optional

from ..models import Roster
from ..config import (
    NUM_ORDINARY_DEFAULT,
    NUM_NEWCOMERS_DEFAULT,
    NUM_LEADS_DEFAULT,
    NUM_FORBIDDEN_DEFAULT,
    TOY_SEED,
)


def _random_forbidden_pairs(
    names: List[str],
    num_pairs: int,
    rng: random.Random,
) -> List[Tuple[str, str]]:
    """
    Draw `num_pairs` distinct unordered pairs from `names`.
    """
    all_pairs = [
        (a, b) for i, a in enumerate(names) for b in names[i + 1:]
    ]
    if num_pairs > len(all_pairs):
        raise ValueError(
            f"Cannot draw {num_pairs} forbidden pairs from {len(names)} names "
            f"(only {len(all_pairs)} distinct pairs exist)."
        )
    return rng.sample(all_pairs, k=num_pairs)


def make_toy_roster(
    num_ordinary: int = NUM_ORDINARY_DEFAULT,
    num_newcomers: int = NUM_NEWCOMERS_DEFAULT,
    num_leads: int = NUM_LEADS_DEFAULT,
    num_forbidden: int = NUM_FORBIDDEN_DEFAULT,
    seed: Optional[int] = TOY_SEED,
) -> Roster:
    """
    Return a roster with generated names (O01.., N01.., L01..) and
    random forbidden pairs drawn among the ordinary members.
    """
    if min(num_ordinary, num_newcomers, num_leads, num_forbidden) < 0:
        raise ValueError("Toy roster sizes must be non-negative.")

    rng = random.Random(seed)

    ordinary = [f"O{i:02d}" for i in range(1, num_ordinary + 1)]
    newcomers = [f"N{i:02d}" for i in range(1, num_newcomers + 1)]
    leads = [f"L{i:02d}" for i in range(1, num_leads + 1)]

    forbidden = _random_forbidden_pairs(ordinary, num_forbidden, rng)

    return Roster(
        ordinary=ordinary,
        newcomers=newcomers,
        leads=leads,
        forbidden_pairs=forbidden,
        fetched_at=datetime.now(timezone.utc).isoformat(),
    )

# manito_matching/pairing/partition.py
from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

from ..verbosity import vprint
from ..models import Category, Participant
from .shuffle import RandomSource, fisher_yates


def split_by_category(
    participants: Sequence[Participant],
) -> Dict[Category, List[Participant]]:
    by_cat: Dict[Category, List[Participant]] = {c: [] for c in Category}
    for p in participants:
        by_cat[p.category].append(p)
    return by_cat


def partition_population(
    participants: Sequence[Participant],
    rng: RandomSource,
    verbose=None,
) -> Tuple[List[Participant], List[Participant]]:
    """
    Split the population into (group_a, group_b).

    Group A holds every newcomer plus up to len(newcomers) leads; newcomers
    can only be paired through leads, so they are matched in their own group.
    Group B holds the ordinary members plus the leads Group A did not take.

      - no newcomers        -> A empty, B = ordinary + all leads
      - leads <= newcomers  -> A = newcomers + all leads, B = ordinary
      - leads >  newcomers  -> A = newcomers + random len(newcomers) leads,
                               B = ordinary + remaining leads
    """
    by_cat = split_by_category(participants)
    ordinary = by_cat[Category.ORDINARY]
    newcomers = by_cat[Category.NEWCOMER]
    leads = by_cat[Category.LEAD]

    if not newcomers:
        group_b = ordinary + leads
        vprint(f"[PARTITION] No newcomers; group B has {len(group_b)} members.", verbose=verbose)
        return [], group_b

    if len(leads) <= len(newcomers):
        group_a = newcomers + leads
        remaining: List[Participant] = []
    else:
        shuffled = fisher_yates(leads, rng)
        group_a = newcomers + shuffled[: len(newcomers)]
        remaining = shuffled[len(newcomers):]

    group_b = ordinary + remaining

    vprint(
        f"[PARTITION] Group A: {len(group_a)} (newcomers + leads), "
        f"group B: {len(group_b)} (ordinary + {len(remaining)} leads).",
        verbose=verbose,
    )
    return group_a, group_b

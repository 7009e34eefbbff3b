# manito_matching/pairing/diagnostics.py
from __future__ import annotations

from collections import Counter
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from ..models import Category, Participant
from ..roster.forbidden import ForbiddenPairs
from ..roster.registry import build_participants
from .partition import split_by_category
from .rules import is_valid_pair


def _expected_group_sizes(num_ordinary: int, num_newcomers: int, num_leads: int) -> Tuple[int, int]:
    if num_newcomers == 0:
        return 0, num_ordinary + num_leads
    leads_in_a = min(num_leads, num_newcomers)
    return num_newcomers + leads_in_a, num_ordinary + (num_leads - leads_in_a)


def _short_of_partners(
    pool: Sequence[Participant],
    members: Sequence[Participant],
    forbidden: ForbiddenPairs,
) -> List[Tuple[str, int]]:
    """
    Those of `members` with fewer than two eligible partners in `pool`.

    In a cycle of three or more, a member's giver and receiver are two
    different people, so two eligible partners is a hard lower bound.
    """
    short: List[Tuple[str, int]] = []
    for p in members:
        partners = sum(1 for q in pool if q is not p and is_valid_pair(p, q, forbidden))
        if partners < 2:
            short.append((p.name, partners))
    return short


def analyze_pairing_feasibility(
    ordinary: Sequence[str],
    newcomers: Sequence[str],
    leads: Sequence[str],
    forbidden_pairs: Iterable[Tuple[str, str]] = (),
) -> Dict[str, Any]:
    """
    Check whether a roster can *possibly* be paired before running the
    random matcher.

    Returns a dict with:
      - 'ok': bool (False when a structural blocker was found)
      - 'messages': list[str] (blockers)
      - 'warnings': list[str] (non-blocking observations)
      - 'suggestion': str (summary)
      - 'group_a_size': int
      - 'group_b_size': int
      - 'num_participants': int
      - 'short_of_partners': List[Tuple[str, int]]
    """
    messages: List[str] = []
    warnings: List[str] = []

    participants = build_participants(ordinary, newcomers, leads)
    by_cat = split_by_category(participants)
    num_o = len(by_cat[Category.ORDINARY])
    num_n = len(by_cat[Category.NEWCOMER])
    num_l = len(by_cat[Category.LEAD])
    total = len(participants)

    forbidden = ForbiddenPairs(forbidden_pairs)
    group_a_size, group_b_size = _expected_group_sizes(num_o, num_n, num_l)

    # ---------- 1. Population size ----------
    if total == 0:
        warnings.append("No participants: the round will produce an empty result.")
    elif total == 1:
        messages.append("Only one participant: a pairing needs at least two.")

    # ---------- 2. Duplicate names ----------
    dupes = sorted(name for name, c in Counter(p.name for p in participants).items() if c > 1)
    if dupes:
        warnings.append(
            f"Duplicate names {dupes}: members sharing a name are treated as the same "
            f"person by the self and reciprocity checks."
        )

    # ---------- 3. Group sizes ----------
    if total > 1:
        for label, size in (("A", group_a_size), ("B", group_b_size)):
            if size == 1:
                messages.append(f"Group {label} would hold a single member.")
            elif size == 2:
                messages.append(
                    f"Group {label} would hold exactly two members: a two-member cycle "
                    f"always makes them give to each other, which is rejected."
                )

    # ---------- 4. Newcomer / lead balance ----------
    # Newcomers cannot be neighbours in the cycle, so Group A needs at least
    # one lead per newcomer.
    if num_n > 0 and num_l < num_n:
        messages.append(
            f"Group A has {num_n} newcomers but only {num_l} leads; newcomers must be "
            f"separated by leads, so at least {num_n} leads are needed."
        )

    # ---------- 5. Per-member eligible partners ----------
    short: List[Tuple[str, int]] = []
    if num_n > 0 and num_l > num_n:
        warnings.append(
            "Leads are drawn into group A at random; per-member partner checks are "
            "limited to newcomers and ordinary members."
        )
        fixed_groups = [
            (by_cat[Category.NEWCOMER] + by_cat[Category.LEAD], by_cat[Category.NEWCOMER]),
            (by_cat[Category.ORDINARY] + by_cat[Category.LEAD], by_cat[Category.ORDINARY]),
        ]
    else:
        if num_n == 0:
            group_b = by_cat[Category.ORDINARY] + by_cat[Category.LEAD]
            group_a: List[Participant] = []
        else:
            group_a = by_cat[Category.NEWCOMER] + by_cat[Category.LEAD]
            group_b = by_cat[Category.ORDINARY]
        fixed_groups = [(group_a, group_a), (group_b, group_b)]

    # Optimistic pools: when leads are drawn at random, every lead counts as a
    # possible partner, so a reported shortage is still a real blocker.
    for pool, members in fixed_groups:
        if len(pool) < 3:
            continue
        short.extend(_short_of_partners(pool, members, forbidden))

    for name, n in short:
        messages.append(f"{name} has only {n} eligible partner(s) in their group; two are needed.")

    ok = len(messages) == 0

    if ok:
        suggestion = (
            "No structural blockers detected. "
            "A failed round (if any) would come from the random attempt budget."
        )
    else:
        suggestion = "Roster cannot be paired as is. "
        if num_n > 0 and num_l < num_n:
            suggestion += "Add leads or move newcomers to the ordinary list. "
        if short:
            suggestion += "Remove forbidden pairs involving the listed members. "
        if any("two members" in m or "single member" in m for m in messages):
            suggestion += "Rebalance categories so each group has at least three members."

    return {
        "ok": ok,
        "messages": messages,
        "warnings": warnings,
        "suggestion": suggestion.strip(),
        "group_a_size": group_a_size,
        "group_b_size": group_b_size,
        "num_participants": total,
        "short_of_partners": short,
    }

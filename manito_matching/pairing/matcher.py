# manito_matching/pairing/matcher.py
from __future__ import annotations

from typing import Callable, List, Optional, Sequence

from ..config import MAX_SHUFFLE_ATTEMPTS
from ..verbosity import vprint
from ..errors import GroupUnsolvableError, InsufficientPopulationError
from ..models import Assignment, Participant, utc_now_iso
from ..roster.forbidden import ForbiddenPairs
from .exact_milp import solve_exact_cycle
from .rules import is_valid_pair
from .shuffle import RandomSource, ensure_rng, fisher_yates


def cycle_to_assignments(
    cycle: Sequence[Participant],
    created_at: str,
) -> List[Assignment]:
    """
    Turn an ordering into the single cycle cycle[i] -> cycle[i+1], wrapping
    the last member back to the first. Ids are 1-based within the group.
    """
    n = len(cycle)
    out: List[Assignment] = []
    for i, giver in enumerate(cycle):
        receiver = cycle[(i + 1) % n]
        out.append(
            Assignment(
                id=i + 1,
                giver=giver.name,
                giver_category=giver.category,
                receiver=receiver.name,
                receiver_category=receiver.category,
                created_at=created_at,
            )
        )
    return out


def _first_invalid_edge(cycle: Sequence[Participant], forbidden: ForbiddenPairs) -> Optional[int]:
    n = len(cycle)
    for i in range(n):
        if not is_valid_pair(cycle[i], cycle[(i + 1) % n], forbidden):
            return i
    return None


def shuffle_and_pair(
    group: Sequence[Participant],
    forbidden: ForbiddenPairs,
    rng: Optional[RandomSource] = None,
    max_attempts: int = MAX_SHUFFLE_ATTEMPTS,
    exact_fallback: bool = False,
    clock: Optional[Callable[[], str]] = None,
    verbose=None,
) -> List[Assignment]:
    """
    Bounded rejection sampling of a single giver->receiver cycle over `group`.

    Each attempt shuffles the group (Fisher-Yates) and accepts the cycle only
    if every adjacent edge passes `is_valid_pair`. This is a heuristic: it can
    give up on a solvable group when constraints are tight. With
    `exact_fallback=True` the MILP in `exact_milp` is tried before giving up.

    Raises:
        InsufficientPopulationError: group has exactly one member.
        GroupUnsolvableError: no valid cycle within `max_attempts`
            (and the exact fallback, if enabled, found none either).
    """
    if not group:
        return []

    if len(group) == 1:
        raise InsufficientPopulationError(
            f"Cannot form a pair from a single participant ({group[0].name})."
        )

    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}.")

    rng = ensure_rng(rng)
    clock = clock or utc_now_iso

    for attempt in range(1, max_attempts + 1):
        cycle = fisher_yates(group, rng)
        if _first_invalid_edge(cycle, forbidden) is None:
            vprint(
                f"[PAIRING] Attempt {attempt} succeeded ({len(cycle)} pairs).",
                verbose=verbose,
            )
            return cycle_to_assignments(cycle, clock())

    vprint(
        f"[PAIRING] {max_attempts} shuffles failed for a group of {len(group)}.",
        verbose=verbose,
    )

    if exact_fallback:
        cycle = solve_exact_cycle(group, forbidden, rng, verbose=verbose)
        return cycle_to_assignments(cycle, clock())

    raise GroupUnsolvableError(len(group), max_attempts)

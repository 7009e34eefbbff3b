# manito_matching/pairing/engine.py
from __future__ import annotations

from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from ..config import MAX_SHUFFLE_ATTEMPTS, RULES_APPLIED, EMPTY_POPULATION_MESSAGE
from ..verbosity import vprint
from ..errors import InsufficientPopulationError
from ..models import Assignment, PairingMetadata, PairingResult, utc_now_iso
from ..roster.forbidden import ForbiddenPairs
from ..roster.registry import build_participants
from .matcher import shuffle_and_pair
from .partition import partition_population
from .shuffle import RandomSource, ensure_rng
from .validate import validate_result


def _renumber(assignments: List[Assignment]) -> List[Assignment]:
    for idx, a in enumerate(assignments, start=1):
        a.id = idx
    return assignments


def make_pairs(
    ordinary: Sequence[str],
    newcomers: Sequence[str],
    leads: Sequence[str],
    forbidden_pairs: Iterable[Tuple[str, str]] = (),
    rng: Optional[RandomSource] = None,
    max_attempts: int = MAX_SHUFFLE_ATTEMPTS,
    exact_fallback: bool = False,
    clock: Optional[Callable[[], str]] = None,
    verbose=None,
) -> PairingResult:
    """
    Build one manito round: every participant gives once and receives once.

    Pipeline: registry -> partition -> match group A -> match group B
    -> renumber 1..N -> reciprocity check -> metadata.

    An empty population returns an empty result with `metadata.error` set.
    Every other failure raises (see manito_matching.errors) and nothing
    partial is returned.
    """
    rng = ensure_rng(rng)
    clock = clock or utc_now_iso
    forbidden_rows = list(forbidden_pairs)

    participants = build_participants(ordinary, newcomers, leads)
    total = len(participants)

    vprint(
        f"[PAIRING] Participants: {len(ordinary)} ordinary, {len(newcomers)} newcomers, "
        f"{len(leads)} leads; {len(forbidden_rows)} forbidden pairs.",
        verbose=verbose,
    )

    if total == 0:
        return PairingResult(
            assignments=[],
            metadata=PairingMetadata(
                generated_at=clock(),
                rules_applied=list(RULES_APPLIED),
                error=EMPTY_POPULATION_MESSAGE,
            ),
        )

    if total == 1:
        raise InsufficientPopulationError(
            f"Only one participant ({participants[0].name}); a pairing needs at least two."
        )

    forbidden = ForbiddenPairs(forbidden_rows)

    group_a, group_b = partition_population(participants, rng, verbose=verbose)

    assignments: List[Assignment] = []
    for label, group in (("A", group_a), ("B", group_b)):
        if not group:
            continue
        vprint(f"[PAIRING] Matching group {label} ({len(group)} members)...", verbose=verbose)
        assignments.extend(
            shuffle_and_pair(
                group,
                forbidden,
                rng,
                max_attempts=max_attempts,
                exact_fallback=exact_fallback,
                clock=clock,
                verbose=verbose,
            )
        )

    _renumber(assignments)
    validate_result(assignments)

    vprint(f"[PAIRING] {len(assignments)} valid pairs created.", verbose=verbose)

    metadata = PairingMetadata(
        total_participants=total,
        used_participants=total,
        excluded_participants=0,
        excluded=[],
        forbidden_pair_count=len(forbidden_rows),
        generated_at=clock(),
        rules_applied=list(RULES_APPLIED),
    )
    return PairingResult(assignments=assignments, metadata=metadata)

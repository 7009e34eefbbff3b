# manito_matching/pairing/validate.py
from __future__ import annotations

from typing import Iterable, Set, Tuple

from ..errors import ReciprocityViolationError
from ..models import Assignment


def validate_result(assignments: Iterable[Assignment]) -> None:
    """
    Reject the whole result if any two members give to each other.

    Runs over the combined list, so a reciprocal pair spanning both groups
    is caught as well.
    """
    seen: Set[Tuple[str, str]] = set()
    for a in assignments:
        if (a.receiver, a.giver) in seen:
            raise ReciprocityViolationError(a.giver, a.receiver)
        seen.add((a.giver, a.receiver))

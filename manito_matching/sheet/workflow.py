# manito_matching/sheet/workflow.py
from __future__ import annotations

from typing import Any, Optional

from ..config import ROUND_MARKER_CELL
from ..verbosity import vprint
from ..models import PairingResult
from ..pairing.engine import make_pairs
from ..pairing.shuffle import RandomSource
from .grid_store import PairingStore


def run_pairing_round(
    store: PairingStore,
    rng: Optional[RandomSource] = None,
    save: bool = True,
    expected_marker: Optional[str] = None,
    marker_cell: str = ROUND_MARKER_CELL,
    verbose=None,
    **engine_kwargs: Any,
) -> PairingResult:
    """
    Read the roster through `store`, pair it, and write the pairs back.

    The engine only ever sees plain lists; all I/O goes through the store.

    If `expected_marker` is given, the round marker cell is swapped from that
    value to this round's `generated_at` before the pairs are written, so two
    concurrent runs cannot both save. When the pair write then fails, the
    marker is swapped back and the error is re-raised, so the same round can
    be retried with the same `expected_marker`.
    """
    roster = store.fetch_roster()

    result = make_pairs(
        roster.ordinary,
        roster.newcomers,
        roster.leads,
        roster.forbidden_pairs,
        rng=rng,
        verbose=verbose,
        **engine_kwargs,
    )

    if not save or not result.assignments:
        return result

    if expected_marker is None:
        summary = store.save_pairs(result.as_tuples())
    else:
        stamp = result.metadata.generated_at
        swapped = store.update_cell_cas(marker_cell, stamp, expected_marker)
        try:
            summary = store.save_pairs(result.as_tuples())
        except Exception:
            vprint(f"[SHEET] Pair write failed; restoring round marker at {marker_cell}", verbose=verbose)
            store.update_cell_cas(marker_cell, swapped["previous_value"], stamp)
            raise

    vprint(f"[SHEET] Round saved: {summary['saved_pairs']} pairs at {summary['range']}", verbose=verbose)
    return result

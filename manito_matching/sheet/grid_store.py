# manito_matching/sheet/grid_store.py
from __future__ import annotations

import csv
import os
import re
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Protocol

import pandas as pd

from ..config import (
    SHEET_NAME_DEFAULT,
    ORDINARY_RANGE,
    NEWCOMER_RANGE,
    LEAD_RANGE,
    FORBIDDEN_RANGE,
    PAIRS_START_CELL,
    PAIRS_RANGE,
)
from ..errors import SheetError, CellConflictError
from ..models import Roster, utc_now_iso
from ..verbosity import vprint

_CELL_RE = re.compile(r"^([A-Za-z]+)(\d*)$")


class PairingStore(Protocol):
    """What the round workflow needs from tabular storage."""

    def fetch_roster(self) -> Roster: ...

    def save_pairs(self, pairs: Sequence[Tuple[str, str]]) -> Dict[str, Any]: ...

    def update_cell_cas(self, address: str, new_value: Any, expected_value: Any) -> Dict[str, Any]: ...


# ======================================================================
#  A1-style addressing
# ======================================================================

def column_index(letters: str) -> int:
    """'A' -> 0, 'Z' -> 25, 'AA' -> 26."""
    idx = 0
    for ch in letters.upper():
        idx = idx * 26 + (ord(ch) - ord("A") + 1)
    return idx - 1


def column_letters(index: int) -> str:
    out = ""
    index += 1
    while index:
        index, rem = divmod(index - 1, 26)
        out = chr(ord("A") + rem) + out
    return out


def _split_ref(ref: str) -> Tuple[int, Optional[int]]:
    m = _CELL_RE.match(ref.strip())
    if not m:
        raise SheetError(f"Invalid cell reference: {ref!r}")
    col = column_index(m.group(1))
    row = int(m.group(2)) - 1 if m.group(2) else None
    if row is not None and row < 0:
        raise SheetError(f"Rows start at 1: {ref!r}")
    return col, row


def parse_cell(address: str) -> Tuple[int, int]:
    """'J4' -> (row=3, col=9), both zero-based."""
    col, row = _split_ref(address)
    if row is None:
        raise SheetError(f"Cell address needs a row number: {address!r}")
    return row, col


def parse_range(address: str) -> Tuple[int, int, Optional[int], int]:
    """
    'G4:H40' -> (3, 6, 39, 7); 'A4:A' -> (3, 0, None, 0).

    Returns (start_row, start_col, end_row, end_col), zero-based and
    inclusive; end_row is None for ranges open towards the bottom.
    """
    if ":" not in address:
        row, col = parse_cell(address)
        return row, col, row, col

    start, end = address.split(":", 1)
    start_row, start_col = parse_cell(start)
    end_col, end_row = _split_ref(end)

    if end_col < start_col or (end_row is not None and end_row < start_row):
        raise SheetError(f"Range end comes before its start: {address!r}")
    return start_row, start_col, end_row, end_col


# ======================================================================
#  Cleaning raw cell blocks
# ======================================================================

def extract_column_data(rows: Iterable[Sequence[Any]]) -> List[str]:
    """Flatten a block of cells, drop blanks and trim the rest."""
    out: List[str] = []
    for row in rows or []:
        for item in row:
            if isinstance(item, str) and item.strip():
                out.append(item.strip())
    return out


def extract_pair_data(rows: Iterable[Sequence[Any]]) -> List[Tuple[str, str]]:
    """Keep rows whose first two cells are both non-blank strings."""
    out: List[Tuple[str, str]] = []
    for row in rows or []:
        if len(row) < 2:
            continue
        a, b = row[0], row[1]
        if isinstance(a, str) and isinstance(b, str) and a.strip() and b.strip():
            out.append((a.strip(), b.strip()))
    return out


def roster_statistics(roster: Roster) -> Dict[str, Any]:
    return {
        "total_items": roster.total,
        "total_pairs": len(roster.forbidden_pairs),
        "breakdown": {
            "ordinary": len(roster.ordinary),
            "newcomers": len(roster.newcomers),
            "leads": len(roster.leads),
            "forbidden_pairs": len(roster.forbidden_pairs),
        },
        "last_updated": roster.fetched_at,
    }


def find_receiver(pairs: Iterable[Tuple[str, str]], name: str) -> Optional[str]:
    """
    Receiver of the giver called `name` (case-insensitive, trimmed), or None
    when no saved pair has that giver.
    """
    wanted = (name or "").strip().lower()
    if not wanted:
        return None
    for giver, receiver in pairs:
        if giver.strip().lower() == wanted:
            return receiver.strip()
    return None


SEARCHABLE_FIELDS = ("ordinary", "newcomers", "leads")


def search_roster(
    roster: Roster,
    term: str,
    types: Sequence[str] = SEARCHABLE_FIELDS,
) -> Dict[str, Any]:
    """
    Case-insensitive substring search over the roster lists named in `types`.

    "forbidden_pairs" may be added to `types`; a pair matches when either
    name contains the term. Each hit is {"item", "index", "type"}, where
    index is the position inside its own list.
    """
    needle = (term or "").strip().lower()
    if not needle:
        return {"results": [], "total_found": 0, "search_term": term}

    results: List[Dict[str, Any]] = []
    for field in types:
        if field == "forbidden_pairs":
            continue
        for index, item in enumerate(getattr(roster, field, None) or []):
            if isinstance(item, str) and needle in item.lower():
                results.append({"item": item, "index": index, "type": field})

    if "forbidden_pairs" in types:
        for index, (a, b) in enumerate(roster.forbidden_pairs):
            if needle in a.lower() or needle in b.lower():
                results.append({"item": (a, b), "index": index, "type": "forbidden_pairs"})

    return {"results": results, "total_found": len(results), "search_term": term}


# ======================================================================
#  CSV-backed sheet
# ======================================================================

class GridSheetStore:
    """
    One sheet stored as a headerless CSV file, held in memory as a pandas
    DataFrame of strings. Cells are addressed A1-style; row 1 is the first
    line of the file.

    With autosave on, every write goes straight back to disk.
    """

    def __init__(self, path: str, sheet_name: str = SHEET_NAME_DEFAULT, autosave: bool = True, verbose=None):
        self.path = path
        self.sheet_name = sheet_name
        self.autosave = autosave
        self.verbose = verbose
        self._grid = pd.DataFrame()
        self.load()

    # ---------- file I/O ----------

    def load(self) -> None:
        if not os.path.exists(self.path):
            self._grid = pd.DataFrame()
            return

        # Rows can be ragged, so read with csv and let pandas pad.
        with open(self.path, "r", encoding="utf-8", newline="") as f:
            rows = list(csv.reader(f))

        self._grid = pd.DataFrame(rows, dtype=object).fillna("")
        vprint(f"[SHEET] Loaded {self._grid.shape[0]} rows from {self.path}", verbose=self.verbose)

    def save(self) -> None:
        tmp_path = f"{self.path}.tmp"
        try:
            self._grid.to_csv(tmp_path, header=False, index=False)
            os.replace(tmp_path, self.path)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)

    def _ensure_size(self, n_rows: int, n_cols: int) -> None:
        rows = max(self._grid.shape[0], n_rows)
        cols = max(self._grid.shape[1], n_cols)
        if (rows, cols) != self._grid.shape:
            self._grid = (
                self._grid.reindex(index=range(rows), columns=range(cols))
                .astype(object)
                .fillna("")
            )

    # ---------- reads ----------

    def get_range(self, address: str) -> List[List[str]]:
        start_row, start_col, end_row, end_col = parse_range(address)
        n_rows, n_cols = self._grid.shape

        last_row = n_rows - 1 if end_row is None else min(end_row, n_rows - 1)
        last_col = min(end_col, n_cols - 1)
        if start_row > last_row or start_col > last_col:
            return []

        block = self._grid.iloc[start_row:last_row + 1, start_col:last_col + 1]
        return [[str(v) for v in row] for row in block.itertuples(index=False, name=None)]

    def get_batch(self, addresses: Sequence[str]) -> Dict[str, List[List[str]]]:
        return {a: self.get_range(a) for a in addresses}

    def get_cell(self, address: str) -> str:
        row, col = parse_cell(address)
        if row >= self._grid.shape[0] or col >= self._grid.shape[1]:
            return ""
        return str(self._grid.iat[row, col])

    # ---------- writes ----------

    def update_cell(self, address: str, value: Any) -> Dict[str, Any]:
        row, col = parse_cell(address)
        self._ensure_size(row + 1, col + 1)
        self._grid.iat[row, col] = "" if value is None else str(value)
        if self.autosave:
            self.save()
        return {"success": True, "updated_range": f"{self.sheet_name}!{address}", "updated_cells": 1}

    def update_cell_cas(self, address: str, new_value: Any, expected_value: Any) -> Dict[str, Any]:
        """
        Compare-and-swap on one cell: re-read the file, and write only if the
        trimmed current value equals the trimmed expected value.

        Raises CellConflictError on mismatch.
        """
        self.load()
        current = self.get_cell(address)
        normalized_current = current.strip()
        normalized_expected = ("" if expected_value is None else str(expected_value)).strip()

        if normalized_current != normalized_expected:
            raise CellConflictError(address, normalized_current, normalized_expected)

        result = self.update_cell(address, new_value)
        if not self.autosave:
            self.save()
        result.update({"cas_success": True, "previous_value": current, "new_value": str(new_value)})
        return result

    def write_block(self, start: str, rows: Sequence[Sequence[Any]]) -> int:
        """Write a 2D block with its top-left corner at `start`; returns cells written."""
        row0, col0 = parse_cell(start)
        width = max((len(r) for r in rows), default=0)
        self._ensure_size(row0 + len(rows), col0 + width)
        cells = 0
        for i, r in enumerate(rows):
            for j, v in enumerate(r):
                self._grid.iat[row0 + i, col0 + j] = "" if v is None else str(v)
                cells += 1
        return cells

    # ---------- roster round-trip ----------

    def fetch_roster(
        self,
        ordinary_range: str = ORDINARY_RANGE,
        newcomer_range: str = NEWCOMER_RANGE,
        lead_range: str = LEAD_RANGE,
        forbidden_range: str = FORBIDDEN_RANGE,
    ) -> Roster:
        self.load()
        batch = self.get_batch([ordinary_range, newcomer_range, lead_range, forbidden_range])

        roster = Roster(
            ordinary=extract_column_data(batch[ordinary_range]),
            newcomers=extract_column_data(batch[newcomer_range]),
            leads=extract_column_data(batch[lead_range]),
            forbidden_pairs=extract_pair_data(batch[forbidden_range]),
            fetched_at=utc_now_iso(),
        )
        vprint(
            f"[SHEET] Roster: {len(roster.ordinary)} ordinary, {len(roster.newcomers)} newcomers, "
            f"{len(roster.leads)} leads, {len(roster.forbidden_pairs)} forbidden pairs.",
            verbose=self.verbose,
        )
        return roster

    def fetch_pairs(self, pairs_range: str = PAIRS_RANGE) -> List[Tuple[str, str]]:
        """Saved (giver, receiver) rows; half-filled or blank rows are skipped."""
        self.load()
        pairs = extract_pair_data(self.get_range(pairs_range))
        vprint(f"[SHEET] Loaded {len(pairs)} saved pairs from {pairs_range}", verbose=self.verbose)
        return pairs

    def save_pairs(
        self,
        pairs: Sequence[Tuple[str, str]],
        start_cell: str = PAIRS_START_CELL,
        clear_stale: bool = True,
    ) -> Dict[str, Any]:
        """
        Write (giver, receiver) rows as two columns starting at `start_cell`.

        With `clear_stale`, leftover rows of a longer previous round below the
        new block are blanked.
        """
        if not pairs:
            raise SheetError("No pairs to save.")

        row0, col0 = parse_cell(start_cell)
        updated = self.write_block(start_cell, [[g, r] for g, r in pairs])

        if clear_stale:
            first_stale = row0 + len(pairs)
            if first_stale < self._grid.shape[0]:
                self._grid.iloc[first_stale:, col0:col0 + 2] = ""

        if self.autosave:
            self.save()

        end_ref = f"{column_letters(col0 + 1)}{row0 + len(pairs)}"
        data_range = f"{self.sheet_name}!{start_cell}:{end_ref}"
        vprint(f"[SHEET] Saved {len(pairs)} pairs to {data_range}", verbose=self.verbose)

        return {
            "success": True,
            "saved_pairs": len(pairs),
            "range": data_range,
            "updated_cells": updated,
            "saved_at": utc_now_iso(),
        }

# run_pairing.py

from __future__ import annotations

import argparse
import random

import pandas as pd

from manito_matching.config import DEFAULT_SEED, MAX_SHUFFLE_ATTEMPTS, SHEET_NAME_DEFAULT
from manito_matching.errors import PairingError
from manito_matching.pairing.diagnostics import analyze_pairing_feasibility
from manito_matching.sheet.grid_store import GridSheetStore, find_receiver, roster_statistics, search_roster
from manito_matching.sheet.workflow import run_pairing_round


def parse_args():
    parser = argparse.ArgumentParser(description="Draw a manito round from a sheet CSV.")
    parser.add_argument("sheet", help="Path to the sheet CSV (A1-style layout).")
    parser.add_argument("--sheet-name", default=SHEET_NAME_DEFAULT)
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED)
    parser.add_argument("--max-attempts", type=int, default=MAX_SHUFFLE_ATTEMPTS)
    parser.add_argument("--exact-fallback", action="store_true",
                        help="Solve with the MILP when random shuffles give up.")
    parser.add_argument("--expected-marker", default=None,
                        help="Only save if the round marker cell still holds this value.")
    parser.add_argument("--dry-run", action="store_true", help="Do not write pairs back.")
    parser.add_argument("--lookup", metavar="NAME", default=None,
                        help="Print the saved receiver of giver NAME and exit.")
    parser.add_argument("--search", metavar="TERM", default=None,
                        help="Search roster names (and forbidden pairs) for TERM and exit.")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args()


def main():
    args = parse_args()

    store = GridSheetStore(args.sheet, sheet_name=args.sheet_name, verbose=args.verbose or None)

    if args.lookup is not None:
        receiver = find_receiver(store.fetch_pairs(), args.lookup)
        if receiver is None:
            print(f"No saved pair has giver {args.lookup.strip()!r}.")
        else:
            print(f"{args.lookup.strip()} -> {receiver}")
        return

    roster = store.fetch_roster()

    if args.search is not None:
        found = search_roster(roster, args.search, types=("ordinary", "newcomers", "leads", "forbidden_pairs"))
        print(f"{found['total_found']} match(es) for {args.search!r}")
        for hit in found["results"]:
            print(f"- {hit['type']:<16}#{hit['index'] + 1}: {hit['item']}")
        return

    stats = roster_statistics(roster)
    print("\n========== ROSTER SUMMARY ==========")
    for key, count in stats["breakdown"].items():
        print(f"- {key:<16}: {count}")

    # Final structural check BEFORE drawing
    diags = analyze_pairing_feasibility(
        roster.ordinary, roster.newcomers, roster.leads, roster.forbidden_pairs
    )
    if diags["messages"] or diags["warnings"]:
        print("\n=== DIAGNOSTICS ===")
        for msg in diags["messages"]:
            print("-", msg)
        for msg in diags["warnings"]:
            print("- (warning)", msg)
    print("\nSuggestion:", diags["suggestion"])

    if not diags["ok"]:
        print("\nResult: roster is structurally unpairable; nothing drawn.")
        return

    rng = random.Random(args.seed)
    try:
        result = run_pairing_round(
            store,
            rng=rng,
            save=not args.dry_run,
            expected_marker=args.expected_marker,
            max_attempts=args.max_attempts,
            exact_fallback=args.exact_fallback,
            verbose=args.verbose or None,
        )
    except PairingError as e:
        print(f"\n[FAIL] {e}")
        return

    if result.metadata.error:
        print("\nResult:", result.metadata.error)
        return

    df = pd.DataFrame(result.as_tuples(), columns=["giver", "receiver"])
    df.index = df.index + 1
    print("\n=== PAIRS ===")
    print(df)
    print("\nSaved." if not args.dry_run else "\nDry run: nothing written.")


if __name__ == "__main__":
    main()

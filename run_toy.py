# run_toy.py

import random

import pandas as pd

from manito_matching.config import TOY_SEED
from manito_matching.models import Category
from manito_matching.roster.toy_roster import make_toy_roster
from manito_matching.pairing.diagnostics import analyze_pairing_feasibility
from manito_matching.pairing.engine import make_pairs


def main():
    # ---- Round settings ----
    num_ordinary = 8
    num_newcomers = 2
    num_leads = 3
    num_forbidden = 3

    roster = make_toy_roster(
        num_ordinary=num_ordinary,
        num_newcomers=num_newcomers,
        num_leads=num_leads,
        num_forbidden=num_forbidden,
        seed=TOY_SEED,
    )

    print("=== TOY ROSTER ===")
    print(f"Ordinary : {', '.join(roster.ordinary)}")
    print(f"Newcomers: {', '.join(roster.newcomers)}")
    print(f"Leads    : {', '.join(roster.leads)}")
    print("Forbidden:", ", ".join(f"{a}-{b}" for a, b in roster.forbidden_pairs) or "-")
    print()

    diag = analyze_pairing_feasibility(
        roster.ordinary, roster.newcomers, roster.leads, roster.forbidden_pairs
    )
    print("=== STRUCTURAL CHECK ===")
    print(f"Group A size: {diag['group_a_size']}, group B size: {diag['group_b_size']}")
    for msg in diag["messages"] + diag["warnings"]:
        print("-", msg)
    print("Suggestion:", diag["suggestion"])
    print()

    if not diag["ok"]:
        print("Roster is structurally unpairable; not running the matcher.")
        return

    result = make_pairs(
        roster.ordinary,
        roster.newcomers,
        roster.leads,
        roster.forbidden_pairs,
        rng=random.Random(TOY_SEED),
    )

    # ============================
    #  PRINT PAIRS (PANDAS)
    # ============================
    df = pd.DataFrame(
        [
            (a.id, a.giver, a.giver_category.value, a.receiver, a.receiver_category.value)
            for a in result.assignments
        ],
        columns=["id", "giver", "giver_category", "receiver", "receiver_category"],
    )
    print("=== MANITO PAIRS ===")
    print(df.to_string(index=False))
    print()

    # ---- Verification ----
    print("=== VERIFICATION ===")
    givers = df["giver"].tolist()
    receivers = df["receiver"].tolist()
    everyone = roster.ordinary + roster.newcomers + roster.leads
    edges = set(zip(givers, receivers))
    forbidden = {(a, b) for a, b in roster.forbidden_pairs} | {(b, a) for a, b in roster.forbidden_pairs}

    checks = {
        "everyone gives once": sorted(givers) == sorted(everyone),
        "everyone receives once": sorted(receivers) == sorted(everyone),
        "no forbidden edge": not (edges & forbidden),
        "no reciprocal edge": all((r, g) not in edges for g, r in edges),
        "newcomers only with leads": all(
            not (gc == Category.NEWCOMER.value and rc != Category.LEAD.value)
            and not (rc == Category.NEWCOMER.value and gc != Category.LEAD.value)
            for gc, rc in zip(df["giver_category"], df["receiver_category"])
        ),
    }
    for name, passed in checks.items():
        print(f"{name}: {'PASS' if passed else 'FAIL'}")

    print()
    print("Generated at:", result.metadata.generated_at)


if __name__ == "__main__":
    main()

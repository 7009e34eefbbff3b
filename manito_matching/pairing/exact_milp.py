# file: manito_matching/pairing/exact_milp.py

from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

import pulp

from ..verbosity import vprint
from ..errors import GroupUnsolvableError
from ..models import Participant
from ..roster.forbidden import ForbiddenPairs
from .rules import is_valid_pair
from .shuffle import RandomSource


def build_cycle_model(
    group: Sequence[Participant],
    forbidden: ForbiddenPairs,
    rng: RandomSource,
) -> Tuple[pulp.LpProblem, Dict[Tuple[int, int], pulp.LpVariable]]:
    """
    MILP for one giver->receiver cycle through every member of `group`.

    Variables:
        x[i, j] = 1 if member i gives to member j
                  (only created for edges that pass is_valid_pair)
        u[i]    = position of member i in the cycle (i >= 1; member 0 starts it)

    Rules encoded:

      1) Everybody gives exactly once:
           ∀i: sum_j x[i,j] = 1

      2) Everybody receives exactly once:
           ∀j: sum_i x[i,j] = 1

      3) One single cycle (Miller-Tucker-Zemlin):
           ∀i,j ≥ 1, i≠j: u[i] - u[j] + (n-1) x[i,j] ≤ n-2

      4) No reciprocal pair:
           ∀i<j: x[i,j] + x[j,i] ≤ 1

    Objective: minimize random edge weights drawn from `rng`, so repeated
    calls return different cycles.
    """
    n = len(group)

    prob = pulp.LpProblem("Manito_Single_Cycle", pulp.LpMinimize)

    # ---------- Decision variables ----------
    x: Dict[Tuple[int, int], pulp.LpVariable] = {}
    for i, giver in enumerate(group):
        for j, receiver in enumerate(group):
            if i != j and is_valid_pair(giver, receiver, forbidden):
                x[(i, j)] = pulp.LpVariable(f"x_{i}_{j}", lowBound=0, upBound=1, cat="Binary")

    u: Dict[int, pulp.LpVariable] = {
        i: pulp.LpVariable(f"u_{i}", lowBound=1, upBound=max(n - 1, 1), cat="Continuous")
        for i in range(1, n)
    }

    # ---------- Objective ----------
    prob += pulp.lpSum(rng.random() * var for var in x.values()), "Random_Edge_Weights"

    # ---------- Constraints ----------

    # (1) + (2) one outgoing and one incoming edge per member
    for i in range(n):
        prob += (
            pulp.lpSum(var for (a, _), var in x.items() if a == i) == 1,
            f"Gives_once_{i}",
        )
        prob += (
            pulp.lpSum(var for (_, b), var in x.items() if b == i) == 1,
            f"Receives_once_{i}",
        )

    # (3) subtour elimination
    for (i, j), var in x.items():
        if i >= 1 and j >= 1:
            prob += (
                u[i] - u[j] + (n - 1) * var <= n - 2,
                f"MTZ_{i}_{j}",
            )

    # (4) no reciprocal pair
    for (i, j), var in x.items():
        if i < j and (j, i) in x:
            prob += (
                var + x[(j, i)] <= 1,
                f"No_reciprocal_{i}_{j}",
            )

    return prob, x


def _isolated_members(
    group: Sequence[Participant],
    forbidden: ForbiddenPairs,
) -> List[str]:
    """Members with no eligible receiver or no eligible giver at all."""
    out: List[str] = []
    for p in group:
        gives = any(is_valid_pair(p, q, forbidden) for q in group if q is not p)
        gets = any(is_valid_pair(q, p, forbidden) for q in group if q is not p)
        if not (gives and gets):
            out.append(p.name)
    return out


def solve_exact_cycle(
    group: Sequence[Participant],
    forbidden: ForbiddenPairs,
    rng: RandomSource,
    verbose=None,
) -> List[Participant]:
    """
    Solve the single-cycle model and return the members in cycle order,
    starting from group[0].

    Raises GroupUnsolvableError when the model has no solution.
    """
    n = len(group)

    isolated = _isolated_members(group, forbidden)
    if isolated:
        raise GroupUnsolvableError(
            n, 0, detail=f"Members without any eligible partner: {', '.join(isolated)}."
        )

    prob, x = build_cycle_model(group, forbidden, rng)

    solver = pulp.PULP_CBC_CMD(msg=False)
    prob.solve(solver)

    status = pulp.LpStatus[prob.status]
    vprint(f"[PAIRING] Exact fallback solver status: {status}", verbose=verbose)

    if status != "Optimal":
        raise GroupUnsolvableError(n, 0, detail=f"Exact solver status: {status}.")

    successor: Dict[int, int] = {}
    for (i, j), var in x.items():
        val = var.varValue
        if val is not None and val > 0.5:
            successor[i] = j

    order = [0]
    while len(order) < n:
        order.append(successor[order[-1]])

    return [group[i] for i in order]

# tests/test_matcher.py
import unittest
import random
import sys
import os

# Add parent directory to path to import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from manito_matching.errors import GroupUnsolvableError, InsufficientPopulationError
from manito_matching.models import Category, Participant
from manito_matching.roster.forbidden import ForbiddenPairs
from manito_matching.pairing.shuffle import fisher_yates
from manito_matching.pairing.partition import partition_population
from manito_matching.pairing.matcher import shuffle_and_pair
from manito_matching.pairing.exact_milp import solve_exact_cycle
from manito_matching.roster.registry import build_participants

O = Category.ORDINARY
N = Category.NEWCOMER
L = Category.LEAD


class ScriptedRandom:
    """Replays a fixed list of floats, cycling when it runs out."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = 0

    def random(self):
        v = self.values[self.calls % len(self.values)]
        self.calls += 1
        return v


def ordinary(*names):
    return [Participant(n, O) for n in names]


def fixed_clock():
    return "2026-01-01T00:00:00+00:00"


class TestFisherYates(unittest.TestCase):

    def test_high_draws_keep_order(self):
        self.assertEqual(fisher_yates(["a", "b", "c"], ScriptedRandom([0.999])), ["a", "b", "c"])

    def test_zero_draws_rotate(self):
        # i=2 swaps with 0 -> c,b,a ; i=1 swaps with 0 -> b,c,a
        self.assertEqual(fisher_yates(["a", "b", "c"], ScriptedRandom([0.0])), ["b", "c", "a"])

    def test_input_untouched(self):
        items = ["a", "b", "c"]
        fisher_yates(items, random.Random(1))
        self.assertEqual(items, ["a", "b", "c"])


class TestPartition(unittest.TestCase):

    def names(self, group):
        return [p.name for p in group]

    def test_no_newcomers(self):
        people = build_participants(["A", "B"], [], ["L1", "L2"])
        a, b = partition_population(people, random.Random(0))
        self.assertEqual(a, [])
        self.assertEqual(self.names(b), ["A", "B", "L1", "L2"])

    def test_leads_absorbed_when_not_outnumbering_newcomers(self):
        people = build_participants(["A", "B", "C"], ["N1", "N2"], ["L1", "L2"])
        a, b = partition_population(people, random.Random(0))
        self.assertEqual(self.names(a), ["N1", "N2", "L1", "L2"])
        self.assertEqual(self.names(b), ["A", "B", "C"])

    def test_excess_leads_go_to_ordinary_group(self):
        people = build_participants(["A", "B"], ["N1", "N2"], ["L1", "L2", "L3", "L4", "L5"])
        a, b = partition_population(people, random.Random(3))

        a_leads = [p.name for p in a if p.category == L]
        b_leads = [p.name for p in b if p.category == L]

        self.assertEqual([p.name for p in a if p.category == N], ["N1", "N2"])
        self.assertEqual(len(a_leads), 2)
        self.assertEqual(len(b_leads), 3)
        self.assertEqual(sorted(a_leads + b_leads), ["L1", "L2", "L3", "L4", "L5"])
        self.assertEqual([p.name for p in b if p.category == O], ["A", "B"])

    def test_lead_selection_follows_random_source(self):
        people = build_participants([], ["N1"], ["L1", "L2", "L3"])
        # identity shuffle -> first lead joins group A
        a, b = partition_population(people, ScriptedRandom([0.999]))
        self.assertEqual(self.names(a), ["N1", "L1"])
        self.assertEqual(self.names(b), ["L2", "L3"])


class TestShuffleAndPair(unittest.TestCase):

    def assert_single_cycle(self, group, assignments):
        names = sorted(p.name for p in group)
        self.assertEqual(sorted(a.giver for a in assignments), names)
        self.assertEqual(sorted(a.receiver for a in assignments), names)

        succ = {a.giver: a.receiver for a in assignments}
        start = assignments[0].giver
        seen = [start]
        while succ[seen[-1]] != start:
            seen.append(succ[seen[-1]])
        self.assertEqual(len(seen), len(group))

    def test_empty_group_is_skipped(self):
        self.assertEqual(shuffle_and_pair([], ForbiddenPairs(), random.Random(0)), [])

    def test_single_member_group_is_fatal(self):
        with self.assertRaises(InsufficientPopulationError):
            shuffle_and_pair(ordinary("A"), ForbiddenPairs(), random.Random(0))

    def test_identity_shuffle_gives_circular_assignment(self):
        out = shuffle_and_pair(ordinary("A", "B", "C"), ForbiddenPairs(), ScriptedRandom([0.999]), clock=fixed_clock)
        self.assertEqual([(a.id, a.giver, a.receiver) for a in out],
                         [(1, "A", "B"), (2, "B", "C"), (3, "C", "A")])
        self.assertTrue(all(a.created_at == fixed_clock() for a in out))

    def test_retries_until_constraints_hold(self):
        group = ordinary("A", "B", "C", "D")
        forbidden = ForbiddenPairs([("A", "B")])
        # attempt 1: identity (A->B, rejected); attempt 2: A,C,B,D
        rng = ScriptedRandom([0.999, 0.999, 0.999, 0.999, 0.5, 0.999])
        out = shuffle_and_pair(group, forbidden, rng)

        self.assertEqual(rng.calls, 6)
        self.assertEqual([(a.giver, a.receiver) for a in out],
                         [("A", "C"), ("C", "B"), ("B", "D"), ("D", "A")])

    def test_random_groups_form_single_cycle(self):
        group = ordinary("A", "B", "C", "D", "E", "F", "G")
        for seed in range(10):
            out = shuffle_and_pair(group, ForbiddenPairs(), random.Random(seed))
            self.assert_single_cycle(group, out)

    def test_attempt_budget_exhaustion(self):
        group = [Participant(n, N) for n in ("N1", "N2", "N3")]
        with self.assertRaises(GroupUnsolvableError) as ctx:
            shuffle_and_pair(group, ForbiddenPairs(), random.Random(0), max_attempts=5)
        self.assertEqual(ctx.exception.group_size, 3)
        self.assertEqual(ctx.exception.attempts, 5)
        self.assertIn("3 participants", str(ctx.exception))

    def test_forced_exhaustion_with_scripted_source(self):
        group = ordinary("A", "B", "C", "D")
        rng = ScriptedRandom([0.999])  # identity every time -> A->B every time
        with self.assertRaises(GroupUnsolvableError):
            shuffle_and_pair(group, ForbiddenPairs([("A", "B")]), rng, max_attempts=4)
        self.assertEqual(rng.calls, 4 * 3)

    def test_invalid_attempt_budget(self):
        with self.assertRaises(ValueError):
            shuffle_and_pair(ordinary("A", "B", "C"), ForbiddenPairs(), random.Random(0), max_attempts=0)


class TestExactFallback(unittest.TestCase):

    def test_fallback_solves_when_shuffles_give_up(self):
        group = ordinary("A", "B", "C", "D")
        forbidden = ForbiddenPairs([("A", "B")])
        out = shuffle_and_pair(
            group, forbidden, ScriptedRandom([0.999]), max_attempts=2, exact_fallback=True
        )
        edges = {(a.giver, a.receiver) for a in out}
        self.assertEqual(len(out), 4)
        self.assertNotIn(("A", "B"), edges)
        self.assertNotIn(("B", "A"), edges)
        for g, r in edges:
            self.assertNotIn((r, g), edges)

    def test_exact_cycle_respects_categories(self):
        group = [Participant("N1", N), Participant("N2", N), Participant("L1", L), Participant("L2", L)]
        cycle = solve_exact_cycle(group, ForbiddenPairs(), random.Random(7))
        self.assertEqual(cycle[0].name, "N1")
        self.assertEqual(sorted(p.name for p in cycle), ["L1", "L2", "N1", "N2"])
        for i, p in enumerate(cycle):
            nxt = cycle[(i + 1) % len(cycle)]
            self.assertFalse(p.category == N and nxt.category == N)

    def test_exact_solver_rejects_two_member_group(self):
        with self.assertRaises(GroupUnsolvableError):
            solve_exact_cycle(ordinary("A", "B"), ForbiddenPairs(), random.Random(0))

    def test_exact_solver_reports_isolated_members(self):
        group = [Participant(n, N) for n in ("N1", "N2", "N3")]
        with self.assertRaises(GroupUnsolvableError) as ctx:
            shuffle_and_pair(group, ForbiddenPairs(), random.Random(0), max_attempts=2, exact_fallback=True)
        self.assertIn("N1", str(ctx.exception))


if __name__ == '__main__':
    unittest.main()

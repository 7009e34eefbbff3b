# manito_matching/pairing/rules.py
from __future__ import annotations

from ..models import Category, Participant
from ..roster.forbidden import ForbiddenPairs


def is_valid_pair(
    giver: Participant,
    receiver: Participant,
    forbidden: ForbiddenPairs,
) -> bool:
    """
    Eligibility of the directed edge giver -> receiver.

      1) nobody gives to themselves
      2) forbidden pairs are blocked either way
      3) newcomer <-> ordinary is never allowed
      4) newcomer <-> newcomer is never allowed
      5) anything else passes (lead <-> lead included)
    """
    if giver.name == receiver.name:
        return False

    if forbidden.blocks(giver.name, receiver.name):
        return False

    kinds = {giver.category, receiver.category}

    if kinds == {Category.NEWCOMER, Category.ORDINARY}:
        return False

    if giver.category == Category.NEWCOMER and receiver.category == Category.NEWCOMER:
        return False

    return True

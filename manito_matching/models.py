# manito_matching/models.py
from __future__ import annotations
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Tuple, Dict, Any


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class Category(str, Enum):
    ORDINARY = "ordinary"
    NEWCOMER = "newcomer"
    LEAD = "lead"


@dataclass(frozen=True)
class Participant:
    name: str
    category: Category


@dataclass
class Assignment:
    id: int
    giver: str
    giver_category: Category
    receiver: str
    receiver_category: Category
    created_at: str


@dataclass
class PairingMetadata:
    total_participants: int = 0
    used_participants: int = 0
    excluded_participants: int = 0
    excluded: List[Dict[str, str]] = field(default_factory=list)
    forbidden_pair_count: int = 0
    generated_at: Optional[str] = None
    rules_applied: List[str] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class PairingResult:
    assignments: List[Assignment]
    metadata: PairingMetadata

    def as_tuples(self) -> List[Tuple[str, str]]:
        """(giver, receiver) rows in id order, ready to be written out."""
        return [(a.giver, a.receiver) for a in sorted(self.assignments, key=lambda a: a.id)]

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        for row in d["assignments"]:
            row["giver_category"] = row["giver_category"].value
            row["receiver_category"] = row["receiver_category"].value
        return d


@dataclass
class Roster:
    """Raw category lists and deny-list as read from the sheet."""
    ordinary: List[str] = field(default_factory=list)
    newcomers: List[str] = field(default_factory=list)
    leads: List[str] = field(default_factory=list)
    forbidden_pairs: List[Tuple[str, str]] = field(default_factory=list)
    fetched_at: Optional[str] = None

    @property
    def total(self) -> int:
        return len(self.ordinary) + len(self.newcomers) + len(self.leads)

"""POSTCREDIT — Attribution Confidence Tiers.

Tiers form a strict total order: HIGH > MEDIUM > LOW > UNATTRIBUTED.
The order is used both for merging contributions (max wins) and for
comparing tiers anywhere else in the engine.
"""

from enum import Enum
from typing import Iterable


class Confidence(str, Enum):
    """How certain an attribution is."""

    HIGH = "HIGH"  # Direct post reference
    MEDIUM = "MEDIUM"  # URL match, substring fallback, or soft window match
    LOW = "LOW"  # Never produced by the resolver; kept for stored legacy rows
    UNATTRIBUTED = "UNATTRIBUTED"  # No post

    @property
    def rank(self) -> int:
        return CONFIDENCE_RANK[self]

    def __lt__(self, other):
        if not isinstance(other, Confidence):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, Confidence):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, Confidence):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, Confidence):
            return NotImplemented
        return self.rank >= other.rank


CONFIDENCE_RANK = {
    Confidence.HIGH: 4,
    Confidence.MEDIUM: 3,
    Confidence.LOW: 2,
    Confidence.UNATTRIBUTED: 1,
}


def merge_confidence(values: Iterable[Confidence]) -> Confidence:
    """Merged tier of a contribution set: the maximum, UNATTRIBUTED if empty."""
    return max(values, default=Confidence.UNATTRIBUTED)

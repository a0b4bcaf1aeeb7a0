"""
Keyed count/cost accumulation.

Shared by the day reducer (events into tiers/models) and the window
aggregator (days into the window).
"""

from dataclasses import dataclass
from typing import Dict, Iterator, Mapping, Tuple


@dataclass(frozen=True)
class KeyTotals:
    """Request count and cost accumulated under one tier or model key."""
    count: int = 0
    cost: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"count": self.count, "cost": self.cost}


ZERO_TOTALS = KeyTotals()


class Breakdown:
    """Mapping of key -> KeyTotals where every key starts at zero.

    ``add`` reads the current totals (zero for an unseen key) and stores the
    updated value, so callers never branch on first sight of a key.
    """

    def __init__(self):
        self._totals: Dict[str, KeyTotals] = {}

    def get(self, key: str) -> KeyTotals:
        return self._totals.get(key, ZERO_TOTALS)

    def add(self, key: str, count: int, cost: float) -> None:
        current = self.get(key)
        self._totals[key] = KeyTotals(
            count=current.count + count,
            cost=current.cost + cost
        )

    def merge(self, totals: Mapping[str, KeyTotals]) -> None:
        """Add every entry of another breakdown into this one."""
        for key, value in totals.items():
            self.add(key, value.count, value.cost)

    def items(self) -> Iterator[Tuple[str, KeyTotals]]:
        return iter(self._totals.items())

    def __len__(self) -> int:
        return len(self._totals)

    def __contains__(self, key: object) -> bool:
        return key in self._totals

    def snapshot(self) -> Dict[str, KeyTotals]:
        """Return a plain dict copy of the current totals."""
        return dict(self._totals)

"""
Per-day reduction of usage events.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping

from .breakdown import Breakdown, KeyTotals
from usage_rollup.storage.models import UsageEvent


@dataclass(frozen=True)
class DailyStats:
    """Summary of one calendar day of routed requests."""
    date: str
    total_requests: int = 0
    total_cost: float = 0.0
    total_baseline_cost: float = 0.0
    avg_latency_ms: float = 0.0
    by_tier: Mapping[str, KeyTotals] = field(default_factory=dict)
    by_model: Mapping[str, KeyTotals] = field(default_factory=dict)

    def __post_init__(self):
        # Read-only views so a frozen summary stays frozen all the way down
        object.__setattr__(self, "by_tier", MappingProxyType(dict(self.by_tier)))
        object.__setattr__(self, "by_model", MappingProxyType(dict(self.by_model)))

    @property
    def total_savings(self) -> float:
        """Baseline cost minus actual cost; negative when routing cost more."""
        return self.total_baseline_cost - self.total_cost

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "totalRequests": self.total_requests,
            "totalCost": self.total_cost,
            "totalBaselineCost": self.total_baseline_cost,
            "totalSavings": self.total_savings,
            "avgLatencyMs": self.avg_latency_ms,
            "byTier": {k: v.to_dict() for k, v in self.by_tier.items()},
            "byModel": {k: v.to_dict() for k, v in self.by_model.items()},
        }


def reduce_day(date: str, events: Iterable[UsageEvent]) -> DailyStats:
    """Fold one day's events into a DailyStats.

    No event depends on its neighbours, so the result does not depend on
    event order (up to floating-point rounding).

    Args:
        date: Day label (YYYY-MM-DD)
        events: The day's usage events, possibly empty

    Returns:
        DailyStats for the day; all zeros when there are no events
    """
    by_tier = Breakdown()
    by_model = Breakdown()
    count = 0
    total_cost = 0.0
    total_baseline_cost = 0.0
    total_latency = 0

    for event in events:
        by_tier.add(event.tier, 1, event.cost)
        by_model.add(event.model, 1, event.cost)
        count += 1
        total_cost += event.cost
        total_baseline_cost += event.baseline_cost
        total_latency += event.latency_ms

    return DailyStats(
        date=date,
        total_requests=count,
        total_cost=total_cost,
        total_baseline_cost=total_baseline_cost,
        avg_latency_ms=total_latency / count if count > 0 else 0.0,
        by_tier=by_tier.snapshot(),
        by_model=by_model.snapshot()
    )

"""
Windowed aggregation over daily usage logs.

Selects the N most recent log units, reduces each day independently and
folds the results into one summary with derived metrics.

Selection counts file slots, not days with traffic: an empty, missing or
malformed unit still uses one of the N slots but is left out of the daily
breakdown.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .breakdown import Breakdown
from .daily import DailyStats, reduce_day
from .parser import DayLoad, load_day
from usage_rollup.config.loader import StatsConfig, load_stats_config
from usage_rollup.storage.log_store import LogStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeyShare:
    """Totals for one tier or model plus its share of window requests."""
    count: int
    cost: float
    percentage: float

    def to_dict(self) -> Dict[str, float]:
        return {"count": self.count, "cost": self.cost, "percentage": self.percentage}


@dataclass(frozen=True)
class AggregatedStats:
    """Summary over a window of days.

    This is the only input presentation code receives. Renderers format
    these fields and never recompute them.
    """
    period: str
    total_requests: int = 0
    total_cost: float = 0.0
    total_baseline_cost: float = 0.0
    savings_percentage: float = 0.0
    avg_latency_ms: float = 0.0
    avg_cost_per_request: float = 0.0
    by_tier: Mapping[str, KeyShare] = field(default_factory=dict)
    by_model: Mapping[str, KeyShare] = field(default_factory=dict)
    daily_breakdown: Tuple[DailyStats, ...] = ()  # Oldest first

    def __post_init__(self):
        object.__setattr__(self, "by_tier", MappingProxyType(dict(self.by_tier)))
        object.__setattr__(self, "by_model", MappingProxyType(dict(self.by_model)))
        object.__setattr__(self, "daily_breakdown", tuple(self.daily_breakdown))

    @property
    def total_savings(self) -> float:
        return self.total_baseline_cost - self.total_cost

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the dashboard's camelCase field names."""
        return {
            "period": self.period,
            "totalRequests": self.total_requests,
            "totalCost": self.total_cost,
            "totalBaselineCost": self.total_baseline_cost,
            "totalSavings": self.total_savings,
            "savingsPercentage": self.savings_percentage,
            "avgLatencyMs": self.avg_latency_ms,
            "avgCostPerRequest": self.avg_cost_per_request,
            "byTier": {k: v.to_dict() for k, v in self.by_tier.items()},
            "byModel": {k: v.to_dict() for k, v in self.by_model.items()},
            "dailyBreakdown": [day.to_dict() for day in self.daily_breakdown],
        }


def period_label(days: int) -> str:
    return "today" if days == 1 else f"last {days} days"


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


def _with_percentages(totals: Breakdown, total_requests: int) -> Dict[str, KeyShare]:
    return {
        key: KeyShare(
            count=value.count,
            cost=value.cost,
            percentage=_ratio(value.count, total_requests) * 100
        )
        for key, value in totals.items()
    }


def _validate_days(days: int) -> None:
    if isinstance(days, bool) or not isinstance(days, int):
        raise TypeError(f"days must be an integer, got {type(days).__name__}")
    if days < 0:
        raise ValueError("days must be >= 0")


def select_days(store: LogStore, days: int) -> List[str]:
    """Return the labels of the N most recent log units, newest first.

    Raises:
        ValueError: If days is negative
    """
    _validate_days(days)
    return store.list_days()[:days]


def merge_days(daily_stats: Iterable[DailyStats], days: int) -> AggregatedStats:
    """Fold per-day summaries into a window summary.

    Days are folded in date order whatever order they arrive in, so
    concurrent and sequential callers get identical results. Days without
    requests do not appear in the breakdown.

    Args:
        daily_stats: One DailyStats per selected slot, in any order
        days: Requested window size, used for the period label

    Returns:
        AggregatedStats with derived metrics computed once after the merge
    """
    included = sorted(
        (day for day in daily_stats if day.total_requests > 0),
        key=lambda day: day.date
    )

    by_tier = Breakdown()
    by_model = Breakdown()
    total_requests = 0
    total_cost = 0.0
    total_baseline_cost = 0.0
    total_latency = 0.0

    for day in included:
        total_requests += day.total_requests
        total_cost += day.total_cost
        total_baseline_cost += day.total_baseline_cost
        # Request-weighted, so busy days count for more than quiet ones
        total_latency += day.avg_latency_ms * day.total_requests
        by_tier.merge(day.by_tier)
        by_model.merge(day.by_model)

    total_savings = total_baseline_cost - total_cost

    return AggregatedStats(
        period=period_label(days),
        total_requests=total_requests,
        total_cost=total_cost,
        total_baseline_cost=total_baseline_cost,
        savings_percentage=_ratio(total_savings, total_baseline_cost) * 100,
        avg_latency_ms=_ratio(total_latency, total_requests),
        avg_cost_per_request=_ratio(total_cost, total_requests),
        by_tier=_with_percentages(by_tier, total_requests),
        by_model=_with_percentages(by_model, total_requests),
        daily_breakdown=tuple(included)
    )


def _load_and_reduce(store: LogStore, day: str) -> DailyStats:
    loaded = load_day(store, day)
    return reduce_day(day, loaded.events)


def get_window_stats(
    days: int,
    store: Optional[LogStore] = None,
    config: Optional[StatsConfig] = None,
    max_workers: Optional[int] = None
) -> AggregatedStats:
    """Compute usage statistics for the N most recent days of logs.

    Each selected day is read and reduced on a worker thread; results are
    folded once all are in. Missing, unreadable and malformed days count as
    days without traffic, so this never fails because of bad data.

    Args:
        days: Number of most recent log units to include
        store: Log store to read from (built from config when omitted)
        config: Settings used when store or max_workers are omitted
        max_workers: Thread pool size (1 runs the days one after another)

    Returns:
        AggregatedStats for the window

    Raises:
        ValueError: If days is negative
    """
    _validate_days(days)
    if config is None:
        config = load_stats_config()
    if store is None:
        store = LogStore(config.log_path)
    if max_workers is None:
        max_workers = config.max_workers

    selected = select_days(store, days)
    logger.debug("Aggregating %d day(s) from %s", len(selected), store.log_dir)

    daily_stats = []
    if selected:
        with ThreadPoolExecutor(max_workers=min(max_workers, len(selected))) as executor:
            futures = [executor.submit(_load_and_reduce, store, day) for day in selected]
            for future in as_completed(futures):
                daily_stats.append(future.result())

    return merge_days(daily_stats, days)


def inspect_window(days: int, store: LogStore) -> List[DayLoad]:
    """Load every selected day and report how each load went, newest first."""
    return [load_day(store, day) for day in select_days(store, days)]

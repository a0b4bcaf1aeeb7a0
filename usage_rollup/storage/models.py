"""
Data models for storage layer.

Defines the usage event record written by the router, one per routed request.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class Tier(Enum):
    """Routing-complexity buckets assigned to a request."""
    SIMPLE = "SIMPLE"
    MEDIUM = "MEDIUM"
    COMPLEX = "COMPLEX"
    REASONING = "REASONING"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class UsageEvent:
    """Immutable record of one routed request.

    Events are built once at parse time and never modified. Records written
    before cost comparison was tracked carry no baseline cost; the parser
    fills it in with the actual cost.
    """
    timestamp: str
    model: str = "unknown"
    tier: str = Tier.UNKNOWN.value
    cost: float = 0.0
    baseline_cost: float = 0.0
    savings: float = 0.0
    latency_ms: int = 0

    def to_record(self) -> Dict[str, Any]:
        """Serialize using the on-disk (camelCase) field names."""
        return {
            "timestamp": self.timestamp,
            "model": self.model,
            "tier": self.tier,
            "cost": self.cost,
            "baselineCost": self.baseline_cost,
            "savings": self.savings,
            "latencyMs": self.latency_ms,
        }

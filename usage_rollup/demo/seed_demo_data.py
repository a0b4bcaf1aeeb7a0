# usage_rollup/demo/seed_demo_data.py

import sys
from datetime import date, timedelta
from pathlib import Path
from typing import Optional, Union

from usage_rollup.storage.log_store import LogStore
from usage_rollup.storage.models import UsageEvent

# (tier, model, cost, baseline cost, latency ms)
DEMO_REQUESTS = [
    ("SIMPLE", "google/gemini-2.5-flash", 0.0012, 0.0450, 420),
    ("SIMPLE", "deepseek/deepseek-chat", 0.0008, 0.0380, 610),
    ("MEDIUM", "moonshot/kimi-k2", 0.0065, 0.0720, 980),
    ("COMPLEX", "anthropic/claude-sonnet-4", 0.0410, 0.1150, 2150),
    ("REASONING", "openai/o3", 0.0530, 0.1400, 5300),
]


def seed_demo_logs(
    log_dir: Union[str, Path],
    days: int = 3,
    today: Optional[date] = None
) -> int:
    """Write demo log units for the last `days` days and return the event count."""
    store = LogStore(log_dir)
    today = today or date.today()
    written = 0
    for offset in range(days):
        day = (today - timedelta(days=offset)).isoformat()
        # Older days get fewer requests so the breakdown shows a trend
        for hour, (tier, model, cost, baseline, latency) in enumerate(DEMO_REQUESTS[:days - offset + 2]):
            store.append(
                UsageEvent(
                    timestamp=f"{day}T{hour + 9:02d}:00:00Z",
                    model=model,
                    tier=tier,
                    cost=cost,
                    baseline_cost=baseline,
                    savings=baseline - cost,
                    latency_ms=latency
                ),
                day
            )
            written += 1
    return written


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else "demo-logs"
    count = seed_demo_logs(target)
    print(f"Demo usage data written to {target} ({count} events)")

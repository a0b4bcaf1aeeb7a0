"""
Usage log record parsing.

Turns the raw content of one day's log unit into normalized usage events.
Records from every schema generation are accepted: missing fields get
defaults, and records predating cost comparison get a baseline equal to
their actual cost.

Parsing is fail-fast per log unit. One malformed record discards the whole
day, and that day contributes zero events to any aggregate.
"""

import json
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from usage_rollup.storage.log_store import LogStore
from usage_rollup.storage.models import Tier, UsageEvent

logger = logging.getLogger(__name__)


class MalformedRecordError(ValueError):
    """Raised when a log record cannot be interpreted under the known schema."""
    def __init__(self, message: str, line_number: Optional[int] = None):
        super().__init__(message)
        self.line_number = line_number


class LoadStatus(Enum):
    """Outcome of loading one day's log unit."""
    OK = "ok"
    EMPTY = "empty"              # Unit exists but holds no records
    ABSENT = "absent"            # No unit for the day
    UNREADABLE = "unreadable"    # Unit exists but could not be read
    MALFORMED = "malformed"      # At least one record failed to parse


@dataclass(frozen=True)
class DayLoad:
    """Events loaded for one day, plus how the load went.

    Every status other than OK carries zero events. Aggregation treats all
    of them the same; the status and detail exist for diagnostics.
    """
    day: str
    status: LoadStatus
    events: Tuple[UsageEvent, ...] = ()
    detail: str = ""


def _string_field(record: Dict[str, Any], key: str, default: str) -> str:
    value = record.get(key)
    if value is None or value == "":
        return default
    if not isinstance(value, str):
        raise MalformedRecordError(f"'{key}' must be a string, got {type(value).__name__}")
    return value


def _number_field(
    record: Dict[str, Any],
    key: str,
    allow_negative: bool = False
) -> Optional[float]:
    value = record.get(key)
    if value is None:
        return None
    # bool is an int subclass; true/false is never a valid amount
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedRecordError(f"'{key}' must be a number, got {type(value).__name__}")
    if not math.isfinite(value):
        raise MalformedRecordError(f"'{key}' must be finite")
    if not allow_negative and value < 0:
        raise MalformedRecordError(f"'{key}' cannot be negative")
    return value


def parse_usage_record(line: str, now: Optional[str] = None) -> UsageEvent:
    """Parse one JSON line into a UsageEvent.

    Args:
        line: A single JSONL record
        now: Timestamp used when the record has none (defaults to current UTC time)

    Returns:
        Normalized UsageEvent

    Raises:
        MalformedRecordError: If the line is not a JSON object or a field has
            the wrong type or a negative amount
    """
    try:
        record = json.loads(line)
    except json.JSONDecodeError as e:
        raise MalformedRecordError(f"invalid JSON: {e.msg}")

    if not isinstance(record, dict):
        raise MalformedRecordError(f"record must be an object, got {type(record).__name__}")

    cost = _number_field(record, "cost") or 0.0
    # A zero baseline is treated as missing, like any other falsy amount
    baseline_cost = _number_field(record, "baselineCost") or None
    savings = _number_field(record, "savings", allow_negative=True) or 0.0
    latency_ms = _number_field(record, "latencyMs") or 0

    timestamp = _string_field(record, "timestamp", "")
    if not timestamp:
        timestamp = now or datetime.now(timezone.utc).isoformat()

    return UsageEvent(
        timestamp=timestamp,
        model=_string_field(record, "model", "unknown"),
        tier=_string_field(record, "tier", Tier.UNKNOWN.value),
        cost=float(cost),
        baseline_cost=float(cost if baseline_cost is None else baseline_cost),
        savings=float(savings),
        latency_ms=int(round(latency_ms))
    )


def parse_log_content(content: str) -> List[UsageEvent]:
    """Parse a whole log unit, one record per non-blank line.

    Raises:
        MalformedRecordError: On the first record that fails to parse; the
            error's line_number is 1-based
    """
    now = datetime.now(timezone.utc).isoformat()
    events = []
    # Only "\n" ends a record; U+2028 and friends may appear raw inside strings
    for line_number, line in enumerate(content.split("\n"), start=1):
        line = line.strip()
        if not line:
            continue
        try:
            events.append(parse_usage_record(line, now=now))
        except MalformedRecordError as e:
            raise MalformedRecordError(f"line {line_number}: {e}", line_number=line_number) from e
    return events


def load_day(store: LogStore, day: str) -> DayLoad:
    """Read and parse one day's log unit, never raising for data problems."""
    try:
        content = store.read(day)
    except FileNotFoundError:
        logger.debug("No log unit for %s", day)
        return DayLoad(day=day, status=LoadStatus.ABSENT, detail="not found")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read log unit for %s: %s", day, e)
        return DayLoad(day=day, status=LoadStatus.UNREADABLE, detail=str(e))

    try:
        events = parse_log_content(content)
    except MalformedRecordError as e:
        logger.warning("Discarding log unit for %s: %s", day, e)
        return DayLoad(day=day, status=LoadStatus.MALFORMED, detail=str(e))

    if not events:
        return DayLoad(day=day, status=LoadStatus.EMPTY, detail="no records")
    return DayLoad(day=day, status=LoadStatus.OK, events=tuple(events))

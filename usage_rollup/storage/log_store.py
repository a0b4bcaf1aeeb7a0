"""
Per-day log storage.

One append-only JSONL file per calendar day, named ``usage-YYYY-MM-DD.jsonl``
so that sorting the names also sorts the dates.
"""

import json
import logging
from pathlib import Path
from typing import List, Union

from .models import UsageEvent

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "usage-"
DEFAULT_SUFFIX = ".jsonl"


class LogStore:
    """Directory of daily usage log units.

    The directory is passed in explicitly, so tests and tools can point at
    any location without touching process-wide state.
    """

    def __init__(
        self,
        log_dir: Union[str, Path],
        prefix: str = DEFAULT_PREFIX,
        suffix: str = DEFAULT_SUFFIX
    ):
        """Initialize the store.

        Args:
            log_dir: Directory holding the daily log files
            prefix: File name prefix before the date label
            suffix: File name suffix after the date label
        """
        self.log_dir = Path(log_dir)
        self.prefix = prefix
        self.suffix = suffix

    def path_for(self, day: str) -> Path:
        """Return the file path of the log unit for a day label."""
        return self.log_dir / f"{self.prefix}{day}{self.suffix}"

    def list_days(self) -> List[str]:
        """List available day labels, most recent first.

        A missing or unlistable directory yields an empty list rather
        than an error.
        """
        try:
            names = [entry.name for entry in self.log_dir.iterdir() if entry.is_file()]
        except FileNotFoundError:
            logger.debug("Log directory %s does not exist", self.log_dir)
            return []
        except OSError:
            logger.warning("Could not list log directory %s", self.log_dir, exc_info=True)
            return []

        days = [
            name[len(self.prefix):len(name) - len(self.suffix)]
            for name in names
            if name.startswith(self.prefix)
            and name.endswith(self.suffix)
            and len(name) > len(self.prefix) + len(self.suffix)
        ]
        return sorted(days, reverse=True)

    def read(self, day: str) -> str:
        """Return the raw content of a day's log unit.

        Raises:
            FileNotFoundError: If no unit exists for the day
            OSError: If the unit exists but cannot be read
            UnicodeDecodeError: If the unit is not valid UTF-8
        """
        return self.path_for(day).read_text(encoding="utf-8")

    def append(self, event: UsageEvent, day: str) -> None:
        """Append one event record to a day's log unit.

        Creates the directory and the unit if needed. Existing records are
        never rewritten.
        """
        self.log_dir.mkdir(parents=True, exist_ok=True)
        with open(self.path_for(day), "a", encoding="utf-8") as f:
            f.write(json.dumps(event.to_record()) + "\n")

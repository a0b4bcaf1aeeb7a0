"""
Unit tests for the per-day log store and demo seeding.
"""

import json
import os
import tempfile
from datetime import date

import pytest

from usage_rollup.core.window import get_window_stats
from usage_rollup.demo.seed_demo_data import DEMO_REQUESTS, seed_demo_logs
from usage_rollup.storage.log_store import LogStore
from usage_rollup.storage.models import UsageEvent


class TestLogStore:
    """Test listing, reading and appending log units."""

    def setup_method(self):
        """Set up test environment."""
        self.temp_dir = tempfile.mkdtemp()
        self.store = LogStore(self.temp_dir)

    def teardown_method(self):
        """Clean up test environment."""
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _touch(self, name: str) -> None:
        with open(os.path.join(self.temp_dir, name), "w", encoding="utf-8") as f:
            f.write("")

    def test_list_days_newest_first(self):
        """Test that day labels come back in descending order."""
        for name in ("usage-2024-01-02.jsonl", "usage-2023-12-31.jsonl", "usage-2024-01-10.jsonl"):
            self._touch(name)

        assert self.store.list_days() == ["2024-01-10", "2024-01-02", "2023-12-31"]

    def test_list_days_ignores_other_files(self):
        """Test that only prefix/suffix matches are listed."""
        self._touch("usage-2024-01-01.jsonl")
        self._touch("usage-2024-01-02.json")
        self._touch("report.html")
        self._touch("usage-.jsonl")
        os.mkdir(os.path.join(self.temp_dir, "usage-2024-01-03.jsonl"))

        assert self.store.list_days() == ["2024-01-01"]

    def test_missing_directory_lists_nothing(self):
        """Test that an absent storage location is an empty listing."""
        store = LogStore(os.path.join(self.temp_dir, "missing"))
        assert store.list_days() == []

    def test_read_missing_raises(self):
        """Test that reading an absent unit raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            self.store.read("2024-01-01")

    def test_append_writes_one_record_per_line(self):
        """Test that appends create the unit and add JSONL records."""
        store = LogStore(os.path.join(self.temp_dir, "nested", "logs"))
        event = UsageEvent(
            timestamp="2024-01-01T10:00:00Z",
            model="google/gemini-2.5-flash",
            tier="SIMPLE",
            cost=0.01,
            baseline_cost=0.05,
            savings=0.04,
            latency_ms=120
        )

        store.append(event, "2024-01-01")
        store.append(event, "2024-01-01")

        lines = store.read("2024-01-01").splitlines()
        assert len(lines) == 2
        assert json.loads(lines[0]) == {
            "timestamp": "2024-01-01T10:00:00Z",
            "model": "google/gemini-2.5-flash",
            "tier": "SIMPLE",
            "cost": 0.01,
            "baselineCost": 0.05,
            "savings": 0.04,
            "latencyMs": 120,
        }

    def test_custom_naming(self):
        """Test that prefix and suffix are configurable."""
        store = LogStore(self.temp_dir, prefix="router-", suffix=".log")
        self._touch("router-2024-05-01.log")
        self._touch("usage-2024-05-02.jsonl")

        assert store.list_days() == ["2024-05-01"]
        assert store.path_for("2024-05-01").name == "router-2024-05-01.log"


class TestSeedDemoData:
    """Test demo log generation."""

    def test_seed_writes_readable_days(self):
        """Test that seeded logs aggregate cleanly."""
        with tempfile.TemporaryDirectory() as temp_dir:
            count = seed_demo_logs(temp_dir, days=3, today=date(2024, 1, 10))

            store = LogStore(temp_dir)
            assert count == 12
            assert store.list_days() == ["2024-01-10", "2024-01-09", "2024-01-08"]

            stats = get_window_stats(3, store=store)
            assert stats.total_requests == 12
            assert stats.total_savings > 0
            assert set(stats.by_tier) == {tier for tier, *_ in DEMO_REQUESTS}

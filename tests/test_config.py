"""
Unit tests for configuration loading and validation.

Tests strict validation and environment overrides for rollup settings.
"""

import os
import tempfile
from pathlib import Path

import pytest
import yaml

from usage_rollup.config.loader import (
    DEFAULT_LOG_DIR,
    LOG_DIR_ENV_VAR,
    StatsConfig,
    load_stats_config
)


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    """Keep the host's environment out of these tests."""
    monkeypatch.delenv(LOG_DIR_ENV_VAR, raising=False)


class TestConfigLoading:
    """Test configuration loading and validation."""

    def setup_method(self):
        """Set up test environment."""
        self.temp_dir = tempfile.mkdtemp()

    def teardown_method(self):
        """Clean up test environment."""
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _write_config(self, config_data, filename: str = "config.yaml") -> str:
        """Write configuration data to temporary file."""
        config_path = os.path.join(self.temp_dir, filename)
        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.dump(config_data, f)
        return config_path

    def test_defaults_without_file(self):
        """Test that no path gives the default settings."""
        config = load_stats_config()

        assert config.log_dir == DEFAULT_LOG_DIR
        assert config.default_days == 7
        assert config.max_workers == 4

    def test_valid_config_loads_correctly(self):
        """Test that a valid configuration loads correctly."""
        config_path = self._write_config({
            "log_dir": "/var/log/router",
            "default_days": 30,
            "max_workers": 2
        })

        config = load_stats_config(config_path)

        assert config == StatsConfig(log_dir="/var/log/router", default_days=30, max_workers=2)

    def test_partial_config_keeps_defaults(self):
        """Test that omitted keys fall back to defaults."""
        config = load_stats_config(self._write_config({"default_days": 1}))

        assert config.default_days == 1
        assert config.log_dir == DEFAULT_LOG_DIR

    def test_env_var_overrides_log_dir(self, monkeypatch):
        """Test that the environment variable wins over the file."""
        monkeypatch.setenv(LOG_DIR_ENV_VAR, "/tmp/from-env")
        config = load_stats_config(self._write_config({"log_dir": "/tmp/from-file"}))

        assert config.log_dir == "/tmp/from-env"

    def test_log_path_expands_home(self):
        """Test that ~ is expanded in the resolved path."""
        config = StatsConfig(log_dir="~/logs")
        assert config.log_path == Path("~/logs").expanduser()

    def test_missing_file_raises(self):
        """Test that a missing config file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_stats_config(os.path.join(self.temp_dir, "nope.yaml"))

    def test_empty_file_raises(self):
        """Test that an empty config file is rejected."""
        path = os.path.join(self.temp_dir, "empty.yaml")
        Path(path).write_text("", encoding="utf-8")

        with pytest.raises(ValueError, match="Configuration file is empty"):
            load_stats_config(path)

    def test_invalid_yaml_raises(self):
        """Test that invalid YAML raises YAMLError."""
        path = os.path.join(self.temp_dir, "bad.yaml")
        Path(path).write_text("log_dir: [unclosed", encoding="utf-8")

        with pytest.raises(yaml.YAMLError):
            load_stats_config(path)

    def test_non_mapping_raises(self):
        """Test that a top-level list is rejected."""
        with pytest.raises(ValueError, match="must be a mapping"):
            load_stats_config(self._write_config(["log_dir"]))

    def test_unknown_keys_raise(self):
        """Test that unknown keys are rejected."""
        with pytest.raises(ValueError, match="Unknown configuration keys"):
            load_stats_config(self._write_config({"log_dir": "/tmp", "colour": "green"}))

    @pytest.mark.parametrize("config_data,message", [
        ({"log_dir": 5}, "'log_dir' must be a string"),
        ({"default_days": "7"}, "'default_days' must be an integer"),
        ({"max_workers": True}, "'max_workers' must be an integer"),
        ({"default_days": -1}, "default_days must be >= 0"),
        ({"max_workers": 0}, "max_workers must be >= 1"),
        ({"log_dir": ""}, "log_dir cannot be empty"),
    ])
    def test_invalid_values_raise(self, config_data, message):
        """Test that invalid values are rejected with a clear message."""
        with pytest.raises(ValueError, match=message):
            load_stats_config(self._write_config(config_data))

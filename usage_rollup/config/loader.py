"""
Configuration management and loading.

Handles rollup settings from an optional YAML file and environment variables.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_LOG_DIR = "~/.openclaw/blockrun/logs"
DEFAULT_DAYS = 7
DEFAULT_MAX_WORKERS = 4

# Overrides log_dir from the file (or the default) when set
LOG_DIR_ENV_VAR = "USAGE_ROLLUP_LOG_DIR"


@dataclass(frozen=True)
class StatsConfig:
    """Settings for locating logs and running an aggregation."""
    log_dir: str = DEFAULT_LOG_DIR
    default_days: int = DEFAULT_DAYS
    max_workers: int = DEFAULT_MAX_WORKERS

    def __post_init__(self):
        """Validate settings."""
        if not self.log_dir:
            raise ValueError("log_dir cannot be empty")
        if self.default_days < 0:
            raise ValueError("default_days must be >= 0")
        if self.max_workers < 1:
            raise ValueError("max_workers must be >= 1")

    @property
    def log_path(self) -> Path:
        """Log directory with ~ expanded."""
        return Path(self.log_dir).expanduser()


def load_stats_config(path: Optional[str] = None) -> StatsConfig:
    """Load and validate rollup configuration.

    Without a path the defaults are used. In both cases the
    USAGE_ROLLUP_LOG_DIR environment variable, when set, replaces log_dir.

    Args:
        path: Optional path to a YAML configuration file

    Returns:
        Validated StatsConfig object

    Raises:
        FileNotFoundError: If the config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    values = {}
    if path is not None:
        values = _read_config_file(path)

    env_log_dir = os.environ.get(LOG_DIR_ENV_VAR)
    if env_log_dir:
        values['log_dir'] = env_log_dir

    return StatsConfig(**values)


def _read_config_file(path: str) -> dict:
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if not raw_config:
        raise ValueError("Configuration file is empty")
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a mapping")

    allowed_keys = {'log_dir', 'default_days', 'max_workers'}
    unknown_keys = set(raw_config.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    values = {}
    if 'log_dir' in raw_config:
        log_dir = raw_config['log_dir']
        if not isinstance(log_dir, str):
            raise ValueError("'log_dir' must be a string")
        values['log_dir'] = log_dir

    for key in ('default_days', 'max_workers'):
        if key in raw_config:
            value = raw_config[key]
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"'{key}' must be an integer")
            values[key] = value

    return values

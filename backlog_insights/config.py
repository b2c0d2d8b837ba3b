"""
Configuration for Backlog Insights

Loads settings from config/config.yaml and overlays environment variables.
"""

import os
from typing import Optional

import yaml

from .predictor import SimulationConfig


DEFAULT_CONFIG_PATH = "config/config.yaml"


class Settings:
    """Load configuration from config.yaml and environment."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or os.getenv("BACKLOG_CONFIG", DEFAULT_CONFIG_PATH)
        self.config = {}

        if os.path.exists(self.config_path):
            with open(self.config_path) as f:
                self.config = yaml.safe_load(f) or {}

        # Override with environment variables
        self._load_env()

    def _load_env(self):
        """Load configuration from environment variables."""
        env_mapping = {
            "BACKLOG_LOG_LEVEL": ("logging", "level", str),
            "BACKLOG_REPO": ("sample", "repo", str),
            "BACKLOG_SAMPLE_SIZE": ("sample", "count", int),
            "BACKLOG_SAMPLE_SEED": ("sample", "seed", int),
        }

        for env_var, (section, key, cast) in env_mapping.items():
            value = os.getenv(env_var)
            if value:
                try:
                    value = cast(value)
                except ValueError as e:
                    raise ValueError(f"{env_var} must be {cast.__name__}, got {value!r}") from e
                self.config.setdefault(section, {})[key] = value

    def get(self, section: str, key: str, default=None):
        """Get configuration value."""
        return (self.config.get(section) or {}).get(key, default)

    @property
    def log_level(self) -> str:
        return str(self.get("logging", "level", "INFO")).upper()

    @property
    def cors_origins(self) -> list[str]:
        return self.get("api", "cors_origins", ["*"])

    @property
    def sample_repo(self) -> str:
        return self.get("sample", "repo", "example/repo")

    @property
    def sample_count(self) -> int:
        return int(self.get("sample", "count", 150))

    @property
    def sample_seed(self) -> Optional[int]:
        return self.get("sample", "seed", 42)

    @property
    def simulation(self) -> SimulationConfig:
        """Default scenario; missing keys fall back to the baseline."""
        section = self.config.get("simulation") or {}
        known = SimulationConfig.__dataclass_fields__
        return SimulationConfig(**{k: v for k, v in section.items() if k in known})

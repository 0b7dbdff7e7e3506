"""Configuration management for Pantry Tracker.

Settings live in a TOML file with four optional tables::

    [data]
    storage_dir = "~/pantry-tracker/data"
    backend = "json"            # or "sqlite"

    [budget]
    shopping_limit = 150.0

    [reports]
    default_period = "month"    # 7d | 15d | month | year

    [logging]
    level = "WARNING"
"""

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "PANTRY_TRACKER_CONFIG"
BACKENDS = ("json", "sqlite")
REPORT_PERIODS = ("7d", "15d", "month", "year")


def default_storage_dir() -> Path:
    return Path.home() / "pantry-tracker" / "data"


@dataclass
class DataConfig:
    """Where and how records are stored."""

    storage_dir: Path
    backend: str = "json"


@dataclass
class BudgetConfig:
    """Shopping budget ceiling."""

    shopping_limit: float = 150.0


@dataclass
class ReportsConfig:
    """Report defaults."""

    default_period: str = "month"


@dataclass
class LoggingConfig:
    """Log verbosity."""

    level: str = "WARNING"


@dataclass
class Config:
    """Complete application configuration."""

    data: DataConfig
    budget: BudgetConfig
    reports: ReportsConfig
    logging: LoggingConfig


class ConfigManager:
    """Loads Pantry Tracker settings from a TOML file."""

    def __init__(self, config_path: Path | None = None):
        """Initialize configuration manager.

        Args:
            config_path: Explicit config file. When omitted the
                ``PANTRY_TRACKER_CONFIG`` variable and then the standard
                locations are searched.

        Raises:
            ValueError: If the file holds an unknown backend or period
        """
        self.config_path = config_path or self._find_config()
        self._config = self._load_config()

    @property
    def data(self) -> DataConfig:
        return self._config.data

    @property
    def budget(self) -> BudgetConfig:
        return self._config.budget

    @property
    def reports(self) -> ReportsConfig:
        return self._config.reports

    @property
    def logging(self) -> LoggingConfig:
        return self._config.logging

    @staticmethod
    def search_paths() -> list[Path]:
        """Config file locations, highest priority first."""
        return [
            Path.cwd() / "config.toml",
            Path.home() / ".config" / "pantry-tracker" / "config.toml",
            Path.home() / ".pantry-tracker" / "config.toml",
        ]

    def _find_config(self) -> Path:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            return Path(env_path).expanduser()

        candidates = self.search_paths()
        for candidate in candidates:
            if candidate.exists():
                return candidate
        # Nothing on disk; defaults apply
        return candidates[1]

    def _load_config(self) -> Config:
        if not self.config_path.exists():
            logger.debug("No config file at %s, using defaults", self.config_path)
            return Config(
                data=DataConfig(storage_dir=default_storage_dir()),
                budget=BudgetConfig(),
                reports=ReportsConfig(),
                logging=LoggingConfig(),
            )

        with open(self.config_path, "rb") as f:
            raw = tomllib.load(f)
        logger.debug("Loaded config from %s", self.config_path)

        data = raw.get("data", {})
        budget = raw.get("budget", {})
        reports = raw.get("reports", {})
        log = raw.get("logging", {})

        storage_dir = data.get("storage_dir")
        backend = str(data.get("backend", "json")).lower()
        period = str(reports.get("default_period", "month"))

        if backend not in BACKENDS:
            raise ValueError(f"Unknown storage backend '{backend}' in {self.config_path}")
        if period not in REPORT_PERIODS:
            raise ValueError(f"Unknown report period '{period}' in {self.config_path}")

        return Config(
            data=DataConfig(
                storage_dir=(
                    Path(storage_dir).expanduser() if storage_dir else default_storage_dir()
                ),
                backend=backend,
            ),
            budget=BudgetConfig(shopping_limit=float(budget.get("shopping_limit", 150.0))),
            reports=ReportsConfig(default_period=period),
            logging=LoggingConfig(level=str(log.get("level", "WARNING")).upper()),
        )

    def get(self, key_path: str, default: Any = None) -> Any:
        """Read a setting by dot path, e.g. ``budget.shopping_limit``.

        Args:
            key_path: Section and field joined by dots
            default: Returned when the path does not resolve

        Returns:
            The setting or ``default``
        """
        value: Any = self._config
        for key in key_path.split("."):
            value = getattr(value, key, None)
            if value is None:
                return default
        return value

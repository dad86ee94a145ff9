"""Configuration management for Wishlist Tracker."""

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass
class DataConfig:
    """Data storage configuration."""

    storage_dir: Path
    backend: str = "json"


@dataclass
class TrackingConfig:
    """Periodic price-check configuration."""

    interval_seconds: float = 3600.0
    min_price_change: float = 0.01


@dataclass
class PredictionConfig:
    """Trend projection configuration."""

    days_ahead: int = 7


@dataclass
class DisplayConfig:
    """Display defaults, overridden by saved preferences."""

    currency_code: str = "USD"
    theme: str = "default"


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "WARNING"
    file: Path | None = None


@dataclass
class Config:
    """Complete application configuration."""

    data: DataConfig
    tracking: TrackingConfig
    prediction: PredictionConfig
    display: DisplayConfig
    logging: LoggingConfig


class ConfigManager:
    """Manages application configuration from TOML files."""

    def __init__(self, config_path: Path | None = None):
        """Initialize configuration manager.

        Args:
            config_path: Optional explicit path to config file.
                        If not provided, searches standard locations.
        """
        self.config_path = config_path or self._find_config()
        self._config = self._load_config()

    @property
    def data(self) -> DataConfig:
        """Get data configuration."""
        return self._config.data

    @property
    def tracking(self) -> TrackingConfig:
        """Get price tracking configuration."""
        return self._config.tracking

    @property
    def prediction(self) -> PredictionConfig:
        """Get prediction configuration."""
        return self._config.prediction

    @property
    def display(self) -> DisplayConfig:
        """Get display configuration."""
        return self._config.display

    @property
    def logging(self) -> LoggingConfig:
        """Get logging configuration."""
        return self._config.logging

    def _find_config(self) -> Path:
        """Find config file in standard locations."""
        locations = [
            Path.cwd() / "config.toml",
            Path.home() / ".config" / "wishlist-tracker" / "config.toml",
            Path.home() / ".wishlist-tracker" / "config.toml",
        ]

        for loc in locations:
            if loc.exists():
                return loc

        # Return default location if none found
        return Path.home() / ".config" / "wishlist-tracker" / "config.toml"

    def _load_config(self) -> Config:
        """Load configuration from TOML file."""
        if not self.config_path.exists():
            return self._default_config()

        with open(self.config_path, "rb") as f:
            data = tomllib.load(f)

        data_section = data.get("data", {})
        tracking = data.get("tracking", {})
        display = data.get("display", {})
        log_section = data.get("logging", {})
        log_file = log_section.get("file")

        return Config(
            data=DataConfig(
                storage_dir=Path(
                    data_section.get("storage_dir", "~/wishlist-tracker/data")
                ).expanduser(),
                backend=data_section.get("backend", "json"),
            ),
            tracking=TrackingConfig(
                interval_seconds=float(tracking.get("interval_seconds", 3600.0)),
                min_price_change=float(tracking.get("min_price_change", 0.01)),
            ),
            prediction=PredictionConfig(
                days_ahead=int(data.get("prediction", {}).get("days_ahead", 7)),
            ),
            display=DisplayConfig(
                currency_code=display.get("currency_code", "USD"),
                theme=display.get("theme", "default"),
            ),
            logging=LoggingConfig(
                level=log_section.get("level", "WARNING"),
                file=Path(log_file).expanduser() if log_file else None,
            ),
        )

    def _default_config(self) -> Config:
        """Return default configuration."""
        return Config(
            data=DataConfig(storage_dir=Path.home() / "wishlist-tracker" / "data"),
            tracking=TrackingConfig(),
            prediction=PredictionConfig(),
            display=DisplayConfig(),
            logging=LoggingConfig(),
        )

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get config value by dot-notation path.

        Args:
            key_path: Dot-separated path like 'data.storage_dir'
            default: Default value if path not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split(".")
        value: Any = self._config

        for key in keys:
            if hasattr(value, key):
                value = getattr(value, key)
            elif isinstance(value, dict):
                value = value.get(key)
                if value is None:
                    return default
            else:
                return default

        return value if value is not None else default

"""Configuration management for the pricing engine.

Handles engine configuration from environment variables, YAML config files
and default settings. Provides structured configuration classes for the
different concerns of the engine (editing rules, currencies, logging).
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_DURATION_CHIPS = [15, 30, 45, 60, 120]


class EngineConfig(BaseSettings):
    """Editing and resolution rules.

    Attributes:
        default_currency: Currency used when a code is unknown or missing.
        default_minor_units: Minor units assumed for unknown currencies.
        duration_chips: Quick-pick durations offered by duration editors.
        min_duration_minutes: Smallest accepted duration.
    """
    default_currency: str = Field(default="EUR", validation_alias="PRICING_DEFAULT_CURRENCY")
    default_minor_units: int = 2
    duration_chips: list[int] = Field(default_factory=lambda: list(DEFAULT_DURATION_CHIPS))
    min_duration_minutes: int = 1


class LoggingConfig(BaseSettings):
    """Logging configuration.

    Attributes:
        level: Root log level name.
        log_format: Log record format string.
    """
    level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_format: str = "%(asctime)s - %(levelname)s - %(message)s"


class Config:
    """Engine configuration manager.

    Centralizes loading of environment variables, YAML files and default
    values. Provides typed access to configuration sections.
    """

    def __init__(self, config_dir: Path | None = None):
        """Initialize configuration manager.

        Args:
            config_dir: Path to configuration directory, defaults to pricing_engine/config.
        """
        if config_dir is None:
            config_dir = Path(__file__).parent / "config"

        self.config_dir = Path(config_dir)
        self.logging = LoggingConfig()

        engine_path = self.config_dir / "engine.yml"
        if engine_path.exists():
            with open(engine_path) as f:
                engine_data = yaml.safe_load(f) or {}

            duration_data = engine_data.get("duration", {})
            engine_kwargs: dict[str, Any] = {
                "default_minor_units": engine_data.get("default_minor_units", 2),
                "duration_chips": duration_data.get("chips", list(DEFAULT_DURATION_CHIPS)),
                "min_duration_minutes": duration_data.get("min_minutes", 1),
            }
            # Environment wins over the file for the default currency
            if "default_currency" in engine_data and "PRICING_DEFAULT_CURRENCY" not in os.environ:
                engine_kwargs["PRICING_DEFAULT_CURRENCY"] = str(engine_data["default_currency"])
            self.engine = EngineConfig(**engine_kwargs)
        else:
            # Use defaults if config file not found
            self.engine = EngineConfig()

        self.currencies = self._load_currencies()

    def _load_currencies(self) -> list[dict[str, Any]]:
        """Load the currency table from YAML configuration.

        Returns:
            List of currency dictionaries with 'code', 'label', 'symbol',
            'minor_units' and 'selectable' keys.
        """
        currencies_path = self.config_dir / "currencies.yml"
        if not currencies_path.exists():
            return []

        with open(currencies_path) as f:
            data = yaml.safe_load(f) or {}

        return data.get("currencies", [])


# Global configuration instance
config = Config()

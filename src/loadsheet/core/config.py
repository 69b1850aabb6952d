"""Configuration loading for the loadsheet engine.

This module provides a YAML configuration loader with dot-notation access
and the typed settings objects consumed by the engine, the formatter and the
generation coordinator.

Typical usage example:
    from loadsheet.core.config import ConfigLoader, LoadsheetSettings

    config = ConfigLoader.load("config/loadsheet.yaml")
    settings = LoadsheetSettings.from_config(config)
    timeout = settings.backend.request_timeout
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from loadsheet.weight_balance.aircraft import A320_CONSTANTS, AircraftReferenceConstants
from loadsheet.weight_balance.models import A320_LIMITS, WeightLimits

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when configuration cannot be loaded or is malformed."""


class ConfigLoader:
    """Configuration loader for YAML files.

    Examples:
        >>> config = ConfigLoader.load("config/loadsheet.yaml")
        >>> retries = config.get("generation.max_retries", default=3)
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        """Initialize with configuration data.

        Args:
            data: Configuration dictionary.
        """
        self._data = data or {}

    @classmethod
    def load(cls, path: str | Path) -> "ConfigLoader":
        """Load configuration from a YAML file.

        Args:
            path: Path to YAML configuration file.

        Returns:
            ConfigLoader instance with loaded data.

        Raises:
            ConfigError: If the file is missing or is not a YAML mapping.
        """
        path = Path(path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load configuration: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration root must be a mapping: {path}")

        logger.info("Loaded configuration from: %s", path)
        return cls(data)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value using dot notation.

        Args:
            key: Configuration key (e.g. "backend.base_url").
            default: Default value if key not found.

        Returns:
            Configuration value or default.
        """
        value: Any = self._data

        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def get_section(self, key: str) -> dict[str, Any]:
        """Get an entire configuration section.

        Missing sections yield an empty dict so that defaults apply.

        Raises:
            ConfigError: If the key exists but is not a mapping.
        """
        value = self.get(key)

        if value is None:
            return {}

        if not isinstance(value, dict):
            raise ConfigError(f"Configuration key is not a section: {key}")

        return value

    def merge(self, other: "ConfigLoader") -> None:
        """Merge another configuration into this one (other wins)."""
        self._data = self._merge_dicts(self._data, other._data)

    def _merge_dicts(self, base: dict, override: dict) -> dict:
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_dicts(result[key], value)
            else:
                result[key] = value

        return result

    def to_dict(self) -> dict[str, Any]:
        """Get the configuration as a dictionary."""
        return self._data.copy()


@dataclass
class BackendSettings:
    """Connection settings for the loadsheet backend.

    Attributes:
        base_url: Backend root URL, e.g. "http://localhost:5000/efb".
        request_timeout: Per-attempt timeout for generation requests (seconds).
        health_timeout: Timeout for the health check (seconds).
    """

    base_url: str = ""
    request_timeout: float = 10.0
    health_timeout: float = 5.0


@dataclass
class GenerationSettings:
    """Retry, polling and input-preparation settings for generation.

    Attributes:
        max_retries: Retries after the first attempt (total attempts = max_retries + 1).
        backoff_unit: Base delay between attempts (seconds).
        backoff_strategy: "linear" (n × unit) or "exponential" (unit × 2^(n-1)).
        availability_timeout: How long to poll for a generated loadsheet (seconds).
        poll_interval: Delay between availability polls (seconds).
        min_attempt_interval: Minimum spacing between preflight attempts per type (seconds).
        seat_count: Number of seats in the booked-seat map pushed to the simulator.
            None sums the cabin zone capacities reported by the simulator,
            falling back to 132 when they are not available.
    """

    max_retries: int = 3
    backoff_unit: float = 1.0
    backoff_strategy: str = "linear"
    availability_timeout: float = 30.0
    poll_interval: float = 1.0
    min_attempt_interval: float = 0.0
    seat_count: int | None = None

    def __post_init__(self) -> None:
        if self.backoff_strategy not in ("linear", "exponential"):
            raise ConfigError(f"Unknown backoff strategy: {self.backoff_strategy}")
        if self.max_retries < 0:
            raise ConfigError("max_retries must be >= 0")
        if self.seat_count is not None and self.seat_count <= 0:
            raise ConfigError("seat_count must be > 0")

    def backoff_delay(self, retry_number: int) -> float:
        """Delay before the given retry (1-based)."""
        if self.backoff_strategy == "exponential":
            return self.backoff_unit * (2 ** (retry_number - 1))
        return self.backoff_unit * retry_number


@dataclass
class EstimationSettings:
    """Preliminary estimation settings.

    Attributes:
        seed: Seed for the jitter source; None draws from system entropy.
    """

    seed: int | None = None


@dataclass
class LoadsheetSettings:
    """All settings of the engine, grouped by concern."""

    backend: BackendSettings = field(default_factory=BackendSettings)
    generation: GenerationSettings = field(default_factory=GenerationSettings)
    estimation: EstimationSettings = field(default_factory=EstimationSettings)
    aircraft: AircraftReferenceConstants = A320_CONSTANTS
    limits: WeightLimits = A320_LIMITS

    @classmethod
    def from_config(cls, config: ConfigLoader) -> "LoadsheetSettings":
        """Build settings from a loaded configuration.

        Args:
            config: Loaded configuration.

        Returns:
            Settings with defaults for anything the file leaves out.

        Raises:
            ConfigError: If a section has the wrong shape or an unknown key.
        """
        try:
            backend = BackendSettings(**config.get_section("backend"))
            generation = GenerationSettings(**config.get_section("generation"))
            estimation = EstimationSettings(**config.get_section("estimation"))
        except TypeError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

        aircraft_section = config.get_section("aircraft")
        limits_section = config.get_section("limits")
        try:
            aircraft = (
                AircraftReferenceConstants.from_dict(aircraft_section)
                if aircraft_section
                else A320_CONSTANTS
            )
            limits = WeightLimits.from_dict(limits_section) if limits_section else A320_LIMITS
        except KeyError as e:
            raise ConfigError(f"Missing configuration key: {e}") from e
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

        return cls(
            backend=backend,
            generation=generation,
            estimation=estimation,
            aircraft=aircraft,
            limits=limits,
        )

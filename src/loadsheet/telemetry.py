"""Telemetry provider interface.

The simulator connectivity layer is an external collaborator. This module
defines the contract the engine and the coordinator rely on, plus an
in-memory provider used by tests and offline tools.

Typical usage example:
    from loadsheet.telemetry import DictTelemetryProvider

    telemetry = DictTelemetryProvider({"aircraft.weight.empty": 42500.0})
    empty_weight = read_float(telemetry, "aircraft.weight.empty")
"""

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from loadsheet.core.errors import NotFoundError, ParseError, WriteError

logger = logging.getLogger(__name__)

TelemetryCallback = Callable[[str, Any], None]


class TelemetryProvider(ABC):
    """Read/write access to simulator variables.

    Implementations must raise NotFoundError for unknown keys on read and
    WriteError when a write is rejected.
    """

    @abstractmethod
    def read(self, key: str) -> Any:
        """Read a variable.

        Raises:
            NotFoundError: If the key does not exist.
        """

    @abstractmethod
    def write(self, key: str, value: Any) -> None:
        """Write a variable.

        Raises:
            WriteError: If the write is rejected.
        """

    def subscribe(self, key: str, callback: TelemetryCallback) -> None:
        """Register a callback invoked with (key, value) when key changes.

        Providers without change notification leave this as a no-op; the
        coordinator then relies on availability polling.
        """


def read_float(telemetry: TelemetryProvider, key: str) -> float:
    """Read a numeric variable.

    Raises:
        NotFoundError: If the key does not exist.
        ParseError: If the value is not numeric.
    """
    value = telemetry.read(key)
    if isinstance(value, bool):
        raise ParseError(f"Telemetry value for {key} is not numeric: {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ParseError(f"Telemetry value for {key} is not numeric: {value!r}") from e


def read_int(telemetry: TelemetryProvider, key: str) -> int:
    """Read a count variable (truncated to int)."""
    return int(read_float(telemetry, key))


class DictTelemetryProvider(TelemetryProvider):
    """In-memory telemetry backed by a dict.

    Writes notify subscribers of the written key synchronously.

    Examples:
        >>> telemetry = DictTelemetryProvider({"aircraft.cargo.forward.capacity": 3402})
        >>> telemetry.read("aircraft.cargo.forward.capacity")
        3402
    """

    def __init__(
        self, values: dict[str, Any] | None = None, read_only: set[str] | None = None
    ) -> None:
        """Initialize the provider.

        Args:
            values: Initial variable values.
            read_only: Keys whose writes are rejected with WriteError.
        """
        self._values: dict[str, Any] = dict(values or {})
        self._read_only = set(read_only or ())
        self._subscribers: dict[str, list[TelemetryCallback]] = {}
        self._lock = threading.Lock()
        self.writes: list[tuple[str, Any]] = []

    def read(self, key: str) -> Any:
        with self._lock:
            if key not in self._values:
                raise NotFoundError(f"Unknown telemetry key: {key}")
            return self._values[key]

    def write(self, key: str, value: Any) -> None:
        if key in self._read_only:
            raise WriteError(f"Telemetry key is read-only: {key}")

        with self._lock:
            self._values[key] = value
            self.writes.append((key, value))
            callbacks = list(self._subscribers.get(key, []))

        for callback in callbacks:
            callback(key, value)

    def subscribe(self, key: str, callback: TelemetryCallback) -> None:
        with self._lock:
            self._subscribers.setdefault(key, []).append(callback)
        logger.debug("Subscribed to telemetry key: %s", key)

    def subscriber_count(self, key: str) -> int:
        with self._lock:
            return len(self._subscribers.get(key, []))

"""Fixtures for generation tests."""

import json
import random

import pytest

from loadsheet.core.config import GenerationSettings
from loadsheet.core.event_bus import EventBus
from loadsheet.generation.backend import BackendResponse
from loadsheet.generation.coordinator import LoadsheetGenerationCoordinator
from loadsheet.generation.inputs import FUEL_TARGET_KEY
from loadsheet.telemetry import DictTelemetryProvider
from loadsheet.weight_balance.models import FlightPlan


class FakeBackend:
    """Backend double answering from a script.

    Each scripted item is a BackendResponse to return or an exception to
    raise. Once the script runs out, the last item repeats.
    """

    def __init__(self, *script, base_url: str = "http://backend.test/efb") -> None:
        self.base_url = base_url
        self.script = list(script) or [BackendResponse(200, "{}")]
        self.calls: list[tuple[str, str, dict | None, float | None]] = []

    async def request(self, method, path, body=None, timeout=None) -> BackendResponse:
        self.calls.append((method, path, body, timeout))
        item = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(item, Exception):
            raise item
        return item

    def paths(self, method: str = "POST") -> list[str]:
        return [path for m, path, _, _ in self.calls if m == method]


class FakeClock:
    """Monotonic clock advanced by the waits it records."""

    def __init__(self, start: float = 100.0) -> None:
        self.now_value = start
        self.sleeps: list[float] = []

    def now(self) -> float:
        return self.now_value

    async def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)
        self.now_value += delay


def loadsheet_payload(**overrides) -> dict:
    """Wire payload of a valid loadsheet notification."""
    payload = {
        "zeroFuelWeight": 56050.0,
        "zeroFuelWeightCG": -8.9,
        "zeroFuelWeightMac": 26.46,
        "takeoffWeight": 62050.0,
        "takeoffWeightCG": -8.85,
        "takeoffWeightMac": 25.75,
        "fuelWeight": 6000.0,
        "landingWeight": 58550.0,
        "totalPassengers": 150,
        "passengersByZone": {"1": 35, "2": 32, "3": 33, "4": 50},
        "forwardCargoWeight": 900.0,
        "aftCargoWeight": 1100.0,
        "fuelByTank": {"Center": 2100.0, "Left": 1950.0, "Right": 1950.0},
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def telemetry() -> DictTelemetryProvider:
    return DictTelemetryProvider({FUEL_TARGET_KEY: json.dumps({"refuelTarget": 6000})})


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def plan() -> FlightPlan:
    return FlightPlan(passengers=120, cargo_total=2000.0, fuel=6000.0, plan_id="OFP-1")


@pytest.fixture
def make_coordinator(telemetry, backend, clock, bus, plan):
    """Factory for a coordinator wired to the fakes, with a flight plan loaded."""

    def _make(**settings) -> LoadsheetGenerationCoordinator:
        coordinator = LoadsheetGenerationCoordinator(
            telemetry,
            backend,
            event_bus=bus,
            settings=GenerationSettings(**settings),
            request_timeout=7.5,
            health_timeout=2.5,
            rng=random.Random(3),
            sleep=clock.sleep,
            clock=clock.now,
        )
        coordinator.load_flight_plan(plan)
        return coordinator

    return _make


@pytest.fixture
def make_payload():
    """Factory for wire payloads of valid loadsheet notifications."""
    return loadsheet_payload

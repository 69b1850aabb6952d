"""Pytest configuration and fixtures for all tests."""

import pytest

from loadsheet.telemetry import DictTelemetryProvider
from loadsheet.weight_balance.models import LoadsheetData


@pytest.fixture
def a320_telemetry() -> DictTelemetryProvider:
    """Telemetry of an A320 with a 180-seat cabin, loaded for a typical flight."""
    return DictTelemetryProvider(
        {
            "aircraft.passengers.zone1.capacity": 40,
            "aircraft.passengers.zone2.capacity": 40,
            "aircraft.passengers.zone3.capacity": 40,
            "aircraft.passengers.zone4.capacity": 60,
            "aircraft.passengers.zone1.amount": 35,
            "aircraft.passengers.zone2.amount": 32,
            "aircraft.passengers.zone3.amount": 33,
            "aircraft.passengers.zone4.amount": 50,
            "aircraft.cargo.forward.capacity": 2500,
            "aircraft.cargo.aft.capacity": 2500,
            "aircraft.cargo.forward.amount": 900.0,
            "aircraft.cargo.aft.amount": 1100.0,
            "aircraft.fuel.center.amount.kg": 2100.0,
            "aircraft.fuel.left.amount.kg": 1950.0,
            "aircraft.fuel.right.amount.kg": 1950.0,
            "aircraft.weight.empty": 42500.0,
        }
    )


@pytest.fixture
def make_loadsheet():
    """Factory for LoadsheetData with plausible A320 figures."""

    def _make(**overrides) -> LoadsheetData:
        values = {
            "zero_fuel_weight": 56050.0,
            "zero_fuel_weight_cg": -8.9,
            "zero_fuel_weight_mac": 26.46,
            "takeoff_weight": 62050.0,
            "takeoff_weight_cg": -8.85,
            "takeoff_weight_mac": 25.75,
            "fuel_weight": 6000.0,
            "landing_weight": 58550.0,
            "total_passengers": 150,
            "passengers_by_zone": {1: 35, 2: 32, 3: 33, 4: 50},
            "forward_cargo_weight": 900.0,
            "aft_cargo_weight": 1100.0,
            "fuel_by_tank": {"Center": 2100.0, "Left": 1950.0, "Right": 1950.0},
        }
        values.update(overrides)
        return LoadsheetData(**values)

    return _make

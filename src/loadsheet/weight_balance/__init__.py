"""Weight and balance computation for loadsheets.

This module turns passenger, cargo and fuel loads into ZFW, TOW, CG and
MAC figures, either estimated from the flight plan (preliminary) or measured
in the simulator (final).

Typical usage:
    from loadsheet.weight_balance import WeightDistributionEngine, FlightPlan

    engine = WeightDistributionEngine(seed=42)
    data = engine.compute_preliminary_from_telemetry(FlightPlan(150, 2000, 9000), telemetry)
"""

from loadsheet.weight_balance.aircraft import (
    A320_CONSTANTS,
    TANK_NAMES,
    AircraftReferenceConstants,
)
from loadsheet.weight_balance.engine import WeightDistributionEngine
from loadsheet.weight_balance.models import (
    A320_LIMITS,
    CapacityExceeded,
    CargoCapacities,
    FlightPlan,
    LoadsheetData,
    WeightLimits,
)
from loadsheet.weight_balance.station import LoadStation

__all__ = [
    "A320_CONSTANTS",
    "A320_LIMITS",
    "AircraftReferenceConstants",
    "CapacityExceeded",
    "CargoCapacities",
    "FlightPlan",
    "LoadStation",
    "LoadsheetData",
    "TANK_NAMES",
    "WeightDistributionEngine",
    "WeightLimits",
]

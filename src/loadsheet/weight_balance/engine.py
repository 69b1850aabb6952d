"""Weight distribution engine.

This module turns planned figures (preliminary) or measured simulator loads
(final) into ZFW, TOW, CG and MAC figures.

Typical usage example:
    from loadsheet.weight_balance import WeightDistributionEngine

    engine = WeightDistributionEngine(seed=42)
    prelim = engine.compute_preliminary(
        flight_plan, [40, 40, 40, 60], CargoCapacities(2500, 2500), empty_weight=42500.0
    )
    final = engine.compute_final(telemetry, planned_trip_fuel=3500.0)
"""

import random
from collections.abc import Sequence

from loadsheet.core.errors import ComputationError, ConfigurationError
from loadsheet.core.logging_system import get_logger
from loadsheet.telemetry import TelemetryProvider, read_float, read_int
from loadsheet.weight_balance.aircraft import (
    A320_CONSTANTS,
    TANK_NAMES,
    AircraftReferenceConstants,
)
from loadsheet.weight_balance.models import (
    CapacityExceeded,
    CargoCapacities,
    FlightPlan,
    LoadsheetData,
)
from loadsheet.weight_balance.station import LoadStation, total_moment, total_weight

logger = get_logger(__name__)

ZONE_COUNT = 4
ZONES = range(1, ZONE_COUNT + 1)

PAX_JITTER = (0.98, 1.02)
FUEL_JITTER = (0.98, 1.02)
FORWARD_CARGO_RATIO = 0.45
FORWARD_CARGO_JITTER = 0.025
FUEL_SPLIT = {"Center": 0.35, "Left": 0.325, "Right": 0.325}
# Preliminary landing weight assumes 15% of the fuel is burnt en route
PRELIM_TRIP_BURN = 0.15

TANK_KEYS = {
    "Center": "aircraft.fuel.center.amount.kg",
    "Left": "aircraft.fuel.left.amount.kg",
    "Right": "aircraft.fuel.right.amount.kg",
}


def zone_capacity_key(zone: int) -> str:
    return f"aircraft.passengers.zone{zone}.capacity"


def zone_amount_key(zone: int) -> str:
    return f"aircraft.passengers.zone{zone}.amount"


class WeightDistributionEngine:
    """Computes loadsheet figures from passenger, cargo and fuel loads.

    The jitter applied to preliminary estimates comes from an injected
    random source so that results are reproducible under a fixed seed.
    Final figures use measured loads and involve no randomness.

    Examples:
        >>> engine = WeightDistributionEngine(seed=7)
        >>> engine.convert_to_mac(A320_CONSTANTS.leading_edge_mac)
        -0.0
    """

    def __init__(
        self,
        constants: AircraftReferenceConstants = A320_CONSTANTS,
        rng: random.Random | None = None,
        seed: int | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            constants: Aircraft reference geometry.
            rng: Random source for preliminary jitter. Takes precedence over seed.
            seed: Seed used to build a random source when rng is not given.
        """
        self.constants = constants
        self.rng = rng if rng is not None else random.Random(seed)

    def convert_to_mac(self, cg: float) -> float:
        """Convert an absolute CG position to percent MAC.

        Args:
            cg: CG position from the datum.

        Returns:
            CG as percentage of the mean aerodynamic chord.
        """
        return -100.0 * (cg - self.constants.leading_edge_mac) / self.constants.mac_size

    def compute_preliminary(
        self,
        flight_plan: FlightPlan,
        zone_capacities: Sequence[int],
        cargo_capacities: CargoCapacities,
        empty_weight: float,
    ) -> LoadsheetData:
        """Estimate loadsheet figures from the flight plan.

        Args:
            flight_plan: Planned passengers, cargo and fuel.
            zone_capacities: Seat capacity of passenger zones 1-4.
            cargo_capacities: Forward/aft hold capacities (kg).
            empty_weight: Operating empty weight (kg).

        Returns:
            Estimated loadsheet figures. Any capacity clamp is listed in
            the result's warnings.

        Raises:
            ConfigurationError: If the total zone capacity is zero.
            ComputationError: If the resulting weight is zero.
        """
        if len(zone_capacities) != ZONE_COUNT:
            raise ConfigurationError(
                f"Expected {ZONE_COUNT} zone capacities, got {len(zone_capacities)}"
            )

        zones = self._distribute_passengers(flight_plan.passengers, zone_capacities)
        forward_cargo, aft_cargo, warnings = self._distribute_cargo(
            flight_plan.cargo_total, cargo_capacities
        )
        tanks = self._distribute_fuel(flight_plan.fuel)

        fuel = sum(tanks.values())
        data = self._build(
            empty_weight=empty_weight,
            zones=zones,
            forward_cargo=forward_cargo,
            aft_cargo=aft_cargo,
            tanks=tanks,
            landing_fuel=fuel * (1.0 - PRELIM_TRIP_BURN),
            trip_fuel=None,
        )
        data.total_passengers = flight_plan.passengers
        data.warnings = warnings

        self._log_figures("Preliminary", data, zone_capacities, cargo_capacities)
        return data

    def compute_preliminary_from_telemetry(
        self, flight_plan: FlightPlan, telemetry: TelemetryProvider
    ) -> LoadsheetData:
        """Estimate loadsheet figures reading capacities from the simulator."""
        zone_capacities = [read_int(telemetry, zone_capacity_key(z)) for z in ZONES]
        cargo_capacities = CargoCapacities(
            forward=read_float(telemetry, "aircraft.cargo.forward.capacity"),
            aft=read_float(telemetry, "aircraft.cargo.aft.capacity"),
        )
        empty_weight = read_float(telemetry, "aircraft.weight.empty")
        return self.compute_preliminary(
            flight_plan, zone_capacities, cargo_capacities, empty_weight
        )

    def compute_final(
        self, telemetry: TelemetryProvider, planned_trip_fuel: float
    ) -> LoadsheetData:
        """Compute loadsheet figures from the loads measured in the simulator.

        Args:
            telemetry: Provider for passenger, cargo and fuel readings.
            planned_trip_fuel: Planned trip burn (kg), used for landing weight.

        Returns:
            Final loadsheet figures. Cargo readings above hold capacity are
            clamped and listed in the result's warnings.

        Raises:
            NotFoundError: If a required telemetry key is missing.
            ParseError: If a reading is not numeric.
            ComputationError: If the resulting weight is zero.
        """
        zones = {z: read_int(telemetry, zone_amount_key(z)) for z in ZONES}
        zone_capacities = [read_int(telemetry, zone_capacity_key(z)) for z in ZONES]
        capacities = CargoCapacities(
            forward=read_float(telemetry, "aircraft.cargo.forward.capacity"),
            aft=read_float(telemetry, "aircraft.cargo.aft.capacity"),
        )

        warnings: list[CapacityExceeded] = []
        forward_amount = read_float(telemetry, "aircraft.cargo.forward.amount")
        aft_amount = read_float(telemetry, "aircraft.cargo.aft.amount")
        forward_cargo = self._clamp_hold("cargo_fwd", forward_amount, capacities.forward, warnings)
        aft_cargo = self._clamp_hold("cargo_aft", aft_amount, capacities.aft, warnings)

        tanks = {tank: read_float(telemetry, key) for tank, key in TANK_KEYS.items()}
        empty_weight = read_float(telemetry, "aircraft.weight.empty")

        data = self._build(
            empty_weight=empty_weight,
            zones=zones,
            forward_cargo=forward_cargo,
            aft_cargo=aft_cargo,
            tanks=tanks,
            landing_fuel=None,
            trip_fuel=planned_trip_fuel,
        )
        data.warnings = warnings

        self._log_figures("Final", data, zone_capacities, capacities)
        return data

    def _distribute_passengers(self, planned: int, capacities: Sequence[int]) -> dict[int, int]:
        """Spread planned passengers over zones, summing exactly to planned."""
        total_capacity = sum(capacities)
        if total_capacity <= 0:
            raise ConfigurationError("Total passenger zone capacity is zero")

        load_factor = min(1.0, planned / total_capacity)

        zones: dict[int, int] = {}
        for zone, capacity in enumerate(capacities, start=1):
            jittered = int(capacity * load_factor * self.rng.uniform(*PAX_JITTER))
            zones[zone] = max(0, min(capacity, jittered))

        difference = planned - sum(zones.values())
        if difference != 0:
            for zone in range(1, ZONE_COUNT):
                zones[zone] += int(difference * (capacities[zone - 1] / total_capacity))
                zones[zone] = max(0, zones[zone])
            # Last zone absorbs the remainder so the sum is exact
            zones[ZONE_COUNT] = planned - sum(zones[z] for z in range(1, ZONE_COUNT))

        shortfall = -zones[ZONE_COUNT]
        if shortfall > 0:
            zones[ZONE_COUNT] = 0
            for zone in sorted(range(1, ZONE_COUNT), key=lambda z: zones[z], reverse=True):
                taken = min(shortfall, zones[zone])
                zones[zone] -= taken
                shortfall -= taken
                if shortfall == 0:
                    break

        return zones

    def _distribute_cargo(
        self, requested: float, capacities: CargoCapacities
    ) -> tuple[float, float, list[CapacityExceeded]]:
        """Split cargo between holds, never exceeding either hold."""
        warnings: list[CapacityExceeded] = []
        total = requested

        if total > capacities.total:
            warning = CapacityExceeded("cargo", requested, capacities.total)
            logger.warning("Total cargo exceeds combined hold capacity: %s", warning)
            warnings.append(warning)
            total = capacities.total

        jitter = self.rng.uniform(-FORWARD_CARGO_JITTER, FORWARD_CARGO_JITTER)
        forward_ratio = FORWARD_CARGO_RATIO + jitter
        forward = min(total * forward_ratio, capacities.forward)
        aft = min(total - forward, capacities.aft)

        # Forward may be capped by the ratio while aft is full; move the rest forward
        if forward + aft < total:
            forward = min(total - aft, capacities.forward)

        return forward, aft, warnings

    def _distribute_fuel(self, planned_fuel: float) -> dict[str, float]:
        """Split fuel 35/32.5/32.5 with one jitter factor shared by all tanks."""
        factor = self.rng.uniform(*FUEL_JITTER)
        return {tank: planned_fuel * ratio * factor for tank, ratio in FUEL_SPLIT.items()}

    @staticmethod
    def _clamp_hold(
        name: str, measured: float, capacity: float, warnings: list[CapacityExceeded]
    ) -> float:
        if measured > capacity:
            warning = CapacityExceeded(name, measured, capacity)
            logger.warning("Cargo reading exceeds hold capacity: %s", warning)
            warnings.append(warning)
            return capacity
        return measured

    def _build(
        self,
        empty_weight: float,
        zones: dict[int, int],
        forward_cargo: float,
        aft_cargo: float,
        tanks: dict[str, float],
        landing_fuel: float | None,
        trip_fuel: float | None,
    ) -> LoadsheetData:
        """Assemble moments, CGs and MAC figures from distributed loads."""
        c = self.constants

        zero_fuel_stations = [LoadStation("empty", c.operating_empty_cg, empty_weight, "empty")]
        zero_fuel_stations += [
            LoadStation(f"zone{zone}", c.zone_arms[zone - 1], count * c.passenger_weight, "pax")
            for zone, count in zones.items()
        ]
        zero_fuel_stations += [
            LoadStation("cargo_fwd", c.forward_cargo_arm, forward_cargo, "cargo"),
            LoadStation("cargo_aft", c.aft_cargo_arm, aft_cargo, "cargo"),
        ]
        fuel_stations = [
            LoadStation(tank, c.tank_arm(tank), tanks[tank], "fuel") for tank in TANK_NAMES
        ]

        zfw = total_weight(zero_fuel_stations)
        zfw_moment = total_moment(zero_fuel_stations)
        fuel = total_weight(fuel_stations)
        tow = zfw + fuel
        tow_moment = zfw_moment + total_moment(fuel_stations)

        zfw_cg = self._cg(zfw_moment, zfw, "zero fuel")
        tow_cg = self._cg(tow_moment, tow, "takeoff")

        if trip_fuel is not None:
            landing_weight = tow - trip_fuel
        else:
            landing_weight = zfw + (landing_fuel or 0.0)

        return LoadsheetData(
            zero_fuel_weight=zfw,
            zero_fuel_weight_cg=zfw_cg,
            zero_fuel_weight_mac=self.convert_to_mac(zfw_cg),
            takeoff_weight=tow,
            takeoff_weight_cg=tow_cg,
            takeoff_weight_mac=self.convert_to_mac(tow_cg),
            fuel_weight=fuel,
            landing_weight=landing_weight,
            total_passengers=sum(zones.values()),
            passengers_by_zone=dict(zones),
            forward_cargo_weight=forward_cargo,
            aft_cargo_weight=aft_cargo,
            fuel_by_tank=dict(tanks),
        )

    @staticmethod
    def _cg(moment: float, weight: float, label: str) -> float:
        if weight <= 0:
            raise ComputationError(f"Cannot compute {label} CG: total weight is {weight}")
        return moment / weight

    @staticmethod
    def _log_figures(
        kind: str,
        data: LoadsheetData,
        zone_capacities: Sequence[int],
        cargo_capacities: CargoCapacities,
    ) -> None:
        zones = ", ".join(
            f"{zone}:{data.zone_passengers(zone)}/{cap}"
            for zone, cap in enumerate(zone_capacities, start=1)
        )
        logger.info(
            "%s figures: ZFW %.0f kg CG %.2f MAC %.2f%%, TOW %.0f kg CG %.2f MAC %.2f%%, "
            "pax zones %s, cargo fwd %.0f/%.0f aft %.0f/%.0f kg, fuel %s",
            kind,
            data.zero_fuel_weight,
            data.zero_fuel_weight_cg,
            data.zero_fuel_weight_mac,
            data.takeoff_weight,
            data.takeoff_weight_cg,
            data.takeoff_weight_mac,
            zones,
            data.forward_cargo_weight,
            cargo_capacities.forward,
            data.aft_cargo_weight,
            cargo_capacities.aft,
            ", ".join(f"{tank}:{weight:.0f}" for tank, weight in data.fuel_by_tank.items()),
        )

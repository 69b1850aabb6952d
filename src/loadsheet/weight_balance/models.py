"""Data model for weight and balance results and their inputs."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class FlightPlan:
    """Planned load figures for a flight. Read-only to the engine.

    Attributes:
        passengers: Planned passenger count.
        cargo_total: Planned cargo weight (kg).
        fuel: Planned block fuel (kg).
        plan_id: Identifier of the flight plan, used to detect a new flight.
        trip_fuel: Planned trip fuel burn (kg).
    """

    passengers: int
    cargo_total: float
    fuel: float
    plan_id: str = ""
    trip_fuel: float = 0.0

    def __post_init__(self) -> None:
        if self.passengers < 0:
            raise ValueError(f"Passenger count must be >= 0, got {self.passengers}")
        if self.cargo_total < 0 or self.fuel < 0 or self.trip_fuel < 0:
            raise ValueError("Cargo and fuel figures must be >= 0")


@dataclass(frozen=True)
class CargoCapacities:
    """Physical capacity of the cargo holds (kg)."""

    forward: float
    aft: float

    @property
    def total(self) -> float:
        return self.forward + self.aft


@dataclass(frozen=True)
class CapacityExceeded:
    """Warning recorded when a load is clamped to physical capacity.

    Attributes:
        item: What was clamped ("cargo", "cargo_fwd", "cargo_aft").
        requested: Requested or measured weight (kg).
        capacity: Capacity the value was clamped to (kg).
    """

    item: str
    requested: float
    capacity: float

    def __str__(self) -> str:
        return (
            f"{self.item}: {self.requested:.0f} kg exceeds capacity "
            f"{self.capacity:.0f} kg, limited to capacity"
        )


@dataclass
class LoadsheetData:
    """Weight and balance figures of one loadsheet.

    CG values are positions from the datum; MAC values are percent MAC.

    Attributes:
        zero_fuel_weight: ZFW (kg).
        zero_fuel_weight_cg: ZFW CG.
        zero_fuel_weight_mac: ZFW CG in %MAC.
        takeoff_weight: TOW (kg).
        takeoff_weight_cg: TOW CG.
        takeoff_weight_mac: TOW CG in %MAC.
        fuel_weight: Fuel on board (kg).
        landing_weight: Estimated landing weight (kg).
        total_passengers: Passenger count.
        passengers_by_zone: Zone number (1-4) to passenger count.
        forward_cargo_weight: Forward hold cargo (kg).
        aft_cargo_weight: Aft hold cargo (kg).
        fuel_by_tank: Tank name to fuel weight (kg).
        warnings: Capacity clamps applied while computing the figures.
    """

    zero_fuel_weight: float
    zero_fuel_weight_cg: float
    zero_fuel_weight_mac: float
    takeoff_weight: float
    takeoff_weight_cg: float
    takeoff_weight_mac: float
    fuel_weight: float
    landing_weight: float
    total_passengers: int
    passengers_by_zone: dict[int, int] = field(default_factory=dict)
    forward_cargo_weight: float = 0.0
    aft_cargo_weight: float = 0.0
    fuel_by_tank: dict[str, float] = field(default_factory=dict)
    warnings: list[CapacityExceeded] = field(default_factory=list)

    @property
    def cargo_weight(self) -> float:
        return self.forward_cargo_weight + self.aft_cargo_weight

    def zone_passengers(self, zone: int) -> int:
        """Passenger count of a zone, 0 when the zone is absent."""
        return self.passengers_by_zone.get(zone, 0)


@dataclass(frozen=True)
class WeightLimits:
    """Structural weight limits (kg) printed on the preliminary loadsheet.

    Attributes:
        max_zfw: Maximum zero fuel weight.
        max_tow: Maximum takeoff weight.
        max_law: Maximum landing weight.
    """

    max_zfw: float
    max_tow: float
    max_law: float

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WeightLimits":
        """Build limits from a config section.

        Raises:
            KeyError: If a limit is missing.
            ValueError: If a limit is not numeric.
        """
        return cls(
            max_zfw=float(data["max_zfw"]),
            max_tow=float(data["max_tow"]),
            max_law=float(data["max_law"]),
        )


A320_LIMITS = WeightLimits(max_zfw=62500.0, max_tow=78000.0, max_law=66000.0)

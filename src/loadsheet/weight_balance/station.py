"""Load station for weight and balance calculations.

A load station represents a point where weight is carried: the empty
airframe, a passenger zone, a cargo hold, or a fuel tank.
"""

from dataclasses import dataclass


@dataclass
class LoadStation:
    """A weight station of the aircraft.

    Attributes:
        name: Station identifier (e.g., "zone1", "cargo_fwd", "Center")
        arm: Distance from reference datum
        weight: Weight carried at the station (kg)
        station_type: Type of station ("empty", "pax", "cargo", "fuel")

    Examples:
        >>> hold = LoadStation(name="cargo_fwd", arm=9.333, weight=900.0, station_type="cargo")
        >>> moment = hold.calculate_moment()  # 900 kg × 9.333 ft = 8399.7 kg-ft
    """

    name: str
    arm: float
    weight: float
    station_type: str

    def calculate_moment(self) -> float:
        """Calculate moment (weight × arm)."""
        return self.weight * self.arm


def total_weight(stations: list[LoadStation]) -> float:
    """Sum of station weights."""
    return sum(station.weight for station in stations)


def total_moment(stations: list[LoadStation]) -> float:
    """Sum of station moments."""
    return sum(station.calculate_moment() for station in stations)

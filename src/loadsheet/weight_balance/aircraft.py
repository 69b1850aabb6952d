"""Aircraft reference constants for weight and balance.

Arms are distances from the reference datum in the simulator's model
coordinates (feet, positive forward). Weights are kilograms.
"""

from dataclasses import dataclass
from typing import Any

TANK_NAMES = ("Center", "Left", "Right")


@dataclass(frozen=True)
class AircraftReferenceConstants:
    """Fixed per-type geometry used to turn loads into moments and MAC.

    Attributes:
        operating_empty_cg: CG of the operating empty aircraft.
        leading_edge_mac: Position of the MAC leading edge.
        mac_size: Length of the mean aerodynamic chord.
        zone_arms: Arms of passenger zones 1-4.
        forward_cargo_arm: Arm of the forward cargo hold.
        aft_cargo_arm: Arm of the aft cargo hold.
        tank_arms: Arms of the Center, Left and Right fuel tanks.
        passenger_weight: Standard passenger unit weight (kg).

    Examples:
        >>> A320_CONSTANTS.passenger_weight
        77.0
    """

    operating_empty_cg: float
    leading_edge_mac: float
    mac_size: float
    zone_arms: tuple[float, float, float, float]
    forward_cargo_arm: float
    aft_cargo_arm: float
    tank_arms: tuple[float, float, float]
    passenger_weight: float

    def __post_init__(self) -> None:
        if self.mac_size <= 0:
            raise ValueError(f"MAC size must be positive, got {self.mac_size}")
        if len(self.zone_arms) != 4:
            raise ValueError("Exactly 4 passenger zone arms are required")
        if len(self.tank_arms) != len(TANK_NAMES):
            raise ValueError("Exactly 3 fuel tank arms are required")

    def tank_arm(self, tank: str) -> float:
        """Arm of a fuel tank by name ("Center", "Left" or "Right")."""
        return self.tank_arms[TANK_NAMES.index(tank)]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AircraftReferenceConstants":
        """Build constants from a config section.

        Raises:
            KeyError: If a required key is missing.
            ValueError: If a value is malformed.
        """
        return cls(
            operating_empty_cg=float(data["operating_empty_cg"]),
            leading_edge_mac=float(data["leading_edge_mac"]),
            mac_size=float(data["mac_size"]),
            zone_arms=tuple(float(a) for a in data["zone_arms"]),  # type: ignore[arg-type]
            forward_cargo_arm=float(data["forward_cargo_arm"]),
            aft_cargo_arm=float(data["aft_cargo_arm"]),
            tank_arms=tuple(float(a) for a in data["tank_arms"]),  # type: ignore[arg-type]
            passenger_weight=float(data.get("passenger_weight", 77.0)),
        )


# A320 values from the simulator flight model
A320_CONSTANTS = AircraftReferenceConstants(
    operating_empty_cg=-9.536,
    leading_edge_mac=-5.383,
    mac_size=13.464,
    zone_arms=(35.095, 9.664, 0.0, -36.362),
    forward_cargo_arm=9.333,
    aft_cargo_arm=-43.139,
    tank_arms=(-8.0181, -8.396782, -8.396782),
    passenger_weight=77.0,
)

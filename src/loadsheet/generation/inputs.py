"""Inputs pushed to the simulator before requesting a loadsheet.

The backend computes the authoritative loadsheet from simulator variables,
so the booked seat map, passenger statistics, planned cargo and fuel target
are written first, in that order.
"""

import json
import random
from typing import Any

from loadsheet.core.errors import ParseError

SEAT_MAP_KEY = "efb.passengers.booked.string"
PASSENGER_STATISTICS_KEY = "efb.passengerStatistics"
PLANNED_CARGO_KEY = "efb.plannedCargoKg"
FUEL_TARGET_KEY = "aircraft.refuel.fuelTarget"

# A320 cabin used when neither settings nor the simulator give a seat count
DEFAULT_SEAT_COUNT = 132


def build_seat_map(passengers: int, seat_count: int, rng: random.Random) -> list[bool]:
    """Randomly book `passengers` seats out of `seat_count`.

    Raises:
        ValueError: If passengers is negative or exceeds seat_count.
    """
    if passengers < 0 or passengers > seat_count:
        raise ValueError(f"Passenger count must be between 0 and {seat_count}, got {passengers}")

    booked = set(rng.sample(range(seat_count), passengers))
    return [seat in booked for seat in range(seat_count)]


def format_seat_map(seats: list[bool]) -> str:
    """Render a seat map as "true,false,..."."""
    return ",".join("true" if booked else "false" for booked in seats)


def passenger_statistics(passengers: int) -> dict[str, int]:
    """Cabin statistics for an all-economy load.

    Section 1 holds half of the passengers, section 2 two fifths, section 3
    the remainder.

    Examples:
        >>> passenger_statistics(150)["NumOfPaxInSection3"]
        15
    """
    section1 = int(passengers * 0.5)
    section2 = int(passengers * 0.4)
    return {
        "NumOfPaxInBusiness": 0,
        "NumOfPaxInEconomy": passengers,
        "NumOfPaxInSection1": section1,
        "NumOfPaxInSection2": section2,
        "NumOfPaxInSection3": passengers - section1 - section2,
        "Total": passengers,
    }


def parse_fuel_target(value: Any) -> float:
    """Read a fuel target written either as a number or as {"refuelTarget": n}.

    Raises:
        ParseError: If the value holds no numeric fuel target.
    """
    if isinstance(value, bool):
        raise ParseError(f"Invalid fuel target: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)

    decoded = value
    if isinstance(value, (str, bytes)):
        try:
            decoded = json.loads(value)
        except ValueError as e:
            raise ParseError(f"Invalid fuel target: {value!r}") from e

    if isinstance(decoded, dict):
        decoded = decoded.get("refuelTarget")

    if isinstance(decoded, (int, float)) and not isinstance(decoded, bool):
        return float(decoded)

    raise ParseError(f"Invalid fuel target: {value!r}")


def fuel_target_payload(target: float) -> str:
    return json.dumps({"refuelTarget": target})

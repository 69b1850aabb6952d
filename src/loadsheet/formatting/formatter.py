"""Airline-style textual loadsheets.

This module renders LoadsheetData into the fixed line layout read by the
ACARS composer and the display, and computes the two classifications printed
on the sheets: weight limitation ("L" next to a weight close to its limit)
and preliminary-to-final changes ("//" next to a revised figure).

Typical usage example:
    from loadsheet.formatting import FlightMeta, LoadsheetFormatter

    formatter = LoadsheetFormatter(crew=CrewFillerGenerator(seed=1))
    text = formatter.format_preliminary(prelim, A320_LIMITS, meta)
    text = formatter.format_final(final, prelim, meta)
"""

from dataclasses import dataclass

from loadsheet.formatting.crew import CrewFillerGenerator
from loadsheet.weight_balance.models import LoadsheetData, WeightLimits

WEIGHT_LIMIT_THRESHOLD = 1000.0
WEIGHT_CHANGE_TOLERANCE = 1000.0
MAC_CHANGE_TOLERANCE = 0.5

LIMIT_MARKER = "L"
CHANGE_MARKER = "//"
SEPARATOR = "......................"
PREPARED_BY_PHONE = "+1 800 555 0199"


@dataclass
class FlightMeta:
    """Flight identification printed in loadsheet headers.

    Attributes:
        time: Issue time, "HHMM".
        flight_number: Flight number (e.g. "DLH123").
        day: Day of month of the flight.
        date: Flight date (e.g. "17OCT26").
        origin: Origin ICAO code.
        destination: Destination ICAO code.
        tail_number: Aircraft registration.
        pax_infants: Infants on board, printed separately from adults.
    """

    time: str
    flight_number: str
    day: str
    date: str
    origin: str
    destination: str
    tail_number: str
    pax_infants: int = 0


def detect_weight_limitation(
    estimated: float, maximum: float, threshold: float = WEIGHT_LIMIT_THRESHOLD
) -> bool:
    """Check whether a weight exceeds or approaches its limit.

    Args:
        estimated: Estimated weight (kg).
        maximum: Structural limit (kg).
        threshold: Margin below the limit considered limiting (kg).

    Returns:
        True if estimated > maximum, or maximum - estimated <= threshold.

    Examples:
        >>> detect_weight_limitation(61500, 62500)
        True
        >>> detect_weight_limitation(61499, 62500)
        False
    """
    return estimated > maximum or maximum - estimated <= threshold


@dataclass(frozen=True)
class WeightLimitFlags:
    """Weight limitation flags for ZFW, TOW and landing weight."""

    zfw: bool
    tow: bool
    law: bool

    @classmethod
    def from_data(
        cls,
        data: LoadsheetData,
        limits: WeightLimits,
        threshold: float = WEIGHT_LIMIT_THRESHOLD,
    ) -> "WeightLimitFlags":
        return cls(
            zfw=detect_weight_limitation(data.zero_fuel_weight, limits.max_zfw, threshold),
            tow=detect_weight_limitation(data.takeoff_weight, limits.max_tow, threshold),
            law=detect_weight_limitation(data.landing_weight, limits.max_law, threshold),
        )


@dataclass(frozen=True)
class ChangeReport:
    """Per-field changes between a preliminary and a final loadsheet.

    Attributes:
        zfw: ZFW moved by more than the weight tolerance.
        tow: TOW moved by more than the weight tolerance.
        fuel: Fuel moved by more than the weight tolerance.
        mac_zfw: ZFW MAC moved by more than the MAC tolerance.
        mac_tow: TOW MAC moved by more than the MAC tolerance.
        passengers: Passenger counts differ.
    """

    zfw: bool
    tow: bool
    fuel: bool
    mac_zfw: bool
    mac_tow: bool
    passengers: bool

    @property
    def any_changed(self) -> bool:
        return self.zfw or self.tow or self.fuel or self.mac_zfw or self.mac_tow or self.passengers


def detect_changes(
    prelim: LoadsheetData,
    final: LoadsheetData,
    weight_tolerance: float = WEIGHT_CHANGE_TOLERANCE,
    mac_tolerance: float = MAC_CHANGE_TOLERANCE,
) -> ChangeReport:
    """Compare final figures against the preliminary ones.

    A difference exactly equal to the tolerance is not a change.
    """
    return ChangeReport(
        zfw=abs(prelim.zero_fuel_weight - final.zero_fuel_weight) > weight_tolerance,
        tow=abs(prelim.takeoff_weight - final.takeoff_weight) > weight_tolerance,
        fuel=abs(prelim.fuel_weight - final.fuel_weight) > weight_tolerance,
        mac_zfw=abs(prelim.zero_fuel_weight_mac - final.zero_fuel_weight_mac) > mac_tolerance,
        mac_tow=abs(prelim.takeoff_weight_mac - final.takeoff_weight_mac) > mac_tolerance,
        passengers=prelim.total_passengers != final.total_passengers,
    )


def _whole(value: float) -> int:
    return int(round(value))


def _marker(flag: bool, marker: str) -> str:
    return marker if flag else ""


def _join(lines: list[str]) -> str:
    return "\n".join(line.rstrip() for line in lines)


class LoadsheetFormatter:
    """Render preliminary and final loadsheets.

    Output is a pure function of the inputs and of the injected crew filler
    generator. Weights are printed as whole kilograms, MAC figures with two
    decimals.

    Examples:
        >>> formatter = LoadsheetFormatter(crew=CrewFillerGenerator(seed=1))
        >>> text = formatter.format_preliminary(data, A320_LIMITS, meta)
        >>> text.splitlines()[0]
        '- LOADSHEET PRELIM 1432'
    """

    def __init__(
        self,
        crew: CrewFillerGenerator | None = None,
        limit_threshold: float = WEIGHT_LIMIT_THRESHOLD,
        weight_tolerance: float = WEIGHT_CHANGE_TOLERANCE,
        mac_tolerance: float = MAC_CHANGE_TOLERANCE,
    ) -> None:
        """Initialize the formatter.

        Args:
            crew: Source of the "PREPARED BY" name and licence.
            limit_threshold: Margin for the "L" weight limitation flag (kg).
            weight_tolerance: Change tolerance for ZFW, TOW and fuel (kg).
            mac_tolerance: Change tolerance for MAC figures (%MAC).
        """
        self.crew = crew if crew is not None else CrewFillerGenerator()
        self.limit_threshold = limit_threshold
        self.weight_tolerance = weight_tolerance
        self.mac_tolerance = mac_tolerance

    def format_preliminary(
        self, data: LoadsheetData, limits: WeightLimits, meta: FlightMeta
    ) -> str:
        """Render a preliminary loadsheet.

        Args:
            data: Estimated figures.
            limits: Structural weight limits.
            meta: Flight identification.

        Returns:
            Loadsheet text, lines separated by newlines, ending with "END".
        """
        flags = WeightLimitFlags.from_data(data, limits, self.limit_threshold)
        zone_c = data.zone_passengers(3) + data.zone_passengers(4)

        lines = [
            f"- LOADSHEET PRELIM {meta.time}",
            "EDNO 1",
            f"{meta.flight_number}/{meta.day} {meta.date}",
            f"{meta.origin} {meta.destination} {meta.tail_number} 2/4",
            f"ZFW  {_whole(data.zero_fuel_weight)}  MAX  {_whole(limits.max_zfw)}  "
            f"{_marker(flags.zfw, LIMIT_MARKER)}",
            f"TOF  {_whole(data.takeoff_weight - data.zero_fuel_weight)}",
            f"TOW  {_whole(data.takeoff_weight)}  MAX  {_whole(limits.max_tow)}  "
            f"{_marker(flags.tow, LIMIT_MARKER)}",
            f"TIF  {_whole(data.takeoff_weight - data.landing_weight)}",
            f"LAW  {_whole(data.landing_weight)}  MAX  {_whole(limits.max_law)}  "
            f"{_marker(flags.law, LIMIT_MARKER)}",
            f"UNDLO  {_whole(limits.max_law - data.landing_weight)}",
            f"PAX/{meta.pax_infants}/{data.total_passengers} TTL "
            f"{meta.pax_infants + data.total_passengers}",
            f"MACZFW  {data.zero_fuel_weight_mac:.2f}",
            f"MACTOW  {data.takeoff_weight_mac:.2f}",
            f"A{data.zone_passengers(1)}  B{data.zone_passengers(2)}  C{zone_c}",
            "CABIN SECTION TRIM",
            "SI SERVICE WEIGHT",
            "ADJUSTMENT WEIGHT/INDEX",
            "ADD",
            f"{meta.destination} POTABLE WATER xx/10",
            "100PCT",
            "441 -0.5",
            "DEDUCTIONS",
            "NIL PANTRY EFFECT 2590/0.0",
            SEPARATOR,
            "PREPARED BY",
            f"{self.crew.name()} {PREPARED_BY_PHONE}",
            f"LICENCE {self.crew.licence()}",
            f"FUEL IN TANKS {_whole(data.fuel_weight)}",
            "END",
        ]
        return _join(lines)

    def format_final(self, data: LoadsheetData, prelim: LoadsheetData, meta: FlightMeta) -> str:
        """Render a final loadsheet against the preliminary one.

        The header reads "REVISIONS TO EDNO 1" when any figure changed beyond
        tolerance, "COMPLIANCE WITH EDNO 1" otherwise. Each changed figure is
        followed by "//".
        """
        changes = detect_changes(prelim, data, self.weight_tolerance, self.mac_tolerance)
        title = "REVISIONS TO EDNO 1" if changes.any_changed else "COMPLIANCE WITH EDNO 1"

        lines = [
            title,
            f"{meta.flight_number}/{meta.day}  {meta.date}",
            f"{meta.origin}  {meta.destination}  {meta.tail_number}  2/4",
            SEPARATOR,
            f"ZFW  {_whole(data.zero_fuel_weight)}  {_marker(changes.zfw, CHANGE_MARKER)}",
            f"TOW  {_whole(data.takeoff_weight)}  {_marker(changes.tow, CHANGE_MARKER)}",
            f"PAX  {self._passenger_delta(data, prelim)}  "
            f"{_marker(changes.passengers, CHANGE_MARKER)}",
            f"MACZFW  {data.zero_fuel_weight_mac:.2f}  {_marker(changes.mac_zfw, CHANGE_MARKER)}",
            f"MACTOW  {data.takeoff_weight_mac:.2f}  {_marker(changes.mac_tow, CHANGE_MARKER)}",
            f"FUEL IN TANKS  {_whole(data.fuel_weight)}  {_marker(changes.fuel, CHANGE_MARKER)}",
            "END",
        ]
        return _join(lines)

    @staticmethod
    def _passenger_delta(data: LoadsheetData, prelim: LoadsheetData) -> str:
        difference = data.total_passengers - prelim.total_passengers
        if difference > 0:
            return f"{data.total_passengers} plus {difference}"
        if difference < 0:
            return f"{data.total_passengers} minus {-difference}"
        return f"{data.total_passengers} no change"

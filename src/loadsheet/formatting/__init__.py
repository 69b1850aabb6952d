"""Airline-style loadsheet rendering.

Typical usage:
    from loadsheet.formatting import CrewFillerGenerator, FlightMeta, LoadsheetFormatter

    formatter = LoadsheetFormatter(crew=CrewFillerGenerator(seed=1))
    print(formatter.format_preliminary(data, limits, meta))
"""

from loadsheet.formatting.composer import LoadsheetComposer
from loadsheet.formatting.crew import CrewFillerGenerator
from loadsheet.formatting.formatter import (
    ChangeReport,
    FlightMeta,
    LoadsheetFormatter,
    WeightLimitFlags,
    detect_changes,
    detect_weight_limitation,
)
from loadsheet.weight_balance.models import WeightLimits

__all__ = [
    "ChangeReport",
    "CrewFillerGenerator",
    "FlightMeta",
    "LoadsheetComposer",
    "LoadsheetFormatter",
    "WeightLimitFlags",
    "WeightLimits",
    "detect_changes",
    "detect_weight_limitation",
]

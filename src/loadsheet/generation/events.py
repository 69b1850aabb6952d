"""Events published on the event bus by the generation pipeline."""

from dataclasses import dataclass

from loadsheet.core.event_bus import Event
from loadsheet.generation.state import LoadsheetType
from loadsheet.weight_balance.models import LoadsheetData


@dataclass
class LoadsheetReceived(Event):
    """The backend published a generated loadsheet.

    Attributes:
        loadsheet_type: Which loadsheet was generated.
        data: Validated loadsheet figures.
    """

    loadsheet_type: LoadsheetType
    data: LoadsheetData


@dataclass
class LoadsheetRendered(Event):
    """A loadsheet was rendered to text, ready for display or ACARS.

    Attributes:
        loadsheet_type: Which loadsheet was rendered.
        text: Rendered loadsheet.
    """

    loadsheet_type: LoadsheetType
    text: str

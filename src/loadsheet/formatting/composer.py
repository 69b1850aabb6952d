"""Render loadsheets as they arrive from the backend.

The composer keeps the preliminary figures of the current flight so that
the final loadsheet can be printed against them with revision markers.
"""

import logging

from loadsheet.core.event_bus import EventBus, EventPriority
from loadsheet.formatting.formatter import FlightMeta, LoadsheetFormatter
from loadsheet.generation.events import LoadsheetReceived, LoadsheetRendered
from loadsheet.generation.state import LoadsheetType
from loadsheet.weight_balance.models import A320_LIMITS, LoadsheetData, WeightLimits

logger = logging.getLogger(__name__)


class LoadsheetComposer:
    """Turn LoadsheetReceived events into LoadsheetRendered events.

    Examples:
        >>> composer = LoadsheetComposer(LoadsheetFormatter(), bus)
        >>> composer.prepare(meta, A320_LIMITS)
        >>> bus.publish(LoadsheetReceived(loadsheet_type=LoadsheetType.PRELIMINARY, data=data))
    """

    def __init__(self, formatter: LoadsheetFormatter, event_bus: EventBus | None = None) -> None:
        """Initialize the composer.

        Args:
            formatter: Formatter used to render sheets.
            event_bus: Bus to listen on and publish rendered sheets to.
        """
        self.formatter = formatter
        self.event_bus = event_bus
        self.meta: FlightMeta | None = None
        self.limits: WeightLimits = A320_LIMITS
        self.preliminary: LoadsheetData | None = None

        if event_bus is not None:
            event_bus.subscribe(LoadsheetReceived, self._on_loadsheet_received, EventPriority.HIGH)

    def prepare(self, meta: FlightMeta, limits: WeightLimits = A320_LIMITS) -> None:
        """Set the flight identification and limits used for rendering."""
        self.meta = meta
        self.limits = limits

    def reset(self) -> None:
        """Forget the preliminary figures of the previous flight."""
        self.preliminary = None

    def render(self, loadsheet_type: LoadsheetType, data: LoadsheetData) -> str:
        """Render a loadsheet.

        Preliminary figures are kept. A final sheet is rendered against them,
        or against itself (a plain compliance sheet) when none were received.

        Raises:
            RuntimeError: If prepare() has not been called.
        """
        if self.meta is None:
            raise RuntimeError("Flight identification not set, call prepare() first")

        if loadsheet_type is LoadsheetType.PRELIMINARY:
            self.preliminary = data
            return self.formatter.format_preliminary(data, self.limits, self.meta)

        reference = self.preliminary if self.preliminary is not None else data
        return self.formatter.format_final(data, reference, self.meta)

    def _on_loadsheet_received(self, event: LoadsheetReceived) -> None:
        if self.meta is None:
            logger.warning("Received %s loadsheet before flight setup", event.loadsheet_type.value)
            return

        text = self.render(event.loadsheet_type, event.data)
        logger.info("Rendered %s loadsheet", event.loadsheet_type.value)

        if self.event_bus is not None:
            self.event_bus.publish(
                LoadsheetRendered(loadsheet_type=event.loadsheet_type, text=text)
            )

"""Event bus for synchronous event dispatch.

Loadsheet results reach listeners (formatter, ACARS composer, UI) through
this bus. Events are dispatched to all subscribers in priority order.

Typical usage example:
    from loadsheet.core.event_bus import EventBus
    from loadsheet.generation.events import LoadsheetReceived

    bus = EventBus()
    bus.subscribe(LoadsheetReceived, on_loadsheet)
    bus.publish(LoadsheetReceived(loadsheet_type=LoadsheetType.FINAL, data=data))
"""

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class EventPriority(Enum):
    """Priority levels for event handlers.

    Handlers are executed in order from CRITICAL to LOW.
    """

    CRITICAL = auto()
    HIGH = auto()
    NORMAL = auto()
    LOW = auto()


@dataclass
class Event:
    """Base class for all events.

    Attributes:
        timestamp: Unix timestamp when the event was created.
    """

    timestamp: float = field(default_factory=time.time, kw_only=True)


class EventBus:
    """Central event bus for synchronous event dispatch.

    Examples:
        >>> bus = EventBus()
        >>> bus.subscribe(LoadsheetReceived, handler)
        >>> bus.publish(LoadsheetReceived(loadsheet_type=LoadsheetType.PRELIMINARY, data=data))
    """

    def __init__(self) -> None:
        self._handlers: dict[type[Event], list[tuple[Callable[[Any], None], EventPriority]]] = {}

    def subscribe(
        self,
        event_type: type[Event],
        handler: Callable[[Any], None],
        priority: EventPriority = EventPriority.NORMAL,
    ) -> None:
        """Subscribe a handler to an event type.

        Args:
            event_type: The class of event to subscribe to.
            handler: Callable that accepts the event as its only parameter.
            priority: Priority level for this handler. Defaults to NORMAL.
        """
        handlers = self._handlers.setdefault(event_type, [])
        handlers.append((handler, priority))

        # Sort by priority (CRITICAL=1 ... LOW=4), stable for equal priorities
        handlers.sort(key=lambda x: x[1].value)

    def unsubscribe(self, event_type: type[Event], handler: Callable[[Any], None]) -> None:
        """Unsubscribe a handler. No-op if it is not subscribed."""
        if event_type in self._handlers:
            self._handlers[event_type] = [
                (h, p) for h, p in self._handlers[event_type] if h != handler
            ]

            if not self._handlers[event_type]:
                del self._handlers[event_type]

    def publish(self, event: Event) -> None:
        """Publish an event to all subscribers.

        Handlers are called synchronously in priority order. If a handler
        raises, the exception propagates to the caller.

        Args:
            event: The event to publish.
        """
        for handler, _ in list(self._handlers.get(type(event), [])):
            handler(event)

    def clear(self) -> None:
        """Remove all event handlers."""
        self._handlers.clear()

    def get_subscriber_count(self, event_type: type[Event]) -> int:
        """Get the number of subscribers for an event type."""
        return len(self._handlers.get(event_type, []))

"""Authoritative loadsheet generation through the simulator backend.

This module requests preliminary and final loadsheets from the backend with
retries and idempotency, and dispatches the generated figures to listeners.

Typical usage:
    from loadsheet.generation import LoadsheetGenerationCoordinator, LoadsheetType

    coordinator = LoadsheetGenerationCoordinator.from_settings(settings, telemetry, event_bus)
    coordinator.load_flight_plan(plan)
    result = await coordinator.generate_with_preflight(LoadsheetType.PRELIMINARY)
"""

from loadsheet.generation.backend import BackendClient, BackendResponse
from loadsheet.generation.coordinator import LoadsheetGenerationCoordinator
from loadsheet.generation.events import LoadsheetReceived, LoadsheetRendered
from loadsheet.generation.notifications import (
    LoadsheetPayload,
    ParsedNotification,
    parse_notification,
)
from loadsheet.generation.result import ErrorKind, LoadsheetResult
from loadsheet.generation.state import GenerationPhase, GenerationState, LoadsheetType

__all__ = [
    "BackendClient",
    "BackendResponse",
    "ErrorKind",
    "GenerationPhase",
    "GenerationState",
    "LoadsheetGenerationCoordinator",
    "LoadsheetPayload",
    "LoadsheetReceived",
    "LoadsheetRendered",
    "LoadsheetResult",
    "LoadsheetType",
    "ParsedNotification",
    "parse_notification",
]

"""Loadsheet types and per-type generation state."""

from dataclasses import dataclass
from enum import Enum


class LoadsheetType(Enum):
    """Loadsheet issued for a flight.

    The value is the name the backend expects in the generation request.
    """

    PRELIMINARY = "Preliminary"
    FINAL = "Final"

    @property
    def notification_key(self) -> str:
        """Telemetry key on which the backend publishes the generated sheet."""
        if self is LoadsheetType.PRELIMINARY:
            return "efb.prelimLoadsheet"
        return "efb.finalLoadsheet"


class GenerationPhase(Enum):
    """Phase of the generation state machine.

    NOT_STARTED -> GENERATING -> COMPLETED | FAILED. COMPLETED and FAILED
    stay until a forced regeneration or a reset for a new flight.
    """

    NOT_STARTED = "not_started"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class GenerationState:
    """Generation state of one loadsheet type.

    Attributes:
        phase: Current phase.
        last_error: Failure message, only set in the FAILED phase.

    Examples:
        >>> GenerationState.failed("HTTP 500").is_terminal
        True
    """

    phase: GenerationPhase
    last_error: str | None = None

    @classmethod
    def not_started(cls) -> "GenerationState":
        return cls(GenerationPhase.NOT_STARTED)

    @classmethod
    def generating(cls) -> "GenerationState":
        return cls(GenerationPhase.GENERATING)

    @classmethod
    def completed(cls) -> "GenerationState":
        return cls(GenerationPhase.COMPLETED)

    @classmethod
    def failed(cls, error: str) -> "GenerationState":
        return cls(GenerationPhase.FAILED, error)

    @property
    def is_completed(self) -> bool:
        return self.phase is GenerationPhase.COMPLETED

    @property
    def is_terminal(self) -> bool:
        return self.phase in (GenerationPhase.COMPLETED, GenerationPhase.FAILED)

    def __str__(self) -> str:
        if self.last_error:
            return f"{self.phase.value} ({self.last_error})"
        return self.phase.value

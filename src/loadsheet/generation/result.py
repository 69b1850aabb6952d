"""Structured outcome of coordinator operations."""

from dataclasses import dataclass
from enum import Enum

from loadsheet.core.errors import (
    ConfigurationError,
    LoadsheetError,
    ParseError,
    PermanentServerError,
    PreconditionError,
    TransientNetworkError,
)


class ErrorKind(Enum):
    """Failure classification of a generation attempt.

    Attributes:
        CONFIGURATION: Backend URL missing. Never retried.
        PRECONDITION: Flight plan or fuel target missing, or inputs rejected.
        TRANSIENT_NETWORK: Timeouts or connection failures until retries ran out.
        PERMANENT_SERVER: Non-2xx responses until retries ran out.
        PARSE: Malformed telemetry or payload.
        CANCELLED: Aborted by shutdown.
        RATE_LIMITED: Attempted again before the minimum interval elapsed.
        UNAVAILABLE: Backend failed the preflight health check.
    """

    CONFIGURATION = "configuration"
    PRECONDITION = "precondition"
    TRANSIENT_NETWORK = "transient_network"
    PERMANENT_SERVER = "permanent_server"
    PARSE = "parse"
    CANCELLED = "cancelled"
    RATE_LIMITED = "rate_limited"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class LoadsheetResult:
    """Outcome of a generation call.

    Attributes:
        success: Whether the backend accepted the generation.
        message: Human readable outcome.
        error: Failure classification, None on success.
        status_code: Last HTTP status received, if any.
        raw_body: Last response body received, if any.
    """

    success: bool
    message: str
    error: ErrorKind | None = None
    status_code: int | None = None
    raw_body: str | None = None

    @classmethod
    def ok(cls, message: str, status_code: int | None = None) -> "LoadsheetResult":
        return cls(True, message, status_code=status_code)

    @classmethod
    def failure(
        cls,
        kind: ErrorKind,
        message: str,
        status_code: int | None = None,
        raw_body: str | None = None,
    ) -> "LoadsheetResult":
        return cls(False, message, kind, status_code, raw_body)

    def raise_for_error(self) -> None:
        """Raise the exception matching a failed result. No-op on success.

        Raises:
            PermanentServerError: For server failures, carrying status and body.
            LoadsheetError: The subclass matching the error kind.
        """
        if self.success:
            return

        if self.error is ErrorKind.PERMANENT_SERVER:
            raise PermanentServerError(self.message, self.status_code or 0, self.raw_body or "")
        raise _EXCEPTIONS.get(self.error, LoadsheetError)(self.message)


_EXCEPTIONS: dict[ErrorKind | None, type[LoadsheetError]] = {
    ErrorKind.CONFIGURATION: ConfigurationError,
    ErrorKind.PRECONDITION: PreconditionError,
    ErrorKind.TRANSIENT_NETWORK: TransientNetworkError,
    ErrorKind.PARSE: ParseError,
}

"""Error taxonomy shared by the weight & balance and generation modules.

Typical usage example:
    from loadsheet.core.errors import ConfigurationError

    if not base_url:
        raise ConfigurationError("Backend URL is not configured")
"""


class LoadsheetError(Exception):
    """Base class for all loadsheet errors."""


class ConfigurationError(LoadsheetError):
    """Raised when configuration makes an operation impossible.

    Examples: missing backend URL, aircraft with zero passenger capacity.
    Never retried.
    """


class ComputationError(LoadsheetError):
    """Raised when a weight and balance figure cannot be computed."""


class PreconditionError(LoadsheetError):
    """Raised when upstream state required by an operation is missing.

    The caller must remediate upstream (load a flight plan, set a fuel target).
    """


class TransientNetworkError(LoadsheetError):
    """Raised on timeouts and connection failures. Safe to retry."""


class PermanentServerError(LoadsheetError):
    """Raised when the backend keeps answering with a non-2xx status.

    Attributes:
        status_code: Last HTTP status returned by the backend.
        body: Last response body returned by the backend.
    """

    def __init__(self, message: str, status_code: int, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ParseError(LoadsheetError):
    """Raised when telemetry or a notification payload is malformed."""


class NotFoundError(LoadsheetError, KeyError):
    """Raised by a telemetry provider when a key does not exist."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class WriteError(LoadsheetError):
    """Raised by a telemetry provider when a write is rejected."""

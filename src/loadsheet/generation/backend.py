"""HTTP client for the loadsheet backend.

Each request opens a fresh connection with urllib, run in a worker thread so
the event loop stays free while waiting on the network.

Typical usage example:
    from loadsheet.generation.backend import BackendClient

    backend = BackendClient("http://localhost:5000/efb")
    response = await backend.request("POST", "/loadsheet/generate?type=Final", body={})
    if response.ok:
        ...
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any
from urllib import request
from urllib.error import HTTPError, URLError

from loadsheet.core.errors import ConfigurationError, TransientNetworkError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class BackendResponse:
    """Response of a backend request.

    Attributes:
        status: HTTP status code.
        body: Response body decoded as UTF-8.
    """

    status: int
    body: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class BackendClient:
    """Asynchronous client for the loadsheet backend.

    Non-2xx answers are returned as responses, not raised, so the caller
    decides whether to retry. Timeouts and connection failures raise
    TransientNetworkError.

    Examples:
        >>> backend = BackendClient("http://localhost:5000/efb", timeout=10.0)
        >>> backend.url("/health")
        'http://localhost:5000/efb/health'
    """

    def __init__(self, base_url: str | None, timeout: float = DEFAULT_TIMEOUT) -> None:
        """Initialize the client.

        Args:
            base_url: Backend root URL. May be empty; requests then raise
                ConfigurationError.
            timeout: Default per-request timeout in seconds.
        """
        self.base_url = (base_url or "").rstrip("/")
        self.timeout = timeout

    def url(self, path: str) -> str:
        """Build an absolute URL for a backend path."""
        if not self.base_url:
            raise ConfigurationError("Loadsheet backend URL is not configured")
        return f"{self.base_url}/{path.lstrip('/')}"

    async def request(
        self,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> BackendResponse:
        """Send a request on a fresh connection.

        Args:
            method: HTTP method.
            path: Path relative to the base URL, query string included.
            body: JSON body, omitted when None.
            timeout: Request timeout in seconds (default: client timeout).

        Returns:
            The backend response, whatever its status.

        Raises:
            ConfigurationError: If the base URL is not configured.
            TransientNetworkError: On timeout or connection failure.
        """
        url = self.url(path)
        timeout = self.timeout if timeout is None else timeout

        logger.debug("%s %s (timeout %.1fs)", method, url, timeout)
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self._send, method, url, body, timeout), timeout
            )
        except asyncio.TimeoutError as e:
            raise TransientNetworkError(f"{method} {url} timed out after {timeout:.1f}s") from e

    @staticmethod
    def _send(
        method: str, url: str, body: dict[str, Any] | None, timeout: float
    ) -> BackendResponse:
        data = None
        headers = {"Accept": "application/json"}
        if body is not None:
            data = json.dumps(body).encode("utf-8")
            headers["Content-Type"] = "application/json"

        req = request.Request(url, data=data, headers=headers, method=method)
        try:
            with request.urlopen(req, timeout=timeout) as response:
                return BackendResponse(response.status, response.read().decode("utf-8", "replace"))
        except HTTPError as e:
            error_body = e.read().decode("utf-8", "replace") if e.fp is not None else ""
            return BackendResponse(e.code, error_body)
        except URLError as e:
            raise TransientNetworkError(f"{method} {url} failed: {e.reason}") from e
        except (TimeoutError, ConnectionError) as e:
            raise TransientNetworkError(f"{method} {url} failed: {e}") from e

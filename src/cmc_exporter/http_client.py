"""HTTP client with timeout support for fetching the source page."""

from __future__ import annotations

from typing import Optional

import httpx

from . import __version__
from .errors import FetchError
from .logging_config import get_logger

logger = get_logger("http_client")

DEFAULT_TIMEOUT_SECONDS = 5.0
DEFAULT_USER_AGENT = f"cmc-exporter/{__version__}"


class HTTPClient:
    """Thin httpx wrapper issuing a single timed GET per call.

    There is no retry: a failed request surfaces as ``FetchError`` and the
    next poll starts from scratch.
    """

    def __init__(
        self,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        *,
        follow_redirects: bool = True,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self.timeout_seconds = timeout_seconds
        self.timeout = httpx.Timeout(timeout_seconds)
        self.follow_redirects = follow_redirects
        self.headers = {"User-Agent": DEFAULT_USER_AGENT}
        self._transport = transport

    def get(self, url: str) -> httpx.Response:
        """Perform a GET request.

        Raises:
            FetchError: on timeouts, transport errors and non-2xx responses
        """
        with httpx.Client(
            timeout=self.timeout,
            follow_redirects=self.follow_redirects,
            transport=self._transport,
        ) as client:
            try:
                response = client.get(url, headers=self.headers)
                response.raise_for_status()
                return response

            except httpx.HTTPStatusError as exc:
                status_code = exc.response.status_code
                logger.debug("Request GET %s failed with status %s", url, status_code)
                raise FetchError(url, f"HTTP {status_code}", status_code=status_code) from exc

            except httpx.TimeoutException as exc:
                logger.debug("Request GET %s timed out after %.2fs", url, self.timeout_seconds)
                raise FetchError(url, f"timed out after {self.timeout_seconds}s") from exc

            except httpx.RequestError as exc:
                logger.debug("Request GET %s failed: %s", url, exc)
                raise FetchError(url, str(exc) or type(exc).__name__) from exc

    def get_text(self, url: str) -> str:
        """GET ``url`` and return the decoded body."""
        return self.get(url).text

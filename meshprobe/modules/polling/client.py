"""
HTTP polling client.

Backends behind the mesh take a while to become reachable after a deploy,
so a single GET is not meaningful on its own. Each request gets a short
timeout and the whole exchange is retried for a longer budget.
"""

import logging
from typing import Optional

import httpx

from meshprobe.errors import HTTPStatusFailure
from meshprobe.modules.retry import Retrier

DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_RETRY_TIMEOUT = 60.0


class HTTPPoller:
    """Retries GET requests until the server answers 200."""

    def __init__(
        self,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        retry_timeout: float = DEFAULT_RETRY_TIMEOUT,
        retrier: Optional[Retrier] = None,
        transport: Optional[httpx.BaseTransport] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize poller.

        Args:
            request_timeout: Timeout for a single request in seconds
            retry_timeout: Total time to keep retrying in seconds
            retrier: Retry engine to use (default: one-second cadence)
            transport: Optional httpx transport, e.g. httpx.MockTransport in tests
            logger: Logger for requests (default: the ``meshprobe.polling`` logger)
        """
        self.request_timeout = request_timeout
        self.retry_timeout = retry_timeout
        self.logger = logger or logging.getLogger("meshprobe.polling")
        self.retrier = retrier or Retrier(logger=self.logger)
        self.client = httpx.Client(timeout=request_timeout, transport=transport)

    def get_url(self, url: str) -> str:
        """
        GET ``url`` and return the response body.

        Only the status code decides success: a 200 whose body describes an
        error is still returned as-is.

        Raises:
            HTTPStatusFailure: The last response before the budget ran out was not 200
            httpx.HTTPError: The last attempt failed at the transport level
        """
        return self.retrier.retry_for(
            self.retry_timeout,
            lambda: self._get_once(url),
            retry_on=(HTTPStatusFailure, httpx.HTTPError),
        )

    def _get_once(self, url: str) -> str:
        self.logger.debug(f"GET {url}")
        response = self.client.get(url)
        body = response.text

        if response.status_code != httpx.codes.OK:
            raise HTTPStatusFailure(url, response.status_code, body)

        return body

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "HTTPPoller":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

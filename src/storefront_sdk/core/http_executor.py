"""HTTP executor for the Storefront SDK.

Sends one request, traces it and turns transport exceptions into SDK
errors. There is no retry loop: the gateway's single replay
after a credential refresh is the only repeat a request ever gets.
"""

from __future__ import annotations

from typing import Any, Protocol

import httpx

from ..telemetry import get_logger, trace_operation
from .errors import ErrorFactory


class HTTPExecutorProtocol(Protocol):
    """Protocol for HTTP executors."""

    async def execute(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Execute HTTP request."""
        ...


class AsyncHTTPExecutor:
    """Asynchronous single-shot HTTP executor."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        """Initialize async HTTP executor.

        Args:
            client: Async HTTP client.
        """
        self._client = client
        self._logger = get_logger()

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the underlying HTTP client."""
        return self._client

    async def execute(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Execute async HTTP request.

        Args:
            method: HTTP method.
            url: Request path or URL.
            **kwargs: Additional request arguments.

        Returns:
            HTTP response, whatever its status.

        Raises:
            NetworkError: On connection failure.
            TimeoutError: When the request timed out.
        """
        with trace_operation(
            "http_request",
            attributes={"http.method": method, "http.url": url},
        ) as span:
            try:
                response = await self._client.request(method, url, **kwargs)
            except httpx.HTTPError as e:
                self._logger.warning(
                    "Request failed",
                    method=method,
                    url=url,
                    error=str(e),
                )
                raise ErrorFactory.from_exception(e) from e

            span.set_attribute("http.status_code", response.status_code)
            return response

"""Authenticated request gateway.

Every storefront API call goes through ``RequestGateway.execute``. The
gateway attaches the bearer credential, refreshes it ahead of time when the
token says it has expired, and recovers from a 401 by joining the
single-flight refresh and replaying the request exactly once.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import tokens
from ..errors import TokenRefreshError
from ..models import RequestDescriptor
from ..telemetry import get_logger, trace_operation
from .errors import ErrorFactory

if TYPE_CHECKING:
    import httpx

    from ..credentials import CredentialStore
    from .http_executor import HTTPExecutorProtocol
    from .refresh import RefreshCoordinator

DEFAULT_HEADERS = {"Content-Type": "application/json"}


class RequestGateway:
    """Single entry point for authenticated API calls."""

    def __init__(
        self,
        executor: HTTPExecutorProtocol,
        store: CredentialStore,
        coordinator: RefreshCoordinator,
        *,
        expiry_leeway: int = 0,
    ) -> None:
        """Initialize request gateway.

        Args:
            executor: HTTP executor bound to the API base URL.
            store: Credential store supplying the bearer token.
            coordinator: Single-flight refresh coordinator.
            expiry_leeway: Seconds before expiry at which a token is
                refreshed proactively.
        """
        self._executor = executor
        self._store = store
        self._coordinator = coordinator
        self._expiry_leeway = expiry_leeway
        self._logger = get_logger()

    async def execute(self, descriptor: RequestDescriptor) -> Any:
        """Execute an API call with credential handling.

        Args:
            descriptor: The call to make.

        Returns:
            Parsed JSON body, the raw text for non-JSON bodies, or None for
            an empty body.

        Raises:
            ApiError: On a non-2xx final response (status and body attached).
            TokenRefreshError: If a 401 could not be recovered by refreshing.
            NetworkError: On transport failure.
        """
        with trace_operation(
            "api_request",
            attributes={"http.method": descriptor.method, "api.path": descriptor.path},
        ):
            await self._refresh_if_expired()

            sent_with = self._store.peek_access()
            response = await self._send(descriptor, sent_with)

            if response.status_code == 401 and self._store.peek_refresh() is not None:
                response = await self._recover_unauthorized(descriptor, sent_with)

            return self._handle_response(descriptor, response)

    async def get(self, path: str, *, params: dict[str, Any] | None = None) -> Any:
        return await self.execute(RequestDescriptor(path=path, params=params))

    async def post(self, path: str, json: Any = None, **kwargs: Any) -> Any:
        return await self.execute(
            RequestDescriptor(path=path, method="POST", json=json, **kwargs)
        )

    async def put(self, path: str, json: Any = None, **kwargs: Any) -> Any:
        return await self.execute(
            RequestDescriptor(path=path, method="PUT", json=json, **kwargs)
        )

    async def patch(self, path: str, json: Any = None, **kwargs: Any) -> Any:
        return await self.execute(
            RequestDescriptor(path=path, method="PATCH", json=json, **kwargs)
        )

    async def delete(self, path: str, **kwargs: Any) -> Any:
        return await self.execute(RequestDescriptor(path=path, method="DELETE", **kwargs))

    async def _refresh_if_expired(self) -> None:
        """Proactive refresh when the stored access token has expired.

        A failure here is logged only: the server's 401 stays the
        authoritative signal, so clock skew cannot block a request.
        """
        access = self._store.peek_access()
        if access is None or self._store.peek_refresh() is None:
            return
        if not tokens.is_expired(access, leeway=self._expiry_leeway):
            return

        self._logger.debug("Access token expired, refreshing before request")
        try:
            await self._coordinator.refresh()
        except TokenRefreshError as e:
            self._logger.warning(
                "Proactive refresh failed, sending request anyway",
                error=e.message,
            )

    async def _recover_unauthorized(
        self,
        descriptor: RequestDescriptor,
        sent_with: str | None,
    ) -> httpx.Response:
        """Refresh (or join a refresh) and replay the request once."""
        if self._store.peek_access() == sent_with:
            self._logger.info(
                "Unauthorized, refreshing credentials",
                method=descriptor.method,
                path=descriptor.path,
                refresh_in_flight=self._coordinator.is_refreshing,
            )
            # Raises TokenRefreshError, which is this call's final error
            await self._coordinator.refresh()
        else:
            self._logger.debug(
                "Credentials changed while request was in flight, replaying",
                path=descriptor.path,
            )

        # Read the store again: the replay uses whatever is current now
        return await self._send(descriptor, self._store.peek_access())

    async def _send(
        self,
        descriptor: RequestDescriptor,
        access_token: str | None,
    ) -> httpx.Response:
        headers = {**DEFAULT_HEADERS, **descriptor.headers}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"

        kwargs: dict[str, Any] = {"headers": headers}
        if descriptor.content is not None:
            kwargs["content"] = descriptor.content
        elif descriptor.json_body is not None:
            kwargs["json"] = descriptor.json_body
        if descriptor.params:
            kwargs["params"] = descriptor.params

        self._logger.debug(
            "Sending API request",
            method=descriptor.method,
            path=descriptor.path,
            authenticated=bool(access_token),
        )
        return await self._executor.execute(descriptor.method, descriptor.path, **kwargs)

    def _handle_response(
        self,
        descriptor: RequestDescriptor,
        response: httpx.Response,
    ) -> Any:
        if not response.is_success:
            error = ErrorFactory.from_http_response(response)
            self._logger.error(
                "API error",
                method=descriptor.method,
                path=descriptor.path,
                status_code=response.status_code,
                correlation_id=error.correlation_id,
            )
            raise error

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

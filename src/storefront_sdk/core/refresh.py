"""Single-flight credential refresh.

However many requests need fresh credentials at once, only one refresh
exchange runs. Every caller gets its own completion handle in the wait queue
and all handles settle together when that exchange does.
"""

from __future__ import annotations

import asyncio
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Protocol

from ..errors import TokenRefreshError
from ..models import CredentialPair, unwrap_envelope
from ..session import SignOutReason
from ..telemetry import get_logger, trace_operation
from .errors import ErrorFactory

if TYPE_CHECKING:
    from ..config import RefreshConfig
    from ..credentials import CredentialStore
    from ..session import SessionLifecycle
    from .http_executor import HTTPExecutorProtocol


class RefreshState(StrEnum):
    """Refresh coordinator states."""

    IDLE = "idle"
    REFRESHING = "refreshing"


class RefreshExchange(Protocol):
    """Trades a refresh token for a new credential pair."""

    async def exchange(self, refresh_token: str) -> CredentialPair:
        """Perform the exchange.

        Raises:
            StorefrontError: When the backend refuses or cannot be reached.
        """
        ...


class JSONRefreshExchange:
    """Refresh exchange against the storefront's JSON endpoint."""

    def __init__(self, executor: HTTPExecutorProtocol, config: RefreshConfig) -> None:
        """Initialize the exchange.

        Args:
            executor: HTTP executor bound to the API base URL.
            config: Endpoint and response field mapping.
        """
        self._executor = executor
        self._config = config

    async def exchange(self, refresh_token: str) -> CredentialPair:
        response = await self._executor.execute(
            "POST",
            self._config.endpoint,
            json={self._config.request_field: refresh_token},
            headers={"Content-Type": "application/json"},
        )
        if not response.is_success:
            raise ErrorFactory.from_http_response(response)

        try:
            body = response.json()
        except ValueError as e:
            raise TokenRefreshError("Refresh response is not valid JSON") from e

        access = self._field(body, self._config.access_token_field)
        if not access:
            raise TokenRefreshError(
                "Refresh response has no access token",
                details={"field": self._config.access_token_field},
            )
        # Keep the current refresh token if the backend does not rotate it
        refresh = self._field(body, self._config.refresh_token_field) or refresh_token
        return CredentialPair(access_token=access, refresh_token=refresh)

    @staticmethod
    def _field(body: Any, name: str) -> str | None:
        for candidate in (body, unwrap_envelope(body)):
            if isinstance(candidate, dict):
                value = candidate.get(name)
                if isinstance(value, str) and value:
                    return value
        return None


class RefreshCoordinator:
    """Runs at most one refresh exchange at a time and fans out its result.

    States:
    - IDLE: no exchange running, wait queue empty.
    - REFRESHING: one exchange task running; every ``refresh()`` call joins
      the wait queue instead of starting another.
    """

    def __init__(
        self,
        store: CredentialStore,
        exchange: RefreshExchange,
        session: SessionLifecycle | None = None,
    ) -> None:
        """Initialize refresh coordinator.

        Args:
            store: Credential store read before and written after the exchange.
            exchange: Backend exchange implementation.
            session: Notified when the session cannot be recovered.
        """
        self._store = store
        self._exchange = exchange
        self._session = session
        self._state = RefreshState.IDLE
        self._waiters: list[asyncio.Future[str]] = []
        self._task: asyncio.Task[None] | None = None
        self._exchanges_started = 0
        self._logger = get_logger()

    @property
    def state(self) -> RefreshState:
        """Get current coordinator state."""
        return self._state

    @property
    def is_refreshing(self) -> bool:
        return self._state is RefreshState.REFRESHING

    @property
    def exchanges_started(self) -> int:
        """Number of refresh exchanges started since construction."""
        return self._exchanges_started

    async def refresh(self) -> str:
        """Start or join a refresh and wait for its outcome.

        Returns:
            The access token stored by the refresh.

        Raises:
            TokenRefreshError: If the refresh failed; every concurrent caller
                receives the same error.
        """
        loop = asyncio.get_running_loop()
        waiter: asyncio.Future[str] = loop.create_future()
        self._waiters.append(waiter)

        # No await between the state check and the transition
        if self._state is RefreshState.IDLE:
            self._state = RefreshState.REFRESHING
            self._exchanges_started += 1
            self._task = loop.create_task(self._run(), name="storefront-token-refresh")
        else:
            self._logger.debug("Joining in-flight refresh", waiters=len(self._waiters))

        # Cancelling this await only abandons this caller's handle
        return await waiter

    async def aclose(self) -> None:
        """Cancel an in-flight exchange and reject whoever is still waiting."""
        task = self._task
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        if self._waiters:
            self._reject(ErrorFactory.refresh_error(message="Token refresh cancelled"))

    async def _run(self) -> None:
        refresh_token = self._store.peek_refresh()
        self._logger.info("Refreshing credentials", waiters=len(self._waiters))

        try:
            if refresh_token is None:
                raise TokenRefreshError("No refresh token available")
            with trace_operation("token_refresh"):
                pair = await self._exchange.exchange(refresh_token)
        except asyncio.CancelledError:
            self._reject(ErrorFactory.refresh_error(message="Token refresh cancelled"))
            raise
        except Exception as e:
            error = e if isinstance(e, TokenRefreshError) else ErrorFactory.refresh_error(e)
            self._fail(error)
            return

        self._succeed(pair)

    def _succeed(self, pair: CredentialPair) -> None:
        access = pair.access_token
        refresh = pair.refresh_token
        if access is None or refresh is None:
            self._fail(TokenRefreshError("Refresh exchange returned an incomplete pair"))
            return

        # Store first so no waiter can observe stale credentials
        try:
            self._store.replace(access, refresh)
        except Exception as e:
            self._fail(
                ErrorFactory.refresh_error(e, message="Storing refreshed credentials failed")
            )
            return
        waiters = self._settle()
        self._logger.info("Credentials refreshed", waiters=len(waiters))
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(access)

    def _fail(self, error: TokenRefreshError) -> None:
        try:
            self._store.clear()
        except Exception as e:
            self._logger.warning("Clearing credentials failed", error=str(e))
        waiters = self._settle()
        self._logger.warning(
            "Credential refresh failed",
            waiters=len(waiters),
            error=error.message,
            code=error.code,
        )
        for waiter in waiters:
            if not waiter.done():
                waiter.set_exception(error)

        if self._session is not None:
            try:
                self._session.force_sign_out(SignOutReason.REFRESH_FAILED, error=error)
            except Exception as e:
                self._logger.error("Sign-out after failed refresh failed", error=str(e))

    def _reject(self, error: TokenRefreshError) -> None:
        for waiter in self._settle():
            if not waiter.done():
                waiter.set_exception(error)

    def _settle(self) -> list[asyncio.Future[str]]:
        """Return to IDLE and hand back the drained wait queue."""
        waiters, self._waiters = self._waiters, []
        self._state = RefreshState.IDLE
        self._task = None
        return waiters

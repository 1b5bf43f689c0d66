"""Storefront SDK client.

Composition root: builds the storage, credential store, session lifecycle,
refresh coordinator and request gateway once and hands the same instances to
every service. Nothing in the SDK is a module-level singleton; an application
creates one ``StorefrontClient`` and passes it around.

Lifecycle::

    client = StorefrontClient(config)
    await client.init()       # load persisted credentials and identity
    ...
    await client.dispose()    # cancel in-flight refresh, close transport

or ``async with StorefrontClient(config) as client: ...``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Self

from .auth import AuthService
from .catalog import CatalogService
from .core.gateway import RequestGateway
from .core.http_executor import AsyncHTTPExecutor
from .core.refresh import JSONRefreshExchange, RefreshCoordinator
from .credentials import CredentialStore
from .http import create_async_http_client
from .orders import OrderService
from .session import SessionLifecycle
from .storage import create_storage
from .telemetry import configure_telemetry, get_logger

if TYPE_CHECKING:
    import httpx

    from .config import StorefrontConfig
    from .core.refresh import RefreshExchange
    from .models import RequestDescriptor
    from .storage import KeyValueStorage


class StorefrontClient:
    """Asynchronous storefront API client."""

    def __init__(
        self,
        config: StorefrontConfig,
        *,
        storage: KeyValueStorage | None = None,
        http_client: httpx.AsyncClient | None = None,
        refresh_exchange: RefreshExchange | None = None,
    ) -> None:
        """Initialize the client and wire its collaborators.

        Args:
            config: SDK configuration.
            storage: Persisted storage (defaults to the configured file or memory).
            http_client: Transport to use; the client closes it only if it
                created it.
            refresh_exchange: Replacement for the JSON refresh exchange.
        """
        self.config = config
        self._owns_http = http_client is None
        self._http = http_client or create_async_http_client(config)
        self._executor = AsyncHTTPExecutor(self._http)
        self._initialized = False
        self._logger = get_logger()

        self.storage = storage or create_storage(config.storage.path)
        self.credentials = CredentialStore(self.storage, config.storage)
        self.session = SessionLifecycle(self.credentials, self.storage, config.storage)
        self.coordinator = RefreshCoordinator(
            self.credentials,
            refresh_exchange or JSONRefreshExchange(self._executor, config.refresh),
            self.session,
        )
        self.gateway = RequestGateway(
            self._executor,
            self.credentials,
            self.coordinator,
            expiry_leeway=config.refresh.expiry_leeway,
        )
        self.auth = AuthService(self.gateway, self.credentials, self.session, self.coordinator)
        self.catalog = CatalogService(self.gateway)
        self.orders = OrderService(self.gateway)

    async def __aenter__(self) -> Self:
        await self.init()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.dispose()

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def init(self, *, setup_telemetry: bool = False) -> None:
        """Load persisted credentials and the cached identity.

        Args:
            setup_telemetry: Also configure structlog/OpenTelemetry from
                ``config.telemetry``.
        """
        if self._initialized:
            return
        if setup_telemetry:
            configure_telemetry(self.config.telemetry)
            self._logger = get_logger()

        self.credentials.load()
        self.session.load()
        self._initialized = True
        self._logger.info(
            "Storefront client initialized",
            base_url=self.config.base_url_str,
            authenticated=self.credentials.is_authenticated(),
        )

    async def dispose(self) -> None:
        """Cancel any in-flight refresh and close the owned transport."""
        await self.coordinator.aclose()
        if self._owns_http:
            await self._http.aclose()
        self._initialized = False

    async def execute(self, descriptor: RequestDescriptor) -> Any:
        """Shortcut for ``client.gateway.execute``."""
        return await self.gateway.execute(descriptor)

    def is_authenticated(self) -> bool:
        return self.credentials.is_authenticated()

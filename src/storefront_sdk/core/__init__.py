"""Core components for the Storefront SDK.

The authenticated request path: HTTP execution, error construction,
single-flight credential refresh and the request gateway.
"""

from __future__ import annotations

from .errors import ErrorFactory
from .http_executor import AsyncHTTPExecutor, HTTPExecutorProtocol
from .refresh import JSONRefreshExchange, RefreshCoordinator, RefreshExchange, RefreshState
from .gateway import RequestGateway

__all__ = [
    "ErrorFactory",
    "AsyncHTTPExecutor",
    "HTTPExecutorProtocol",
    "JSONRefreshExchange",
    "RefreshCoordinator",
    "RefreshExchange",
    "RefreshState",
    "RequestGateway",
]

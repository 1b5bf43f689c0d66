"""Storefront Python SDK."""

from .client import StorefrontClient
from .config import RefreshConfig, StorageConfig, StorefrontConfig, TelemetryConfig
from .core.gateway import RequestGateway
from .core.refresh import RefreshCoordinator, RefreshState
from .credentials import CredentialStore
from .errors import (
    ApiError,
    ForbiddenError,
    InvalidConfigError,
    NetworkError,
    NotFoundError,
    ServerError,
    StorefrontError,
    TimeoutError,
    TokenRefreshError,
    UnauthorizedError,
    is_auth_error,
    is_network_error,
)
from .models import AuthData, CredentialPair, Identity, RequestDescriptor
from .session import SessionEnded, SessionLifecycle, SignOutReason
from .storage import FileStorage, KeyValueStorage, MemoryStorage

__all__ = [
    "StorefrontClient",
    "StorefrontConfig",
    "RefreshConfig",
    "StorageConfig",
    "TelemetryConfig",
    "RequestGateway",
    "RefreshCoordinator",
    "RefreshState",
    "CredentialStore",
    "ApiError",
    "ForbiddenError",
    "InvalidConfigError",
    "NetworkError",
    "NotFoundError",
    "ServerError",
    "StorefrontError",
    "TimeoutError",
    "TokenRefreshError",
    "UnauthorizedError",
    "is_auth_error",
    "is_network_error",
    "AuthData",
    "CredentialPair",
    "Identity",
    "RequestDescriptor",
    "SessionEnded",
    "SessionLifecycle",
    "SignOutReason",
    "FileStorage",
    "KeyValueStorage",
    "MemoryStorage",
]

__version__ = "0.1.0"

"""
Shared test fixtures for Storefront SDK tests.

Provides the fake storefront API, configuration and a fully wired client
talking to the fake through ``httpx.MockTransport``.
"""

import pytest

from storefront_sdk.client import StorefrontClient
from storefront_sdk.config import StorefrontConfig
from storefront_sdk.storage import MemoryStorage

from tests.helpers import FakeStorefrontApi, create_test_config


@pytest.fixture
def base_config() -> StorefrontConfig:
    """Provide a basic SDK configuration for testing."""
    return create_test_config()


@pytest.fixture
def storage() -> MemoryStorage:
    """Provide empty in-memory storage."""
    return MemoryStorage()


@pytest.fixture
def api() -> FakeStorefrontApi:
    """Provide a fresh fake storefront backend."""
    return FakeStorefrontApi()


@pytest.fixture
def client(
    base_config: StorefrontConfig,
    storage: MemoryStorage,
    api: FakeStorefrontApi,
) -> StorefrontClient:
    """Provide a client wired to the fake backend."""
    return StorefrontClient(
        base_config,
        storage=storage,
        http_client=api.http_client(),
    )

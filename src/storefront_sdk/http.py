"""HTTP client utilities for the Storefront SDK."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from .config import StorefrontConfig


def create_async_http_client(config: StorefrontConfig) -> httpx.AsyncClient:
    """Create configured async HTTP client.

    Args:
        config: SDK configuration.

    Returns:
        Configured httpx.AsyncClient.
    """
    return httpx.AsyncClient(
        base_url=config.base_url_str,
        timeout=httpx.Timeout(
            connect=config.connect_timeout,
            read=config.timeout,
            write=config.timeout,
            pool=config.timeout,
        ),
        headers={
            "User-Agent": config.user_agent,
            "Accept": "application/json",
        },
        follow_redirects=False,
    )

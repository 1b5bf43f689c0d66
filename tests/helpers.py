"""Shared helpers for Storefront SDK tests.

Provides token minting and an in-process fake of the storefront API that
plugs into ``httpx.MockTransport``.
"""

from __future__ import annotations

import asyncio
import json
import time
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
import jwt

from storefront_sdk.config import StorefrontConfig, TelemetryConfig
from storefront_sdk.models import CredentialPair

BASE_URL = "https://api.storefront.test"
SIGNING_KEY = "storefront-test-signing-key-0123456789abcdef"

# Paths the fake API serves without a bearer token
PUBLIC_PATHS = ("/products", "/auth/login", "/auth/register", "/auth/forgot-password")


def make_token(payload: dict[str, Any]) -> str:
    """Mint an HS256 JWT; the SDK never checks the signature."""
    return jwt.encode(payload, SIGNING_KEY, algorithm="HS256")


def fresh_token(sub: str = "42", *, lifetime: int = 3600, **claims: Any) -> str:
    return make_token({"sub": sub, "exp": int(time.time()) + lifetime, **claims})


def expired_token(sub: str = "42", **claims: Any) -> str:
    return make_token({"sub": sub, "exp": int(time.time()) - 60, **claims})


def create_test_config(**overrides: Any) -> StorefrontConfig:
    """Create a test configuration with telemetry disabled."""
    return StorefrontConfig(
        base_url=BASE_URL,
        telemetry=TelemetryConfig(enabled=False),
        **overrides,
    )


Handler = Callable[[httpx.Request], httpx.Response | Awaitable[httpx.Response]]


class FakeStorefrontApi:
    """Minimal storefront backend.

    Tokens in ``valid_access`` authorize protected paths; tokens in
    ``valid_refresh`` can be exchanged at ``/auth/refresh-token``, which
    mints a single new token used as both credentials.
    """

    def __init__(self) -> None:
        self.valid_access: set[str] = set()
        self.valid_refresh: set[str] = set()
        self.requests: list[httpx.Request] = []
        self.refresh_calls = 0
        self.unauthorized_responses = 0
        self.refresh_status = 200
        self.issued: list[str] = []
        self._always_unauthorized: set[str] = set()
        self._routes: dict[tuple[str, str], Handler] = {}
        self._hold_refresh_until = 0

    def issue_pair(self) -> CredentialPair:
        """Create a valid access/refresh pair known to the backend."""
        access = fresh_token(jti=f"access-{len(self.issued)}")
        refresh = fresh_token(jti=f"refresh-{len(self.issued)}", lifetime=86400)
        self.valid_access.add(access)
        self.valid_refresh.add(refresh)
        self.issued.append(access)
        return CredentialPair(access_token=access, refresh_token=refresh)

    def route(self, method: str, path: str, handler: Handler) -> None:
        self._routes[(method.upper(), path)] = handler

    def respond(self, method: str, path: str, status: int = 200, **kwargs: Any) -> None:
        """Serve a fixed response for ``method path``."""
        self.route(method, path, lambda request: httpx.Response(status, **kwargs))

    def always_unauthorized(self, path: str) -> None:
        self._always_unauthorized.add(path)

    def hold_refresh_until_unauthorized(self, count: int) -> None:
        """Delay refresh responses until ``count`` 401s have been sent."""
        self._hold_refresh_until = count

    def requests_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=BASE_URL, transport=self.transport())

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == "/auth/refresh-token":
            return await self._refresh(request)

        if path in self._always_unauthorized or not self._authorized(request):
            self.unauthorized_responses += 1
            return httpx.Response(401, text="Unauthorized")

        handler = self._routes.get((request.method, path))
        if handler is None:
            return httpx.Response(200, json={"ok": True, "path": path})
        response = handler(request)
        if not isinstance(response, httpx.Response):
            response = await response
        return response

    def _authorized(self, request: httpx.Request) -> bool:
        if request.url.path.startswith(PUBLIC_PATHS):
            return True
        header = request.headers.get("Authorization", "")
        return header.startswith("Bearer ") and header[7:] in self.valid_access

    async def _refresh(self, request: httpx.Request) -> httpx.Response:
        self.refresh_calls += 1
        for _ in range(1000):
            if self.unauthorized_responses >= self._hold_refresh_until:
                break
            await asyncio.sleep(0)

        if self.refresh_status != 200:
            return httpx.Response(self.refresh_status, text="refresh rejected")

        presented = json.loads(request.content).get("refreshToken")
        if presented not in self.valid_refresh:
            return httpx.Response(401, text="invalid refresh token")

        token = fresh_token(jti=f"refreshed-{self.refresh_calls}")
        self.valid_access.add(token)
        self.valid_refresh.add(token)
        self.issued.append(token)
        return httpx.Response(200, json={"refreshToken": token})

"""Product catalog calls."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .core.gateway import RequestGateway


class CatalogService:
    """Product browsing and admin CRUD on ``/products``.

    Products are passed through as dicts; their shape belongs to the API.
    """

    def __init__(self, gateway: RequestGateway) -> None:
        self._gateway = gateway

    async def list_products(self, **filters: Any) -> list[dict[str, Any]]:
        products = await self._gateway.get("/products", params=filters or None)
        return products or []

    async def get_product(self, product_id: str) -> dict[str, Any]:
        return await self._gateway.get(f"/products/{product_id}")

    async def create_product(self, product: dict[str, Any]) -> dict[str, Any]:
        return await self._gateway.post("/products", json=product)

    async def update_product(self, product_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        return await self._gateway.put(f"/products/{product_id}", json=changes)

    async def delete_product(self, product_id: str) -> None:
        await self._gateway.delete(f"/products/{product_id}")

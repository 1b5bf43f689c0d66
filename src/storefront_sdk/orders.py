"""Order placement and history calls."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from .models import unwrap_envelope

if TYPE_CHECKING:
    from .core.gateway import RequestGateway


class OrderFilters(BaseModel):
    """Order history filters; unset fields are not sent."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    status: str | None = None
    date_from: str | None = Field(default=None, alias="dateFrom")
    date_to: str | None = Field(default=None, alias="dateTo")
    search: str | None = None

    def to_query_params(self) -> dict[str, str]:
        """Convert to URL query parameters."""
        return self.model_dump(by_alias=True, exclude_none=True)


class OrderService:
    """Checkout and order history on ``/orders``."""

    def __init__(self, gateway: RequestGateway) -> None:
        self._gateway = gateway

    async def create_order(self, order: dict[str, Any]) -> dict[str, Any]:
        body = await self._gateway.post("/orders", json=order)
        return unwrap_envelope(body)

    async def order_history(
        self,
        page: int = 1,
        limit: int = 10,
        filters: OrderFilters | None = None,
    ) -> dict[str, Any]:
        """Fetch one page of the signed-in user's orders."""
        if page < 1 or limit < 1:
            msg = "page and limit must be positive"
            raise ValueError(msg)

        params: dict[str, Any] = {"page": page, "limit": limit}
        if filters is not None:
            params.update(filters.to_query_params())
        body = await self._gateway.get("/orders/history", params=params)
        return unwrap_envelope(body)

    async def get_order(self, order_id: str) -> dict[str, Any]:
        body = await self._gateway.get(f"/orders/{order_id}")
        return unwrap_envelope(body)

    async def cancel_order(self, order_id: str) -> dict[str, Any]:
        body = await self._gateway.put(f"/orders/{order_id}/cancel")
        return unwrap_envelope(body)


"""No-op commerce client used when no store credentials are configured."""
from __future__ import annotations

from typing import List, Optional

from storefront_bot.clients.commerce.base import (
    INVALID_ORDER_NUMBER,
    BaseCommerceClient,
    OrderLookup,
    Product,
)


class NoOpCommerceClient(BaseCommerceClient):
    """Knows no orders and no products."""

    @property
    def provider(self) -> str:
        return "noop"

    async def track_order(self, order_number: str, email: str) -> OrderLookup:
        return OrderLookup.failed(INVALID_ORDER_NUMBER)

    async def get_product(self, query: str) -> Optional[Product]:
        return None

    async def get_size_chart(self, product: Product) -> Optional[str]:
        return None

    async def list_active_products(self) -> List[str]:
        return []

"""Shopify Admin GraphQL client."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from storefront_bot.clients.commerce.base import (
    EMAIL_MISMATCH,
    INVALID_ORDER_NUMBER,
    BaseCommerceClient,
    Order,
    OrderLookup,
    Product,
)
from storefront_bot.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

_ORDER_QUERY = """
query OrderByName($query: String!) {
  orders(first: 1, query: $query) {
    edges { node {
      name
      email
      displayFulfillmentStatus
      createdAt
      customer { firstName lastName }
      shippingAddress { name address1 address2 city province zip country phone }
      billingAddress { name address1 address2 city province zip country phone }
      lineItems(first: 20) { edges { node { title quantity variantTitle } } }
      fulfillments(first: 5) {
        status displayStatus createdAt inTransitAt deliveredAt estimatedDeliveryAt
        trackingInfo { number url company }
      }
    } }
  }
}
"""

_PRODUCT_FIELDS = """
      title handle description status
      images(first: 5) { edges { node { url } } }
      variants(first: 50) { edges { node { title inventoryQuantity } } }
      sizeChart: metafield(namespace: "custom", key: "size_chart") { value }
"""

_PRODUCT_QUERY = """
query ProductSearch($query: String!) {
  products(first: 1, query: $query) { edges { node {%s} } }
}
""" % _PRODUCT_FIELDS

_ACTIVE_PRODUCTS_QUERY = """
query ActiveProducts {
  products(first: 250, query: "status:active") { edges { node { title } } }
}
"""


def _nodes(connection: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [edge["node"] for edge in (connection or {}).get("edges", [])]


class ShopifyCommerceClient(BaseCommerceClient):
    """Fail fast: no retries, transport and HTTP errors raise ExternalServiceError."""

    def __init__(
        self,
        store_domain: str,
        access_token: str,
        *,
        api_version: str = "2024-10",
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._url = f"https://{store_domain}/admin/api/{api_version}/graphql.json"
        self._client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={
                "X-Shopify-Access-Token": access_token,
                "Content-Type": "application/json",
            },
        )
        # Size charts are keyed by handle; fetched together with the product
        self._size_charts: Dict[str, str] = {}

    @property
    def provider(self) -> str:
        return "shopify"

    async def _query(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            resp = await self._client.post(self._url, json={"query": query, "variables": variables or {}})
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPError as exc:
            raise ExternalServiceError("Shopify request failed", cause=exc) from exc
        except ValueError as exc:
            raise ExternalServiceError("Shopify returned invalid JSON", cause=exc) from exc
        if payload.get("errors"):
            raise ExternalServiceError(
                "Shopify query failed", details={"errors": payload["errors"]}
            )
        return payload.get("data") or {}

    async def track_order(self, order_number: str, email: str) -> OrderLookup:
        name = order_number.strip().lstrip("#")
        data = await self._query(_ORDER_QUERY, {"query": f"name:#{name}"})
        nodes = _nodes(data.get("orders"))
        if not nodes:
            logger.info("Shopify: order #%s not found", name)
            return OrderLookup.failed(INVALID_ORDER_NUMBER)

        node = nodes[0]
        if (node.get("email") or "").strip().lower() != email.strip().lower():
            logger.info("Shopify: email mismatch for order #%s", name)
            return OrderLookup.failed(EMAIL_MISMATCH)

        node["lineItems"] = _nodes(node.get("lineItems"))
        return OrderLookup(success=True, order=Order.from_dict(node))

    async def get_product(self, query: str) -> Optional[Product]:
        query = query.strip()
        if not query:
            return None
        searches = [f"title:*{query}*"]
        if " " not in query:
            searches.insert(0, f"handle:{query.lower()}")
        nodes: List[Dict[str, Any]] = []
        for search in searches:
            data = await self._query(_PRODUCT_QUERY, {"query": search})
            nodes = _nodes(data.get("products"))
            if nodes:
                break
        if not nodes:
            return None
        node = nodes[0]
        node["images"] = _nodes(node.get("images"))
        node["variants"] = _nodes(node.get("variants"))
        product = Product.from_dict(node)
        # "" records a product without a size chart
        self._size_charts[product.handle] = (node.get("sizeChart") or {}).get("value") or ""
        return product

    async def get_size_chart(self, product: Product) -> Optional[str]:
        if product.handle not in self._size_charts:
            await self.get_product(product.handle)
            self._size_charts.setdefault(product.handle, "")
        return self._size_charts[product.handle] or None

    async def list_active_products(self) -> List[str]:
        data = await self._query(_ACTIVE_PRODUCTS_QUERY)
        return [node["title"] for node in _nodes(data.get("products")) if node.get("title")]

    async def aclose(self) -> None:
        await self._client.aclose()

"""
Commerce platform clients: order lookup, products, size charts.
"""
from storefront_bot.clients.commerce.base import (
    EMAIL_MISMATCH,
    INVALID_ORDER_NUMBER,
    Address,
    BaseCommerceClient,
    Fulfillment,
    Order,
    OrderLookup,
    Product,
    ProductVariant,
    TrackingInfo,
)

__all__ = [
    "BaseCommerceClient",
    "OrderLookup",
    "Order",
    "Fulfillment",
    "TrackingInfo",
    "Address",
    "Product",
    "ProductVariant",
    "INVALID_ORDER_NUMBER",
    "EMAIL_MISMATCH",
]

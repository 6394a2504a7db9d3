from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


INVALID_ORDER_NUMBER = "InvalidOrderNumber"
EMAIL_MISMATCH = "EmailMismatch"


def _first(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """First present key; the storefront JSON mixes camelCase and snake_case."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


@dataclass
class Address:
    name: str = ""
    address1: str = ""
    address2: str = ""
    city: str = ""
    province: str = ""
    zip: str = ""
    country: str = ""
    phone: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["Address"]:
        if not isinstance(data, dict):
            return None
        return cls(**{k: str(data.get(k) or "") for k in cls.__dataclass_fields__})

    def one_line(self) -> str:
        parts = [self.address1, self.address2, self.city, self.province, self.zip, self.country]
        return ", ".join(p for p in parts if p)


@dataclass
class TrackingInfo:
    number: str = ""
    url: str = ""
    company: str = ""


@dataclass
class Fulfillment:
    status: str = ""
    display_status: str = ""
    created_at: str = ""
    in_transit_at: str = ""
    delivered_at: str = ""
    estimated_delivery_at: str = ""
    tracking_info: List[TrackingInfo] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Fulfillment":
        tracking = _first(data, "trackingInfo", "tracking_info", default=[]) or []
        if isinstance(tracking, dict):
            tracking = [tracking]
        return cls(
            status=str(_first(data, "status", default="")),
            display_status=str(_first(data, "displayStatus", "display_status", default="")),
            created_at=str(_first(data, "createdAt", "created_at", default="")),
            in_transit_at=str(_first(data, "inTransitAt", "in_transit_at", default="")),
            delivered_at=str(_first(data, "deliveredAt", "delivered_at", default="")),
            estimated_delivery_at=str(_first(data, "estimatedDeliveryAt", "estimated_delivery_at", default="")),
            tracking_info=[
                TrackingInfo(
                    number=str(t.get("number") or ""),
                    url=str(t.get("url") or ""),
                    company=str(t.get("company") or ""),
                )
                for t in tracking
                if isinstance(t, dict)
            ],
        )


@dataclass
class Order:
    name: str
    email: str = ""
    status: str = ""
    created_at: str = ""
    shipping_address: Optional[Address] = None
    billing_address: Optional[Address] = None
    customer: Dict[str, Any] = field(default_factory=dict)
    line_items: List[Dict[str, Any]] = field(default_factory=list)
    fulfillments: List[Fulfillment] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Order":
        return cls(
            name=str(_first(data, "name", "order_number", default="")),
            email=str(_first(data, "email", "contact_email", default="")),
            status=str(_first(data, "status", "displayFulfillmentStatus", default="")),
            created_at=str(_first(data, "createdAt", "created_at", default="")),
            shipping_address=Address.from_dict(_first(data, "shippingAddress", "shipping_address")),
            billing_address=Address.from_dict(_first(data, "billingAddress", "billing_address")),
            customer=dict(_first(data, "customer", default={}) or {}),
            line_items=list(_first(data, "lineItems", "line_items", default=[]) or []),
            fulfillments=[
                Fulfillment.from_dict(f)
                for f in _first(data, "fulfillments", default=[]) or []
                if isinstance(f, dict)
            ],
        )

    @property
    def first_fulfillment(self) -> Optional[Fulfillment]:
        return self.fulfillments[0] if self.fulfillments else None


@dataclass
class ProductVariant:
    title: str = ""
    inventory_quantity: int = 0

    @property
    def in_stock(self) -> bool:
        return self.inventory_quantity > 0


@dataclass
class Product:
    title: str
    handle: str = ""
    description: str = ""
    status: str = ""
    images: List[str] = field(default_factory=list)
    variants: List[ProductVariant] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        images = []
        for img in data.get("images") or []:
            images.append(img.get("url", "") if isinstance(img, dict) else str(img))
        return cls(
            title=str(data.get("title") or ""),
            handle=str(data.get("handle") or ""),
            description=str(data.get("description") or ""),
            status=str(data.get("status") or ""),
            images=[i for i in images if i],
            variants=[
                ProductVariant(
                    title=str(v.get("title") or ""),
                    inventory_quantity=int(_first(v, "inventoryQuantity", "inventory_quantity", default=0)),
                )
                for v in data.get("variants") or []
                if isinstance(v, dict)
            ],
        )

    def to_prompt_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "handle": self.handle,
            "status": self.status,
            "variants": [asdict(v) for v in self.variants],
        }


@dataclass
class OrderLookup:
    """Result of fetching commerce data. Domain failures live in ``error``, not exceptions."""

    success: bool
    order: Optional[Order] = None
    product: Optional[Product] = None
    error: Optional[str] = None

    @classmethod
    def failed(cls, error: str) -> "OrderLookup":
        return cls(success=False, error=error)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OrderLookup":
        """Accept the storefront JSON shape; ``order`` may be an object or a one-element list."""
        if not isinstance(data, dict):
            raise ValueError("commerce data must be an object")
        raw_order = data.get("order")
        if isinstance(raw_order, list):
            raw_order = raw_order[0] if raw_order else None
        raw_product = data.get("product")
        return cls(
            success=bool(data.get("success", raw_order is not None or raw_product is not None)),
            order=Order.from_dict(raw_order) if isinstance(raw_order, dict) else None,
            product=Product.from_dict(raw_product) if isinstance(raw_product, dict) else None,
            error=data.get("error") or None,
        )


class BaseCommerceClient(ABC):
    """Read-only view of the store: orders, products, size charts."""

    @property
    @abstractmethod
    def provider(self) -> str:
        ...

    @abstractmethod
    async def track_order(self, order_number: str, email: str) -> OrderLookup:
        """Look up an order and check the email matches it.

        Unknown order → ``error="InvalidOrderNumber"``; email differs →
        ``error="EmailMismatch"``. Transport failures raise ExternalServiceError.
        """
        ...

    @abstractmethod
    async def get_product(self, query: str) -> Optional[Product]:
        """Find a product by handle or title."""
        ...

    @abstractmethod
    async def get_size_chart(self, product: Product) -> Optional[str]:
        ...

    @abstractmethod
    async def list_active_products(self) -> List[str]:
        ...

    async def aclose(self) -> None:
        return None

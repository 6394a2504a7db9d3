"""Support-ticket store: the chat path records verified order details on the open ticket."""
from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class Ticket:
    id: str
    order_number: str = ""
    email: str = ""
    customer_name: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Ticket":
        """Accepts the widget's ``currentTicket`` payload (camelCase or snake_case)."""
        return cls(
            id=str(data.get("id") or ""),
            order_number=str(data.get("orderNumber") or data.get("order_number") or ""),
            email=str(data.get("email") or ""),
            customer_name=str(data.get("customerName") or data.get("customer_name") or ""),
        )

    @property
    def has_order_info(self) -> bool:
        return bool(self.order_number and self.email)


class BaseTicketStore(ABC):
    @abstractmethod
    async def get(self, ticket_id: str) -> Optional[Ticket]:
        ...

    @abstractmethod
    async def update_order_info(
        self,
        ticket_id: str,
        *,
        order_number: str,
        email: str,
        customer_name: str = "",
    ) -> Ticket:
        ...


class InMemoryTicketStore(BaseTicketStore):
    """Process-local store; tickets are created on first update."""

    def __init__(self) -> None:
        self._tickets: Dict[str, Ticket] = {}
        self._lock = asyncio.Lock()

    async def get(self, ticket_id: str) -> Optional[Ticket]:
        return self._tickets.get(ticket_id)

    async def update_order_info(
        self,
        ticket_id: str,
        *,
        order_number: str,
        email: str,
        customer_name: str = "",
    ) -> Ticket:
        async with self._lock:
            ticket = self._tickets.get(ticket_id) or Ticket(id=ticket_id)
            ticket.order_number = order_number
            ticket.email = email
            if customer_name:
                ticket.customer_name = customer_name
            self._tickets[ticket_id] = ticket
        logger.info("Ticket %s linked to order #%s", ticket_id, order_number)
        return ticket

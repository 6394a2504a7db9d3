"""
Service layer: address validation and the ticket store.
"""
from storefront_bot.services.address_validator import AddressValidator
from storefront_bot.services.ticket_service import BaseTicketStore, InMemoryTicketStore, Ticket

__all__ = [
    "AddressValidator",
    "BaseTicketStore",
    "InMemoryTicketStore",
    "Ticket",
]

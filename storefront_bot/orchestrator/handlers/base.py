"""Abstract base handler for all intent handlers."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, List, Optional, Tuple

from storefront_bot.orchestrator.replies import invalid_credentials, reply
from storefront_bot.orchestrator.types import (
    ClassifiedMessage,
    ConversationTurn,
    OrchestratorResult,
)

if TYPE_CHECKING:
    from storefront_bot.clients.commerce.base import BaseCommerceClient, OrderLookup


class BaseHandler(ABC):
    """Every intent handler implements ``handle()`` and returns a result."""

    @abstractmethod
    async def handle(
        self,
        classification: ClassifiedMessage,
        message: str,
        *,
        conversation_history: Optional[List[ConversationTurn]] = None,
    ) -> OrchestratorResult:
        ...

    @staticmethod
    def _result(
        classification: ClassifiedMessage,
        message: str,
        answer: str,
        *,
        used_llm: bool = False,
        **metadata: Any,
    ) -> OrchestratorResult:
        return OrchestratorResult(
            query=message,
            intent=classification.intent,
            answer=answer,
            classification=classification,
            used_llm=used_llm,
            metadata=metadata,
        )


class OrderHandler(BaseHandler):
    """Base for intents that act on a specific order (needs order number + email)."""

    def __init__(self, commerce: "BaseCommerceClient") -> None:
        self._commerce = commerce

    async def _lookup_order(
        self,
        classification: ClassifiedMessage,
        message: str,
    ) -> Tuple[Optional["OrderLookup"], Optional[OrchestratorResult]]:
        """Return (lookup, None) on success, or (None, canned reply) when the customer must act."""
        params = classification.parameters
        language = classification.language
        if not params.has_order_identity():
            return None, self._result(
                classification, message, reply("need_order_identity", language),
                missing="order_identity",
            )
        lookup = await self._commerce.track_order(params.order_number, params.email)
        if not lookup.success or lookup.order is None:
            return None, self._result(
                classification, message,
                invalid_credentials(language, lookup.error or ""),
                lookup_error=lookup.error,
            )
        return lookup, None

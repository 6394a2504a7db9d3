"""Handlers for intents about an existing order."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional

from storefront_bot.orchestrator.answer_generator import AnswerGenerator
from storefront_bot.orchestrator.handlers.base import OrderHandler
from storefront_bot.orchestrator.replies import reply
from storefront_bot.orchestrator.types import ClassifiedMessage, ConversationTurn, OrchestratorResult

if TYPE_CHECKING:
    from storefront_bot.clients.commerce.base import BaseCommerceClient
    from storefront_bot.orchestrator.handlers.base import BaseHandler

logger = logging.getLogger(__name__)


class OrderAnswerHandler(OrderHandler):
    """order_tracking, delivery_issue, return_status and other-order: fetch the order, then answer."""

    def __init__(self, commerce: "BaseCommerceClient", generator: AnswerGenerator) -> None:
        super().__init__(commerce)
        self._generator = generator

    async def handle(
        self,
        classification: ClassifiedMessage,
        message: str,
        *,
        conversation_history: Optional[List[ConversationTurn]] = None,
    ) -> OrchestratorResult:
        lookup, early = await self._lookup_order(classification, message)
        if early is not None:
            return early
        answer = await self._generator.generate(
            classification.intent,
            classification.parameters,
            lookup,
            message,
            conversation_history,
            classification.language,
        )
        return self._result(classification, message, answer, used_llm=True)


class InvoiceRequestHandler(OrderHandler):
    async def handle(
        self,
        classification: ClassifiedMessage,
        message: str,
        *,
        conversation_history: Optional[List[ConversationTurn]] = None,
    ) -> OrchestratorResult:
        lookup, early = await self._lookup_order(classification, message)
        if early is not None:
            return early
        order = lookup.order
        logger.info("Invoice requested for order %s", order.name)
        answer = reply(
            "invoice_sent",
            classification.language,
            order_name=order.name,
            email=classification.parameters.email,
        )
        return self._result(classification, message, answer, invoice_order=order.name)


class UpdateOrderHandler(OrderHandler):
    """Routes address changes to the change-delivery flow and product changes to the generator."""

    def __init__(
        self,
        commerce: "BaseCommerceClient",
        generator: AnswerGenerator,
        change_delivery: "BaseHandler",
    ) -> None:
        super().__init__(commerce)
        self._generator = generator
        self._change_delivery = change_delivery

    async def handle(
        self,
        classification: ClassifiedMessage,
        message: str,
        *,
        conversation_history: Optional[List[ConversationTurn]] = None,
    ) -> OrchestratorResult:
        update_type = classification.parameters.update_type
        if update_type == "shipping_address":
            return await self._change_delivery.handle(
                classification, message, conversation_history=conversation_history
            )

        lookup, early = await self._lookup_order(classification, message)
        if early is not None:
            return early
        if update_type != "product":
            return self._result(classification, message, reply("ask_update_type", classification.language))

        answer = await self._generator.generate(
            classification.intent,
            classification.parameters,
            lookup,
            message,
            conversation_history,
            classification.language,
        )
        return self._result(classification, message, answer, used_llm=True)

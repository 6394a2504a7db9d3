"""
Orchestrator: classify → resolve against context → dispatch to the intent handler.

All heavy components are injected; the orchestrator keeps no per-conversation
state (the caller carries ConversationState between turns).
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Dict, List, Optional

from storefront_bot.clients.commerce.noop import NoOpCommerceClient
from storefront_bot.core.exceptions import ProjectError, RequestTimeoutError
from storefront_bot.orchestrator.answer_generator import AnswerGenerator
from storefront_bot.orchestrator.classifiers.context_resolver import ContextResolver
from storefront_bot.orchestrator.classifiers.llm_classifier import LLMClassifier
from storefront_bot.orchestrator.handlers.answer_handler import AnswerHandler
from storefront_bot.orchestrator.handlers.base import BaseHandler
from storefront_bot.orchestrator.handlers.delivery_handler import ChangeDeliveryHandler
from storefront_bot.orchestrator.handlers.order_handlers import (
    InvoiceRequestHandler,
    OrderAnswerHandler,
    UpdateOrderHandler,
)
from storefront_bot.orchestrator.handlers.product_handlers import (
    ProductInformationHandler,
    ProductSizingHandler,
    RestockHandler,
)
from storefront_bot.orchestrator.handlers.store_handlers import PromoCodeHandler, ReturnsExchangeHandler
from storefront_bot.orchestrator.replies import invalid_credentials, reply
from storefront_bot.orchestrator.types import (
    ClassifiedMessage,
    ConversationState,
    ConversationTurn,
    Intent,
    OrchestratorConfig,
    OrchestratorMetrics,
    OrchestratorResult,
)
from storefront_bot.services.address_validator import AddressValidator
from storefront_bot.services.ticket_service import BaseTicketStore, InMemoryTicketStore, Ticket

if TYPE_CHECKING:
    from storefront_bot.clients.commerce.base import BaseCommerceClient
    from storefront_bot.clients.llm.base import BaseLLMClient

logger = logging.getLogger(__name__)


class Orchestrator:
    """Central entry point for the chat and classify routes."""

    def __init__(
        self,
        llm: "BaseLLMClient",
        config: OrchestratorConfig,
        *,
        commerce: Optional["BaseCommerceClient"] = None,
        address_validator: Optional[AddressValidator] = None,
        ticket_store: Optional[BaseTicketStore] = None,
        active_products: Optional[List[str]] = None,
    ) -> None:
        self._llm = llm
        self._config = config
        self._commerce = commerce or NoOpCommerceClient()
        self._tickets = ticket_store or InMemoryTicketStore()
        validator = address_validator or AddressValidator(None)

        self._classifier = LLMClassifier(llm, config, active_products=active_products)
        self._resolver = ContextResolver(returns_portal_url=config.returns_portal_url)
        self._generator = AnswerGenerator(llm, config)

        order_answer = OrderAnswerHandler(self._commerce, self._generator)
        change_delivery = ChangeDeliveryHandler(self._commerce, validator, llm, config)
        self._default_handler: BaseHandler = AnswerHandler(self._generator)
        self._handlers: Dict[Intent, BaseHandler] = {
            Intent.ORDER_TRACKING: order_answer,
            Intent.DELIVERY_ISSUE: order_answer,
            Intent.RETURN_STATUS: order_answer,
            Intent.OTHER_ORDER: order_answer,
            Intent.INVOICE_REQUEST: InvoiceRequestHandler(self._commerce),
            Intent.CHANGE_DELIVERY: change_delivery,
            Intent.UPDATE_ORDER: UpdateOrderHandler(self._commerce, self._generator, change_delivery),
            Intent.PRODUCT_SIZING: ProductSizingHandler(self._commerce, self._generator),
            Intent.PRODUCT_INFORMATION: ProductInformationHandler(self._commerce, self._generator),
            Intent.RESTOCK: RestockHandler(self._commerce),
            Intent.PROMO_CODE: PromoCodeHandler(),
            Intent.RETURNS_EXCHANGE: ReturnsExchangeHandler(config.returns_portal_url),
        }

    @property
    def answer_generator(self) -> AnswerGenerator:
        return self._generator

    @property
    def config(self) -> OrchestratorConfig:
        return self._config

    async def refresh_active_products(self) -> List[str]:
        """Reload the catalogue titles offered to the classifier. Keeps the old list on failure."""
        try:
            titles = await self._commerce.list_active_products()
        except ProjectError as exc:
            logger.warning("Orchestrator: could not load active products: %s", exc)
            return self._classifier.active_products
        self._classifier.active_products = titles
        logger.info("Orchestrator: %d active products loaded", len(titles))
        return titles

    # ── Classification ──────────────────────────────────────────────────────

    async def classify_message(
        self,
        message: str,
        context: Optional[List[ConversationTurn]] = None,
        state: Optional[ConversationState] = None,
    ) -> ClassifiedMessage:
        """Classifier + context resolver. A failed classification returns the default untouched."""
        classification = await self._classifier.try_classify(message, context)
        if classification is None:
            return ClassifiedMessage.default()
        return self._resolver.resolve(classification, context, state=state)

    async def classify(
        self,
        message: str,
        context: Optional[List[ConversationTurn]] = None,
        state: Optional[ConversationState] = None,
    ) -> ClassifiedMessage:
        """classify_message() under the classification deadline."""
        try:
            return await asyncio.wait_for(
                self.classify_message(message, context, state),
                timeout=self._config.classification_timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            logger.warning(
                "Orchestrator: classification timed out (%.0fs)",
                self._config.classification_timeout_seconds,
            )
            raise RequestTimeoutError("Classification timed out", code="CLASSIFICATION_TIMEOUT") from exc

    # ── Full turn ───────────────────────────────────────────────────────────

    async def process(
        self,
        message: str,
        *,
        context: Optional[List[ConversationTurn]] = None,
        state: Optional[ConversationState] = None,
        current_ticket: Optional[Ticket] = None,
    ) -> OrchestratorResult:
        """Classify, verify ticket order details, run the intent handler.

        Raises RequestTimeoutError (CLASSIFICATION_TIMEOUT / INTENT_PROCESSING_TIMEOUT).
        Handler failures become the localized error reply.
        """
        t_start = time.monotonic()
        classification = await self.classify(message, context, state)
        t_classified = time.monotonic()

        try:
            result = await asyncio.wait_for(
                self._dispatch(classification, message, context, current_ticket),
                timeout=self._config.intent_timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            logger.warning(
                "Orchestrator: %s handler timed out (%.0fs)",
                classification.intent.value,
                self._config.intent_timeout_seconds,
            )
            raise RequestTimeoutError(
                "Intent processing timed out", code="INTENT_PROCESSING_TIMEOUT"
            ) from exc
        except Exception as exc:
            logger.exception("Orchestrator: %s handler failed: %s", classification.intent.value, exc)
            result = OrchestratorResult(
                query=message,
                intent=classification.intent,
                answer=reply("error", classification.language),
                classification=classification,
                metadata={"error": getattr(exc, "code", type(exc).__name__)},
            )

        t_end = time.monotonic()
        result.state = (state or ConversationState()).record(classification)
        result.metrics = OrchestratorMetrics(
            classification_ms=(t_classified - t_start) * 1000,
            handler_ms=(t_end - t_classified) * 1000,
            total_ms=(t_end - t_start) * 1000,
        )
        return result

    async def _dispatch(
        self,
        classification: ClassifiedMessage,
        message: str,
        context: Optional[List[ConversationTurn]],
        current_ticket: Optional[Ticket],
    ) -> OrchestratorResult:
        early = await self._verify_ticket_order(classification, message, current_ticket)
        if early is not None:
            return early
        handler = self._handlers.get(classification.intent, self._default_handler)
        return await handler.handle(classification, message, conversation_history=context)

    async def _verify_ticket_order(
        self,
        classification: ClassifiedMessage,
        message: str,
        ticket: Optional[Ticket],
    ) -> Optional[OrchestratorResult]:
        """Link the open ticket to the order once the customer has given both identifiers."""
        params = classification.parameters
        if ticket is None or not ticket.id or ticket.has_order_info or not params.has_order_identity():
            return None

        lookup = await self._commerce.track_order(params.order_number, params.email)
        if not lookup.success or lookup.order is None:
            return OrchestratorResult(
                query=message,
                intent=classification.intent,
                answer=invalid_credentials(classification.language, lookup.error or ""),
                classification=classification,
                metadata={"lookup_error": lookup.error},
            )

        customer = lookup.order.customer
        name = " ".join(
            part for part in (customer.get("firstName", ""), customer.get("lastName", "")) if part
        )
        await self._tickets.update_order_info(
            ticket.id,
            order_number=params.order_number,
            email=params.email,
            customer_name=name,
        )
        return None

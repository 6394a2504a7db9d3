"""Handlers for product questions: sizing, information and restock."""
from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from storefront_bot.clients.commerce.base import OrderLookup, Product, ProductVariant
from storefront_bot.orchestrator.answer_generator import AnswerGenerator
from storefront_bot.orchestrator.handlers.base import BaseHandler
from storefront_bot.orchestrator.normalization import NOT_FOUND, normalize_size, size_code
from storefront_bot.orchestrator.replies import reply
from storefront_bot.orchestrator.types import (
    ClassifiedMessage,
    ConversationTurn,
    OrchestratorResult,
    ParameterSet,
)

if TYPE_CHECKING:
    from storefront_bot.clients.commerce.base import BaseCommerceClient


def product_query(params: ParameterSet) -> str:
    """Handle if known, else the product name; "" when the customer named nothing usable."""
    if params.product_handle:
        return params.product_handle
    if params.product_name and params.product_name != NOT_FOUND:
        return params.product_name
    return ""


def find_variant(product: Product, size_label: str) -> Optional[ProductVariant]:
    """Variant whose title carries the size, e.g. "M", "Medium" or "M / Black"."""
    for variant in product.variants:
        options = [part.strip() for part in variant.title.split("/")]
        if any(normalize_size(option) == size_label for option in options):
            return variant
    return None


class _ProductHandler(BaseHandler):
    def __init__(self, commerce: "BaseCommerceClient") -> None:
        self._commerce = commerce

    async def _find_product(self, params: ParameterSet) -> Optional[Product]:
        query = product_query(params)
        if not query:
            return None
        return await self._commerce.get_product(query)


class ProductSizingHandler(_ProductHandler):
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
        product = await self._find_product(classification.parameters)
        if product is None:
            return self._result(classification, message, reply("ask_product", classification.language))

        size_chart = await self._commerce.get_size_chart(product)
        answer = await self._generator.generate(
            classification.intent,
            classification.parameters,
            OrderLookup(success=True, product=product),
            message,
            conversation_history,
            classification.language,
            size_charts=size_chart,
        )
        return self._result(classification, message, answer, used_llm=True, product=product.title)


class ProductInformationHandler(_ProductHandler):
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
        product = await self._find_product(classification.parameters)
        if product is None:
            return self._result(classification, message, reply("ask_product", classification.language))

        answer = await self._generator.generate(
            classification.intent,
            classification.parameters,
            OrderLookup(success=True, product=product),
            message,
            conversation_history,
            classification.language,
        )
        return self._result(classification, message, answer, used_llm=True, product=product.title)


class RestockHandler(_ProductHandler):
    """Product, then size, then stock check; out-of-stock needs an email to notify."""

    async def handle(
        self,
        classification: ClassifiedMessage,
        message: str,
        *,
        conversation_history: Optional[List[ConversationTurn]] = None,
    ) -> OrchestratorResult:
        params = classification.parameters
        language = classification.language

        product = await self._find_product(params)
        if product is None:
            return self._result(classification, message, reply("ask_product", language))
        if params.product_size in ("", NOT_FOUND):
            return self._result(classification, message, reply("ask_size", language, product=product.title))

        size = size_code(params.product_size) or params.product_size
        variant = find_variant(product, params.product_size)
        if variant is not None and variant.in_stock:
            answer = reply("restock_in_stock", language, product=product.title, size=size)
            return self._result(classification, message, answer, in_stock=True)
        if params.email:
            answer = reply("restock_notify", language, product=product.title, size=size, email=params.email)
            return self._result(classification, message, answer, in_stock=False, notify=params.email)
        answer = reply("restock_ask_email", language, product=product.title, size=size)
        return self._result(classification, message, answer, in_stock=False)

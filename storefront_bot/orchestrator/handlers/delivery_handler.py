"""ChangeDeliveryHandler: validate a new delivery address and ask the customer to confirm it."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional

from storefront_bot.orchestrator.handlers.base import OrderHandler
from storefront_bot.orchestrator.replies import reply
from storefront_bot.orchestrator.sanitizer import sanitize_input
from storefront_bot.orchestrator.types import (
    AddressValidationResult,
    ClassifiedMessage,
    ConversationTurn,
    Language,
    OrchestratorConfig,
    OrchestratorResult,
)

if TYPE_CHECKING:
    from storefront_bot.clients.commerce.base import BaseCommerceClient
    from storefront_bot.clients.llm.base import BaseLLMClient
    from storefront_bot.services.address_validator import AddressValidator

logger = logging.getLogger(__name__)

ADDRESS_CONFIRMATION_PROMPT = """\
You are {bot_name}, the support assistant of {store_name}.
Rewrite the message below for the customer in a friendly tone, in {language}.
Keep every address exactly as written, keep the numbering, and keep the question at the end.
Do not add any other information.

Message:
{template}"""


def confirmation_template(result: AddressValidationResult, language: Language) -> str:
    if result.multiple_candidates:
        numbered = "\n".join(f"{i}. {c}" for i, c in enumerate(result.address_candidates, start=1))
        return reply("address_multiple_candidates", language, candidates=numbered)
    return reply("address_single_candidate", language, address=result.formatted_address)


class ChangeDeliveryHandler(OrderHandler):
    def __init__(
        self,
        commerce: "BaseCommerceClient",
        validator: "AddressValidator",
        llm: "BaseLLMClient",
        config: OrchestratorConfig,
    ) -> None:
        super().__init__(commerce)
        self._validator = validator
        self._llm = llm
        self._config = config

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

        params = classification.parameters
        language = classification.language
        if not params.new_delivery_info:
            return self._result(classification, message, reply("ask_delivery_address", language))

        if params.delivery_address_confirmed:
            logger.info("Delivery address change requested for order %s", lookup.order.name)
            answer = reply(
                "address_update_requested",
                language,
                order_number=params.order_number,
                address=params.new_delivery_info,
            )
            return self._result(classification, message, answer, address_change_requested=True)

        return await self.confirm_delivery_address(classification, message)

    async def confirm_delivery_address(
        self,
        classification: ClassifiedMessage,
        message: str,
    ) -> OrchestratorResult:
        language = classification.language
        result = await self._validator.validate(classification.parameters.new_delivery_info)
        if not result.is_valid:
            return self._result(
                classification, message, reply("address_not_validated", language),
                validation_status=result.validation_status,
            )

        prompt = ADDRESS_CONFIRMATION_PROMPT.format(
            bot_name=self._config.bot_name,
            store_name=self._config.store_name,
            language=language.value,
            template=confirmation_template(result, language),
        )
        try:
            answer = await self._llm.chat(
                [
                    {"role": "system", "content": prompt},
                    {"role": "user", "content": sanitize_input(message)},
                ],
                temperature=self._config.address_confirmation_temperature,
            )
        except Exception as exc:
            logger.error("ChangeDeliveryHandler: confirmation failed: %s", exc)
            answer = reply("error", language)
        return self._result(
            classification, message, answer,
            used_llm=True,
            validation_status=result.validation_status,
            address_candidates=result.address_candidates,
        )

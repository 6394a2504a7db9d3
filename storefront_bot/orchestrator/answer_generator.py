"""Final reply synthesis from intent, parameters and commerce data."""
from __future__ import annotations

import json
import logging
from dataclasses import asdict
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from storefront_bot.clients.commerce.base import Order, OrderLookup
from storefront_bot.orchestrator.replies import reply
from storefront_bot.orchestrator.sanitizer import sanitize_context, sanitize_input
from storefront_bot.orchestrator.types import (
    ConversationTurn,
    Intent,
    Language,
    OrchestratorConfig,
    ParameterSet,
)

if TYPE_CHECKING:
    from storefront_bot.clients.llm.base import BaseLLMClient

logger = logging.getLogger(__name__)

_PERSONA = """\
You are {bot_name}, the customer-support assistant of {store_name}, an online clothing store.
Tone: warm, close and brief, like a helpful shop assistant. One or two emojis at most.
Never invent order data, tracking numbers, dates or policies that are not given below.
If something is missing, say what you need instead of guessing."""

_INTENT_NOTES: Dict[Intent, str] = {
    Intent.OTHER_ORDER: (
        "Answer the question using the shipping_address, billing_address and customer "
        "sections of the order details when they are relevant."
    ),
    Intent.PRODUCT_INFORMATION: "Answer using only the product details below.",
    Intent.PRODUCT_SIZING: (
        "Recommend one size using the size chart and the customer's height and fit "
        "preference; explain the choice in one sentence."
    ),
    Intent.DELIVERY_ISSUE: (
        "Acknowledge the problem, share what the tracking data says and the delivery "
        "address on file, and tell the customer the team will investigate."
    ),
}


def essential_order_data(order: Order) -> Dict[str, Any]:
    """The narrowed order view embedded in prompts."""
    fulfillment = order.first_fulfillment
    tracking = fulfillment.tracking_info[0] if fulfillment and fulfillment.tracking_info else None
    return {
        "order_number": order.name,
        "status": order.status,
        "created_at": order.created_at,
        "tracking_number": tracking.number if tracking else "",
        "tracking_url": tracking.url if tracking else "",
        "carrier": tracking.company if tracking else "",
        "shipping_address": order.shipping_address.one_line() if order.shipping_address else "",
        "display_status": fulfillment.display_status if fulfillment else "",
        "in_transit_at": fulfillment.in_transit_at if fulfillment else "",
        "delivered_at": fulfillment.delivered_at if fulfillment else "",
        "estimated_delivery_at": fulfillment.estimated_delivery_at if fulfillment else "",
    }


class AnswerGenerator:
    """One LLM call per reply; canned strings when no call is needed or the call fails."""

    def __init__(self, llm: "BaseLLMClient", config: OrchestratorConfig) -> None:
        self._llm = llm
        self._config = config

    def build_system_prompt(
        self,
        intent: Intent,
        parameters: ParameterSet,
        commerce_data: Optional[OrderLookup],
        context: List[ConversationTurn],
        language: Language,
        size_charts: Optional[str] = None,
    ) -> str:
        sections: List[str] = [
            _PERSONA.format(bot_name=self._config.bot_name, store_name=self._config.store_name),
            f"Customer intent: {intent.value}",
            f"Extracted parameters: {json.dumps(parameters.to_dict(), ensure_ascii=False)}",
        ]

        note = _INTENT_NOTES.get(intent)
        if note:
            sections.append(f"Instructions for this intent: {note}")

        if size_charts:
            sections.append(f"Size chart:\n{sanitize_input(size_charts)}")

        if context:
            transcript = "\n".join(f"{t['role']}: {t['content']}" for t in context if t["content"])
            sections.append(f"Conversation so far:\n{transcript}")

        order = commerce_data.order if commerce_data else None
        if order is not None:
            view = essential_order_data(order)
            sections.append(f"Order details:\n{json.dumps(view, ensure_ascii=False, indent=2)}")
            if view["tracking_number"]:
                sections.append(
                    "Tracking details:\n"
                    f"- number: {view['tracking_number']}\n"
                    f"- carrier: {view['carrier'] or 'unknown'}\n"
                    f"- link: {view['tracking_url'] or 'not available'}\n"
                    "Share the link as a markdown link labelled [here]."
                )
            if intent is Intent.DELIVERY_ISSUE and view["shipping_address"]:
                sections.append(f"Shipping address on file: {view['shipping_address']}")
            if intent is Intent.OTHER_ORDER:
                extra = {
                    "shipping_address": asdict(order.shipping_address) if order.shipping_address else None,
                    "billing_address": asdict(order.billing_address) if order.billing_address else None,
                    "customer": order.customer,
                }
                sections.append(f"Additional order data:\n{json.dumps(extra, ensure_ascii=False, indent=2)}")

        product = commerce_data.product if commerce_data else None
        if product is not None:
            sections.append(
                f"Product details:\n{json.dumps(product.to_prompt_dict(), ensure_ascii=False, indent=2)}"
            )

        sections.append(
            "Guidelines: answer the customer's latest message directly, keep it under "
            f"120 words, and respond ONLY in {language.value}."
        )
        return "\n\n".join(sections)

    async def generate(
        self,
        intent: Intent,
        parameters: ParameterSet,
        commerce_data: Optional[OrderLookup],
        user_message: str,
        context: Optional[List[ConversationTurn]] = None,
        language: Language = Language.ENGLISH,
        size_charts: Optional[str] = None,
    ) -> str:
        """Never raises; a failed model call yields the localized error string."""
        if intent is Intent.CONVERSATION_END:
            return reply("conversation_end", language)

        system_prompt = self.build_system_prompt(
            intent,
            parameters,
            commerce_data,
            sanitize_context(context),
            language,
            size_charts,
        )
        try:
            return await self._llm.chat(
                [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": sanitize_input(user_message)},
                ],
                temperature=self._config.answer_temperature,
            )
        except Exception as exc:
            logger.error("AnswerGenerator: generation failed for %s: %s", intent.value, exc)
            return reply("error", language)

"""Unit tests for ContextResolver and the new-request keyword tables."""
from __future__ import annotations

import json
import unittest

from storefront_bot.orchestrator.classifiers.context_resolver import ContextResolver
from storefront_bot.orchestrator.classifiers.new_request_rules import (
    has_fresh_start_phrase,
    matching_conclusion,
    topic_intent,
)
from storefront_bot.orchestrator.types import (
    ClassifiedMessage,
    ConversationState,
    Intent,
    Language,
    ParameterSet,
)

PORTAL = "https://returns.example.com"


def _classified(intent: Intent = Intent.OTHER_GENERAL, **params) -> ClassifiedMessage:
    return ClassifiedMessage(intent=intent, parameters=ParameterSet(**params), language=Language.ENGLISH)


class TestContextResolver(unittest.TestCase):
    def setUp(self) -> None:
        self.resolver = ContextResolver(returns_portal_url=PORTAL)

    def test_no_context_is_noop(self) -> None:
        classification = _classified(Intent.RESTOCK, email="a@b.com")
        result = self.resolver.resolve(classification, [])
        self.assertEqual(result.intent, Intent.RESTOCK)
        self.assertEqual(result.parameters.email, "a@b.com")

    def test_follow_up_inherits_intent_and_merges_parameters(self) -> None:
        state = ConversationState(classifications=[
            _classified(Intent.ORDER_TRACKING, email="ana@example.com"),
        ])
        context = [
            {"role": "user", "content": "Where is my parcel?"},
            {"role": "assistant", "content": "Could you share your order number?"},
        ]
        result = self.resolver.resolve(_classified(order_number="1234"), context, state=state)

        self.assertEqual(result.intent, Intent.ORDER_TRACKING)
        self.assertEqual(result.parameters.order_number, "1234")
        self.assertEqual(result.parameters.email, "ana@example.com")

    def test_follow_up_reads_previous_classification_from_transcript(self) -> None:
        previous = {
            "intent": "change_delivery",
            "parameters": {"new_delivery_info": "Calle Mayor 1, Madrid"},
            "language": "Spanish",
        }
        context = [
            {"role": "user", "content": "Quiero cambiar la dirección"},
            {"role": "assistant", "content": json.dumps(previous)},
            {"role": "assistant", "content": "¿Me das tu número de pedido?"},
        ]
        result = self.resolver.resolve(_classified(Intent.PROMO_CODE, order_number="5678"), context)

        self.assertEqual(result.intent, Intent.CHANGE_DELIVERY)
        self.assertEqual(result.parameters.new_delivery_info, "Calle Mayor 1, Madrid")
        self.assertEqual(result.parameters.order_number, "5678")

    def test_new_values_win_over_previous(self) -> None:
        state = ConversationState(classifications=[_classified(Intent.ORDER_TRACKING, order_number="1111")])
        context = [{"role": "assistant", "content": "What is your order number?"}]
        result = self.resolver.resolve(_classified(order_number="2222"), context, state=state)
        self.assertEqual(result.parameters.order_number, "2222")

    def test_follow_up_does_not_inherit_an_earlier_confirmation(self) -> None:
        state = ConversationState(classifications=[
            _classified(
                Intent.CHANGE_DELIVERY,
                order_number="1234",
                email="ana@example.com",
                new_delivery_info="Calle Mayor 1, Madrid",
                delivery_address_confirmed=True,
            ),
        ])
        context = [{"role": "assistant", "content": "Perfect! Order #1234 ships to Calle Mayor 1, Madrid."}]
        classification = _classified(
            Intent.CHANGE_DELIVERY, order_number="1234", new_delivery_info="Calle Falsa 9, Sevilla",
        )

        result = self.resolver.resolve(classification, context, state=state)

        self.assertEqual(result.intent, Intent.CHANGE_DELIVERY)
        self.assertEqual(result.parameters.new_delivery_info, "Calle Falsa 9, Sevilla")
        self.assertEqual(result.parameters.email, "ana@example.com")
        self.assertFalse(result.parameters.delivery_address_confirmed)

    def test_email_follow_up_inherits_intent(self) -> None:
        state = ConversationState(classifications=[_classified(Intent.ORDER_TRACKING, order_number="1234")])
        for question in ("Could you share the email on the order?", "¿Me das tu correo electrónico?"):
            with self.subTest(question=question):
                context = [{"role": "assistant", "content": question}]
                result = self.resolver.resolve(_classified(email="ana@example.com"), context, state=state)

                self.assertEqual(result.intent, Intent.ORDER_TRACKING)
                self.assertEqual(result.parameters.order_number, "1234")
                self.assertEqual(result.parameters.email, "ana@example.com")

    def test_unparsable_transcript_classification_is_skipped(self) -> None:
        earlier = {"intent": "restock", "parameters": {"product_name": "White Tee"}, "language": "English"}
        context = [
            {"role": "assistant", "content": json.dumps(earlier)},
            {"role": "assistant", "content": '{"intent": "change_delivery", "parameters": '},
            {"role": "assistant", "content": "What is your order number?"},
        ]
        result = self.resolver.resolve(_classified(order_number="5678"), context)

        self.assertEqual(result.intent, Intent.RESTOCK)
        self.assertEqual(result.parameters.product_name, "White Tee")
        self.assertEqual(result.parameters.order_number, "5678")

    def test_follow_up_takes_precedence_over_new_request(self) -> None:
        state = ConversationState(classifications=[_classified(Intent.INVOICE_REQUEST, email="ana@example.com")])
        agent_text = "¡Gracias! ¿Cuál es tu número de pedido?"
        customer_text = "otro pedido 5678"
        self.assertTrue(ContextResolver.is_follow_up(customer_text, agent_text))
        self.assertTrue(ContextResolver.is_new_request(customer_text, agent_text))

        result = self.resolver.resolve(
            _classified(order_number=customer_text), [{"role": "assistant", "content": agent_text}], state=state,
        )

        self.assertEqual(result.intent, Intent.INVOICE_REQUEST)
        self.assertEqual(result.parameters.email, "ana@example.com")

    def test_new_request_resets_every_parameter(self) -> None:
        context = [
            {"role": "user", "content": "Where is my parcel?"},
            {"role": "assistant", "content": "¡Gracias a ti! Tu número de seguimiento es 555."},
        ]
        classification = _classified(
            Intent.DELIVERY_ISSUE,
            order_number="otro pedido track",
            email="ana@example.com",
            height="180",
        )
        result = self.resolver.resolve(classification, context)

        self.assertEqual(result.intent, Intent.ORDER_TRACKING)
        self.assertEqual(result.parameters, ParameterSet())

    def test_new_request_resets_parameters_then_backfills(self) -> None:
        context = [
            {"role": "user", "content": "My order is #4321"},
            {"role": "assistant", "content": "Here is your tracking number: 555. Have a great day!"},
        ]
        classification = _classified(
            Intent.DELIVERY_ISSUE,
            order_number="otro pedido track",
            product_name="White Tee",
        )
        result = self.resolver.resolve(classification, context)

        self.assertEqual(result.intent, Intent.ORDER_TRACKING)
        self.assertEqual(result.parameters.product_name, "")
        self.assertEqual(result.parameters.order_number, "4321")

    def test_other_general_is_rescued_from_state(self) -> None:
        state = ConversationState(classifications=[
            _classified(Intent.ORDER_TRACKING, order_number="1111"),
            _classified(Intent.OTHER_GENERAL),
        ])
        context = [
            {"role": "user", "content": "hola"},
            {"role": "assistant", "content": "Hi! How can I help?"},
        ]
        result = self.resolver.resolve(_classified(), context, state=state)

        self.assertEqual(result.intent, Intent.ORDER_TRACKING)
        self.assertEqual(result.parameters.order_number, "1111")

    def test_other_general_without_history_stays(self) -> None:
        context = [{"role": "assistant", "content": "Hi! How can I help?"}]
        result = self.resolver.resolve(_classified(), context)
        self.assertEqual(result.intent, Intent.OTHER_GENERAL)

    def test_specific_intent_is_not_rescued(self) -> None:
        state = ConversationState(classifications=[_classified(Intent.ORDER_TRACKING, order_number="1111")])
        context = [{"role": "assistant", "content": "Hi! How can I help?"}]
        result = self.resolver.resolve(_classified(Intent.RESTOCK), context, state=state)

        self.assertEqual(result.intent, Intent.RESTOCK)
        self.assertEqual(result.parameters.order_number, "")

    def test_tracking_number_from_link(self) -> None:
        context = [
            {"role": "user", "content": "It never arrived"},
            {
                "role": "assistant",
                "content": "You can follow it [here](https://track.carrier.com/shipments/ES/0012345678).",
            },
        ]
        result = self.resolver.resolve(_classified(Intent.DELIVERY_ISSUE), context)
        self.assertEqual(result.parameters.tracking_number, "0012345678")

    def test_returns_portal_detection(self) -> None:
        sent = [{"role": "assistant", "content": f"Start your return at {PORTAL}/start"}]
        not_sent = [{"role": "assistant", "content": "Let me check that."}]

        self.assertTrue(
            self.resolver.resolve(_classified(Intent.RETURNS_EXCHANGE), sent).parameters.returns_website_sent
        )
        self.assertFalse(
            self.resolver.resolve(_classified(Intent.RETURNS_EXCHANGE), not_sent).parameters.returns_website_sent
        )

    def test_backfill_reads_only_user_turns(self) -> None:
        context = [
            {"role": "assistant", "content": "Your previous order #9999 shipped."},
            {"role": "user", "content": "It's #1234 and ana@example.com"},
        ]
        result = self.resolver.resolve(_classified(Intent.ORDER_TRACKING), context)

        self.assertEqual(result.parameters.order_number, "1234")
        self.assertEqual(result.parameters.email, "ana@example.com")

    def test_backfill_keeps_extracted_values(self) -> None:
        context = [{"role": "user", "content": "#1234 ana@example.com"}]
        result = self.resolver.resolve(_classified(Intent.ORDER_TRACKING, order_number="7777"), context)

        self.assertEqual(result.parameters.order_number, "7777")
        self.assertEqual(result.parameters.email, "ana@example.com")


class TestNewRequestRules(unittest.TestCase):
    def test_fresh_start_phrases(self) -> None:
        self.assertTrue(has_fresh_start_phrase("Tengo otra pregunta"))
        self.assertTrue(has_fresh_start_phrase("I want to track another order"))
        self.assertFalse(has_fresh_start_phrase("ok"))

    def test_conclusions(self) -> None:
        self.assertEqual(matching_conclusion("Have a great day!"), "closing")
        self.assertEqual(
            matching_conclusion("Tu pedido tiene el número de seguimiento 123"), "tracking_sent"
        )
        self.assertEqual(
            matching_conclusion("El procedimiento de devolución es sencillo"), "return_explained_es"
        )
        self.assertIsNone(matching_conclusion("How can I help?"))

    def test_topic_intents(self) -> None:
        self.assertEqual(topic_intent("¿Dónde está mi pedido?"), Intent.ORDER_TRACKING)
        self.assertEqual(topic_intent("Quiero devolver una camiseta"), Intent.RETURNS_EXCHANGE)
        self.assertEqual(topic_intent("Necesito la factura"), Intent.INVOICE_REQUEST)
        self.assertEqual(topic_intent("a question about my order"), Intent.OTHER_ORDER)
        self.assertEqual(topic_intent("hello"), Intent.OTHER_GENERAL)

    def test_first_matching_rule_wins(self) -> None:
        # "cambiar" belongs to returns, which is checked before change_delivery
        self.assertEqual(topic_intent("quiero cambiar la dirección"), Intent.RETURNS_EXCHANGE)

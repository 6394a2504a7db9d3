"""Unit tests for the orchestrator data model."""
from __future__ import annotations

import unittest

from storefront_bot.orchestrator.types import (
    AddressValidationResult,
    ClassifiedMessage,
    ConversationState,
    Intent,
    Language,
    ParameterSet,
)


class TestIntentAndLanguage(unittest.TestCase):
    def test_intent_parse(self) -> None:
        self.assertEqual(Intent.parse("other-order"), Intent.OTHER_ORDER)
        self.assertEqual(Intent.parse(" restock "), Intent.RESTOCK)
        self.assertEqual(Intent.parse("weather"), Intent.OTHER_GENERAL)
        self.assertEqual(Intent.parse(None), Intent.OTHER_GENERAL)

    def test_language_parse(self) -> None:
        self.assertEqual(Language.parse("Spanish"), Language.SPANISH)
        self.assertEqual(Language.parse("español"), Language.SPANISH)
        self.assertEqual(Language.parse("es"), Language.SPANISH)
        self.assertEqual(Language.parse("French"), Language.ENGLISH)
        self.assertEqual(Language.parse(None), Language.ENGLISH)


class TestParameterSet(unittest.TestCase):
    def test_from_dict_coerces_loose_values(self) -> None:
        params = ParameterSet.from_dict({
            "order_number": 1234,
            "email": None,
            "delivery_address_confirmed": "true",
            "returns_website_sent": 0,
            "unknown_slot": "ignored",
        })
        self.assertEqual(params.order_number, "1234")
        self.assertEqual(params.email, "")
        self.assertTrue(params.delivery_address_confirmed)
        self.assertFalse(params.returns_website_sent)
        self.assertNotIn("unknown_slot", params.to_dict())

    def test_to_dict_has_every_slot(self) -> None:
        self.assertEqual(set(ParameterSet().to_dict()), set(ParameterSet.slot_names()))
        self.assertEqual(len(ParameterSet.slot_names()), 15)

    def test_merged_over_keeps_previous_for_empty_text_slots(self) -> None:
        previous = ParameterSet(order_number="1111", email="old@example.com", delivery_address_confirmed=True)
        current = ParameterSet(order_number="2222")
        merged = current.merged_over(previous)

        self.assertEqual(merged.order_number, "2222")
        self.assertEqual(merged.email, "old@example.com")
        self.assertFalse(merged.delivery_address_confirmed)

    def test_has_order_identity(self) -> None:
        self.assertFalse(ParameterSet(order_number="1234").has_order_identity())
        self.assertTrue(ParameterSet(order_number="1234", email="a@b.com").has_order_identity())


class TestConversationState(unittest.TestCase):
    def test_record_caps_history(self) -> None:
        state = ConversationState()
        for _ in range(ConversationState.MAX_HISTORY + 5):
            state = state.record(ClassifiedMessage(intent=Intent.RESTOCK))
        self.assertEqual(len(state.classifications), ConversationState.MAX_HISTORY)

    def test_record_does_not_alias_classification(self) -> None:
        classification = ClassifiedMessage(intent=Intent.RESTOCK)
        state = ConversationState().record(classification)
        classification.parameters.email = "changed@example.com"
        self.assertEqual(state.classifications[0].parameters.email, "")

    def test_round_trip_and_latest_specific(self) -> None:
        state = ConversationState(classifications=[
            ClassifiedMessage(intent=Intent.PROMO_CODE, parameters=ParameterSet(email="a@b.com")),
            ClassifiedMessage(intent=Intent.OTHER_GENERAL),
        ])
        restored = ConversationState.from_dict(state.to_dict())

        latest = restored.latest_specific()
        self.assertEqual(latest.intent, Intent.PROMO_CODE)
        self.assertEqual(latest.parameters.email, "a@b.com")

    def test_from_dict_rejects_bad_shapes(self) -> None:
        with self.assertRaises(ValueError):
            ConversationState.from_dict("nope")
        with self.assertRaises(ValueError):
            ConversationState.from_dict({"classifications": ["x"]})
        self.assertEqual(ConversationState.from_dict(None).classifications, [])


class TestAddressValidationResult(unittest.TestCase):
    def test_statuses(self) -> None:
        self.assertEqual(AddressValidationResult().validation_status, "INVALID")
        self.assertEqual(AddressValidationResult(formatted_address="A").validation_status, "VALID")
        multiple = AddressValidationResult(
            formatted_address="A", multiple_candidates=True, address_candidates=["A", "B"],
        )
        self.assertEqual(multiple.validation_status, "MULTIPLE")
        self.assertEqual(multiple.to_dict()["addressCandidates"], ["A", "B"])

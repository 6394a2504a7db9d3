"""Unit tests for AddressValidator against a mocked Places endpoint."""
from __future__ import annotations

import asyncio
import unittest

import httpx

from storefront_bot.core.exceptions import AddressValidationDeniedError
from storefront_bot.services.address_validator import AddressValidator


def _run(coro):
    return asyncio.run(coro)


def _validator(payload=None, *, status_code: int = 200, seen=None) -> AddressValidator:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, json=payload or {})

    return AddressValidator("maps-key", transport=httpx.MockTransport(handler))


class TestAddressValidator(unittest.TestCase):
    def test_single_candidate_is_valid(self) -> None:
        seen = []
        validator = _validator(
            {"status": "OK", "candidates": [{"formatted_address": "Calle Mayor 1, 28013 Madrid, Spain"}]},
            seen=seen,
        )
        result = _run(validator.validate("calle mayor 1 madrid"))

        self.assertTrue(result.is_valid)
        self.assertFalse(result.multiple_candidates)
        self.assertEqual(result.formatted_address, "Calle Mayor 1, 28013 Madrid, Spain")
        self.assertEqual(result.validation_status, "VALID")
        params = seen[0].url.params
        self.assertEqual(params["input"], "calle mayor 1 madrid")
        self.assertEqual(params["inputtype"], "textquery")
        self.assertEqual(params["key"], "maps-key")

    def test_multiple_candidates(self) -> None:
        validator = _validator({
            "status": "OK",
            "candidates": [{"formatted_address": "Gran Vía 1, Madrid"}, {"formatted_address": "Gran Vía 1, Bilbao"}],
        })
        result = _run(validator.validate("gran via 1"))

        self.assertTrue(result.multiple_candidates)
        self.assertEqual(result.formatted_address, "Gran Vía 1, Madrid")
        self.assertEqual(result.address_candidates, ["Gran Vía 1, Madrid", "Gran Vía 1, Bilbao"])
        self.assertEqual(result.validation_status, "MULTIPLE")

    def test_zero_results_is_invalid(self) -> None:
        result = _run(_validator({"status": "ZERO_RESULTS", "candidates": []}).validate("nowhere"))
        self.assertFalse(result.is_valid)
        self.assertEqual(result.address_candidates, [])

    def test_request_denied_raises(self) -> None:
        validator = _validator({"status": "REQUEST_DENIED", "error_message": "bad key"})
        with self.assertRaises(AddressValidationDeniedError):
            _run(validator.validate("Calle Mayor 1"))

    def test_http_error_reads_as_no_match(self) -> None:
        result = _run(_validator(status_code=500).validate("Calle Mayor 1"))
        self.assertFalse(result.is_valid)

    def test_non_object_body_reads_as_no_match(self) -> None:
        result = _run(_validator(["unexpected"]).validate("Calle Mayor 1"))
        self.assertFalse(result.is_valid)
        self.assertEqual(result.address_candidates, [])

    def test_blank_address_skips_request(self) -> None:
        seen = []
        result = _run(_validator(seen=seen).validate("   "))
        self.assertFalse(result.is_valid)
        self.assertEqual(seen, [])

    def test_missing_key_skips_request(self) -> None:
        result = _run(AddressValidator(None).validate("Calle Mayor 1"))
        self.assertFalse(result.is_valid)

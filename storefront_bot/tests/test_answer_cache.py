"""Unit tests for AnswerCache."""
from __future__ import annotations

import unittest

from storefront_bot.orchestrator.cache import AnswerCache, answer_cache_key


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class TestAnswerCache(unittest.TestCase):
    def test_put_and_get(self) -> None:
        cache = AnswerCache(max_size=10, ttl_seconds=60)
        stored = cache.put("k", "hello")
        got = cache.get("k")
        self.assertIsNotNone(got)
        self.assertEqual(got.answer, "hello")
        self.assertEqual(got.created_at, stored.created_at)

    def test_miss_returns_none(self) -> None:
        self.assertIsNone(AnswerCache().get("unknown"))

    def test_ttl_expiry(self) -> None:
        clock = FakeClock()
        cache = AnswerCache(max_size=10, ttl_seconds=300, clock=clock)
        cache.put("k", "hello")
        clock.now = 299
        self.assertIsNotNone(cache.get("k"))
        clock.now = 301
        self.assertIsNone(cache.get("k"))
        self.assertEqual(cache.size, 0)

    def test_lru_eviction(self) -> None:
        cache = AnswerCache(max_size=2, ttl_seconds=3600)
        cache.put("a", "1")
        cache.put("b", "2")
        cache.get("a")
        cache.put("c", "3")
        self.assertEqual(cache.size, 2)
        self.assertIsNotNone(cache.get("a"))
        self.assertIsNone(cache.get("b"))

    def test_clear(self) -> None:
        cache = AnswerCache()
        cache.put("x", "y")
        cache.clear()
        self.assertEqual(cache.size, 0)


class TestAnswerCacheKey(unittest.TestCase):
    def test_key_ignores_field_order(self) -> None:
        self.assertEqual(
            answer_cache_key(intent="restock", parameters={"a": 1, "b": 2}),
            answer_cache_key(parameters={"b": 2, "a": 1}, intent="restock"),
        )

    def test_key_changes_with_any_input(self) -> None:
        base = answer_cache_key(intent="restock", user_message="hi", language="English")
        self.assertNotEqual(base, answer_cache_key(intent="restock", user_message="hi", language="Spanish"))
        self.assertNotEqual(base, answer_cache_key(intent="restock", user_message="hey", language="English"))

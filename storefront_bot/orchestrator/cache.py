"""Answer cache: avoids repeated LLM calls for identical answer requests."""
from __future__ import annotations

import hashlib
import json
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CachedAnswer:
    answer: str
    created_at: datetime


def answer_cache_key(**fields: Any) -> str:
    """Stable key over every input that shapes the answer."""
    canonical = json.dumps(fields, sort_keys=True, ensure_ascii=False, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class AnswerCache:
    """LRU cache with TTL expiry. ``clock`` is injectable for tests."""

    def __init__(
        self,
        max_size: int = 1000,
        ttl_seconds: float = 300.0,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_size = max_size
        self._ttl = ttl_seconds
        self._clock = clock
        self._store: OrderedDict[str, tuple[CachedAnswer, float]] = OrderedDict()

    def get(self, key: str) -> Optional[CachedAnswer]:
        entry = self._store.get(key)
        if entry is None:
            return None
        cached, ts = entry
        if self._clock() - ts > self._ttl:
            self._store.pop(key, None)
            return None
        self._store.move_to_end(key)
        logger.debug("AnswerCache: hit for %s", key[:12])
        return cached

    def put(self, key: str, answer: str) -> CachedAnswer:
        cached = CachedAnswer(answer=answer, created_at=datetime.now(timezone.utc))
        self._store[key] = (cached, self._clock())
        self._store.move_to_end(key)
        while len(self._store) > self._max_size:
            self._store.popitem(last=False)
        return cached

    def clear(self) -> None:
        self._store.clear()

    @property
    def size(self) -> int:
        return len(self._store)

"""
Request-id propagation for log records.

The HTTP middleware binds the id for the duration of a request; every record
emitted inside it, including from handlers and clients awaited deep in the
call chain, carries ``record.request_id``.
"""
from __future__ import annotations

import contextvars
import logging

_request_id: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="-")


def bind_request_id(value: str) -> contextvars.Token:
    return _request_id.set(value or "-")


def reset_request_id(token: contextvars.Token) -> None:
    _request_id.reset(token)


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = _request_id.get()
        return True

"""
Base exception type for the storefront bot.

Anything raised across a component boundary is a ProjectError subclass. The
API layer renders it with ``to_response``, using the subclass's code and
HTTP status.
"""
from __future__ import annotations

from typing import Any, Optional


class ProjectError(Exception):
    """
    Base exception for all project errors.

    Attributes:
        message: Text shown to API clients in the ``error`` field.
        code: Machine-readable slug, e.g. ``INVALID_MESSAGE``.
        http_status: Status returned when the error reaches a route.
        details: Extra context for the logs only, never sent to clients.
        cause: The lower-level exception, if any.
    """

    default_code: str = "INTERNAL_ERROR"
    default_http_status: int = 500

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        http_status: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.http_status = http_status or self.default_http_status
        self.details: dict[str, Any] = dict(details or {})
        self.cause = cause

    def __str__(self) -> str:
        return self.message

    @property
    def is_server_error(self) -> bool:
        return self.http_status >= 500

    def to_response(self, request_id: str, timestamp: str) -> dict[str, Any]:
        return {
            "error": self.message,
            "code": self.code,
            "requestId": request_id,
            "timestamp": timestamp,
        }

    def to_log(self) -> dict[str, Any]:
        """Fields for the ``extra`` of a log record."""
        out: dict[str, Any] = {"code": self.code, "http_status": self.http_status, **self.details}
        if self.cause is not None:
            out["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return out

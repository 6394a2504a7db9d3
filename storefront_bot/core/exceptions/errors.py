"""
Built-in exception types.
"""
from __future__ import annotations

from typing import Any, Optional

from storefront_bot.core.exceptions.base import ProjectError


class ValidationError(ProjectError):
    """Request or input validation failed."""

    default_code = "VALIDATION_ERROR"
    default_http_status = 400


class UnsupportedMediaTypeError(ProjectError):
    """Request body is not JSON."""

    default_code = "INVALID_CONTENT_TYPE"
    default_http_status = 415


class UnauthorizedError(ProjectError):
    default_code = "UNAUTHORIZED"
    default_http_status = 401


class RequestTimeoutError(ProjectError):
    """A processing stage exceeded its deadline."""

    default_code = "REQUEST_TIMEOUT"
    default_http_status = 408


class GatewayTimeoutError(ProjectError):
    default_code = "TIMEOUT"
    default_http_status = 504


class ExternalServiceError(ProjectError):
    """External service (LLM, commerce platform, geocoder) failed."""

    default_code = "EXTERNAL_SERVICE_ERROR"
    default_http_status = 502


class LLMProviderError(ExternalServiceError):
    """
    A language-model call failed.

    ``status_code`` is the provider's HTTP status, or None when the request
    never got a response (connection reset, DNS, read timeout).
    """

    default_code = "LLM_PROVIDER_ERROR"

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        if self.status_code is None:
            return True
        return self.status_code == 429 or self.status_code >= 500


class AddressValidationDeniedError(ExternalServiceError):
    """The geocoding provider rejected our credentials (REQUEST_DENIED)."""

    default_code = "ADDRESS_PROVIDER_DENIED"

"""
Project exception system.

Usage:
    from storefront_bot.core.exceptions import ProjectError, ValidationError

    raise ValidationError("Message must be a non-empty string", code="INVALID_MESSAGE")
"""
from storefront_bot.core.exceptions.base import ProjectError
from storefront_bot.core.exceptions.errors import (
    AddressValidationDeniedError,
    ExternalServiceError,
    GatewayTimeoutError,
    LLMProviderError,
    RequestTimeoutError,
    UnauthorizedError,
    UnsupportedMediaTypeError,
    ValidationError,
)

__all__ = [
    "ProjectError",
    "ValidationError",
    "UnsupportedMediaTypeError",
    "UnauthorizedError",
    "RequestTimeoutError",
    "GatewayTimeoutError",
    "ExternalServiceError",
    "LLMProviderError",
    "AddressValidationDeniedError",
]

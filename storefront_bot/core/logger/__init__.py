"""
Project logger: console plus rotating JSON file, with the request id on every record.

Usage:
    from storefront_bot.core.logger import configure

    configure()  # LoggerConfig.from_env()
    logger = logging.getLogger(__name__)
    logger.info("Classified", extra={"extra": {"intent": "order_tracking"}})
"""
from storefront_bot.core.logger.config import LoggerConfig
from storefront_bot.core.logger.context import (
    RequestIdFilter,
    bind_request_id,
    reset_request_id,
)
from storefront_bot.core.logger.formatters import JsonFormatter, PlainConsoleFormatter
from storefront_bot.core.logger.setup import configure

__all__ = [
    "LoggerConfig",
    "JsonFormatter",
    "PlainConsoleFormatter",
    "RequestIdFilter",
    "bind_request_id",
    "reset_request_id",
    "configure",
]

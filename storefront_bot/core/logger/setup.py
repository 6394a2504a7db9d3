"""
Attach console and rotating JSON file handlers to the ``storefront_bot`` logger.
"""
from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import List, Optional

from storefront_bot.core.logger.config import LoggerConfig
from storefront_bot.core.logger.context import RequestIdFilter
from storefront_bot.core.logger.formatters import JsonFormatter, PlainConsoleFormatter


def _build_handlers(config: LoggerConfig) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []
    if config.console:
        console = logging.StreamHandler()
        console.setFormatter(PlainConsoleFormatter())
        handlers.append(console)

    if config.log_dir:
        try:
            os.makedirs(config.log_dir, exist_ok=True)
        except OSError as exc:
            logging.getLogger(config.root_name).warning(
                "Logger: cannot create %s (%s), file logging disabled", config.log_dir, exc
            )
        else:
            rotating = RotatingFileHandler(
                os.path.join(config.log_dir, f"{config.log_file_basename}.log"),
                maxBytes=config.max_bytes,
                backupCount=config.backup_count,
                encoding="utf-8",
            )
            rotating.setFormatter(JsonFormatter())
            handlers.append(rotating)
    return handlers


def configure(config: Optional[LoggerConfig] = None) -> LoggerConfig:
    """
    Configure the project logger from ``config`` or the environment.

    Safe to call again (app reload, tests): previous handlers are replaced.
    """
    config = config or LoggerConfig.from_env()

    root = logging.getLogger(config.root_name)
    root.setLevel(getattr(logging, config.level.upper(), logging.INFO))
    root.propagate = False
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    request_ids = RequestIdFilter()
    for handler in _build_handlers(config):
        handler.addFilter(request_ids)
        root.addHandler(handler)

    return config


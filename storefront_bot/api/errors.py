"""Render ProjectError and rate-limit rejections as {error, code, requestId, timestamp}."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from storefront_bot.api.dependencies import get_request_id, utc_timestamp
from storefront_bot.core.exceptions import ProjectError

logger = logging.getLogger(__name__)


async def project_error_handler(request: Request, exc: ProjectError) -> JSONResponse:
    if exc.is_server_error:
        logger.error("API: %s", exc.message, extra={"extra": exc.to_log()})
    else:
        logger.info("API: rejected request (%s): %s", exc.code, exc.message)
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_response(get_request_id(request), utc_timestamp()),
    )


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(
        status_code=429,
        content={
            "error": f"Rate limit exceeded: {exc.detail}",
            "code": "RATE_LIMIT_EXCEEDED",
            "requestId": get_request_id(request),
            "timestamp": utc_timestamp(),
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ProjectError, project_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

"""Storefront support bot FastAPI application: entry point.

Start with:
    uvicorn storefront_bot.api.main:app --reload --host 0.0.0.0 --port 8000

LLM client: LLM_PROVIDER key from env (OPENAI_API_KEY / GEMINI_API_KEY), else a
no-op client. Commerce client: Shopify when SHOPIFY_STORE_DOMAIN and
SHOPIFY_ACCESS_TOKEN are set, else a no-op client. So no secret is required at
startup.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request

from fastapi.middleware.cors import CORSMiddleware

from storefront_bot.api.errors import register_exception_handlers
from storefront_bot.clients.commerce.base import BaseCommerceClient
from storefront_bot.clients.commerce.noop import NoOpCommerceClient
from storefront_bot.clients.commerce.shopify import ShopifyCommerceClient
from storefront_bot.clients.llm import BaseLLMClient, LLMConfig, RetryingLLMClient, default_registry
from storefront_bot.clients.llm.providers.noop import NoOpLLMClient
from storefront_bot.config import Settings, load_settings
from storefront_bot.core.logger import bind_request_id, configure, reset_request_id
from storefront_bot.orchestrator.cache import AnswerCache
from storefront_bot.orchestrator.orchestrator import Orchestrator
from storefront_bot.orchestrator.types import OrchestratorConfig
from storefront_bot.services.address_validator import AddressValidator
from storefront_bot.services.ticket_service import InMemoryTicketStore

logger = logging.getLogger(__name__)


def _build_llm_client(settings: Settings) -> BaseLLMClient:
    """Provider client wrapped in the retry policy; no-op client when no key is set."""
    if not settings.llm_api_key:
        logger.warning("API: no %s API key set, using no-op LLM client", settings.llm_provider)
        return NoOpLLMClient()
    config = LLMConfig.from_settings(settings)
    client = default_registry.build(settings.llm_provider, config.to_dict())
    logger.info("API: using %s LLM (%s)", settings.llm_provider, settings.llm_model)
    return RetryingLLMClient(
        client,
        max_retries=settings.llm_max_retries,
        base_delay=settings.llm_retry_delay,
    )


def _build_commerce_client(settings: Settings) -> BaseCommerceClient:
    if not settings.shopify_configured:
        logger.warning("API: Shopify is not configured, order and product lookups are disabled")
        return NoOpCommerceClient()
    return ShopifyCommerceClient(
        settings.shopify_store_domain,
        settings.shopify_access_token,
        api_version=settings.shopify_api_version,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ── Startup ──────────────────────────────────────────────────
    configure()
    settings = load_settings()
    app.state.settings = settings

    commerce = _build_commerce_client(settings)
    validator = AddressValidator(settings.google_maps_api_key)
    orchestrator = Orchestrator(
        _build_llm_client(settings),
        OrchestratorConfig.from_settings(settings),
        commerce=commerce,
        address_validator=validator,
        ticket_store=InMemoryTicketStore(),
    )
    await orchestrator.refresh_active_products()

    app.state.orchestrator = orchestrator
    app.state.address_validator = validator
    app.state.answer_cache = AnswerCache(
        max_size=settings.answer_cache_max_size,
        ttl_seconds=settings.answer_cache_ttl,
    )
    logger.info("API: orchestrator ready")

    yield

    # ── Shutdown ─────────────────────────────────────────────────
    await commerce.aclose()
    logger.info("API: commerce client closed")


app = FastAPI(
    title="Storefront Support Bot API",
    version="1.0.0",
    description="Intent classification, context resolution and reply generation for storefront support chat.",
    lifespan=lifespan,
)

register_exception_handlers(app)

# CORS: the chat widget is embedded on the storefront domains
_allowed_origins = load_settings().cors_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials="*" not in _allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or uuid4().hex
    request.state.request_id = request_id
    token = bind_request_id(request_id)
    try:
        response = await call_next(request)
    finally:
        reset_request_id(token)
    response.headers["X-Request-ID"] = request_id
    return response


# ── Routers ───────────────────────────────────────────────────────
from storefront_bot.api.routers import address, answer, chat, classify  # noqa: E402

app.state.limiter = answer.limiter
app.include_router(classify.router, prefix="/api")
app.include_router(chat.router, prefix="/api")
app.include_router(answer.router, prefix="/api")
app.include_router(address.router, prefix="/api")


@app.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}

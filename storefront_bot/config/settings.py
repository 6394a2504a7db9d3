"""
storefront_bot.config.settings – runtime settings (dataclass + validators).

Env vars: LLM_PROVIDER, OPENAI_API_KEY, GEMINI_API_KEY, LLM_MODEL, LLM_MAX_RETRIES,
LLM_RETRY_DELAY, GOOGLE_MAPS_API_KEY, RETURNS_PORTAL_URL, SHOPIFY_STORE_DOMAIN,
SHOPIFY_ACCESS_TOKEN, SHOPIFY_API_VERSION, EXTERNAL_API_KEY, CORS_ORIGINS,
CLASSIFICATION_TIMEOUT, INTENT_TIMEOUT, ANSWER_TIMEOUT, ANSWER_CACHE_TTL,
ANSWER_CACHE_MAX_SIZE, BOT_NAME, STORE_NAME.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

_PROVIDERS = ("openai", "gemini")

_DEFAULT_MODELS: Dict[str, str] = {
    "openai": "gpt-4o-mini",
    "gemini": "gemini-2.0-flash",
}


def _validate_positive_number(value: float, name: str) -> float:
    if not isinstance(value, (int, float)) or value <= 0:
        raise ValueError(f"{name} must be a positive number, got {value!r}")
    return value


def _validate_nonnegative_int(value: int, name: str) -> int:
    if not isinstance(value, int) or value < 0:
        raise ValueError(f"{name} must be a non-negative integer, got {value!r}")
    return value


def _split_csv(raw: str) -> List[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


@dataclass(frozen=True)
class Settings:
    """
    Everything the app reads from the environment.

    Secrets are optional: without an LLM key the app falls back to a no-op
    model client, without store credentials to a no-op commerce client.
    """

    llm_provider: str = "openai"
    llm_api_key: Optional[str] = None
    llm_model: str = "gpt-4o-mini"
    llm_max_retries: int = 3
    llm_retry_delay: float = 1.0
    """Base backoff in seconds; attempt n waits llm_retry_delay * 2**n."""

    google_maps_api_key: Optional[str] = None
    returns_portal_url: str = ""

    shopify_store_domain: Optional[str] = None
    shopify_access_token: Optional[str] = None
    shopify_api_version: str = "2024-10"

    external_api_key: Optional[str] = None
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    classification_timeout: float = 30.0
    intent_timeout: float = 30.0
    answer_timeout: float = 30.0
    answer_cache_ttl: float = 300.0
    answer_cache_max_size: int = 1000

    bot_name: str = "Santi"
    store_name: str = "our store"

    def __post_init__(self) -> None:
        if self.llm_provider not in _PROVIDERS:
            raise ValueError(f"llm_provider must be one of {_PROVIDERS}, got {self.llm_provider!r}")
        if not isinstance(self.llm_model, str) or not self.llm_model.strip():
            raise ValueError("llm_model must be a non-empty string")
        _validate_nonnegative_int(self.llm_max_retries, "llm_max_retries")
        if not isinstance(self.llm_retry_delay, (int, float)) or self.llm_retry_delay < 0:
            raise ValueError(f"llm_retry_delay must be >= 0, got {self.llm_retry_delay!r}")
        _validate_positive_number(self.classification_timeout, "classification_timeout")
        _validate_positive_number(self.intent_timeout, "intent_timeout")
        _validate_positive_number(self.answer_timeout, "answer_timeout")
        _validate_positive_number(self.answer_cache_ttl, "answer_cache_ttl")
        _validate_nonnegative_int(self.answer_cache_max_size, "answer_cache_max_size")
        if self.answer_cache_max_size == 0:
            raise ValueError("answer_cache_max_size must be >= 1")
        if self.returns_portal_url and not self.returns_portal_url.startswith(("http://", "https://")):
            raise ValueError("returns_portal_url must be an http(s) URL")

    @property
    def shopify_configured(self) -> bool:
        return bool(self.shopify_store_domain and self.shopify_access_token)

    @classmethod
    def from_env(cls, **overrides: object) -> "Settings":
        """
        Build settings from environment variables.

        Env:
            LLM_PROVIDER        – openai (default) or gemini
            OPENAI_API_KEY / GEMINI_API_KEY – key for the chosen provider
            LLM_MODEL           – default depends on provider (gpt-4o-mini)
            LLM_MAX_RETRIES     – default 3
            LLM_RETRY_DELAY     – default 1.0 seconds
            CORS_ORIGINS        – comma separated, default *
            *_TIMEOUT           – seconds, default 30

        Overrides (keyword args) take precedence over env.
        """

        def _str(attr: str, env: str, default: Optional[str] = None) -> Optional[str]:
            v = overrides.get(attr)
            if v is not None:
                return str(v)
            return os.environ.get(env) or default

        def _int(attr: str, env: str, default: int) -> int:
            v = overrides.get(attr)
            if v is not None:
                return int(v)
            return int(os.environ.get(env, default))

        def _float(attr: str, env: str, default: float) -> float:
            v = overrides.get(attr)
            if v is not None:
                return float(v)
            return float(os.environ.get(env, default))

        provider = (_str("llm_provider", "LLM_PROVIDER", "openai") or "openai").strip().lower()
        key_env = "GEMINI_API_KEY" if provider == "gemini" else "OPENAI_API_KEY"
        cors = overrides.get("cors_origins")
        if cors is None:
            cors = _split_csv(os.environ.get("CORS_ORIGINS", "*")) or ["*"]

        return cls(
            llm_provider=provider,
            llm_api_key=_str("llm_api_key", key_env),
            llm_model=_str("llm_model", "LLM_MODEL", _DEFAULT_MODELS.get(provider, "gpt-4o-mini")),
            llm_max_retries=_int("llm_max_retries", "LLM_MAX_RETRIES", 3),
            llm_retry_delay=_float("llm_retry_delay", "LLM_RETRY_DELAY", 1.0),
            google_maps_api_key=_str("google_maps_api_key", "GOOGLE_MAPS_API_KEY"),
            returns_portal_url=_str("returns_portal_url", "RETURNS_PORTAL_URL", "") or "",
            shopify_store_domain=_str("shopify_store_domain", "SHOPIFY_STORE_DOMAIN"),
            shopify_access_token=_str("shopify_access_token", "SHOPIFY_ACCESS_TOKEN"),
            shopify_api_version=_str("shopify_api_version", "SHOPIFY_API_VERSION", "2024-10") or "2024-10",
            external_api_key=_str("external_api_key", "EXTERNAL_API_KEY"),
            cors_origins=list(cors),
            classification_timeout=_float("classification_timeout", "CLASSIFICATION_TIMEOUT", 30.0),
            intent_timeout=_float("intent_timeout", "INTENT_TIMEOUT", 30.0),
            answer_timeout=_float("answer_timeout", "ANSWER_TIMEOUT", 30.0),
            answer_cache_ttl=_float("answer_cache_ttl", "ANSWER_CACHE_TTL", 300.0),
            answer_cache_max_size=_int("answer_cache_max_size", "ANSWER_CACHE_MAX_SIZE", 1000),
            bot_name=_str("bot_name", "BOT_NAME", "Santi") or "Santi",
            store_name=_str("store_name", "STORE_NAME", "our store") or "our store",
        )


def load_settings() -> Settings:
    """Load Settings from environment (for app lifespan)."""
    return Settings.from_env()

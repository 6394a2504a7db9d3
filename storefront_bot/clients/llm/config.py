from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass
class LLMConfig:
    """What a registry builder needs to construct one provider client."""

    model: str
    provider: Optional[str] = None
    api_key: Optional[str] = None
    # OpenAI-compatible gateways only
    base_url: Optional[str] = None
    temperature: float = 0.0
    max_tokens: Optional[int] = None
    timeout: float = 60.0

    @classmethod
    def from_settings(cls, settings: Any) -> "LLMConfig":
        return cls(
            model=settings.llm_model,
            provider=settings.llm_provider,
            api_key=settings.llm_api_key,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Builder kwargs; unset (None) fields are left to the builder's defaults."""
        return {key: value for key, value in asdict(self).items() if value is not None}

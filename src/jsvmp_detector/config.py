"""Environment-based configuration and LLM provider resolution."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pydantic import field_validator
from pydantic_settings import BaseSettings

from jsvmp_detector.constants import (
    DEFAULT_CHAR_LIMIT,
    DEFAULT_MAX_TOKENS_PER_BATCH,
    DEFAULT_TOKENIZER_MODEL,
    LITELLM_ROUTE_PREFIX,
    PROVIDER_DEFAULT_MODELS,
    LLMProvider,
)
from jsvmp_detector.logging_config import level_from_name

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Reads from .env file and environment variables.

    Constructed once at process start and passed to whatever needs it;
    nothing else in the package reads the environment.
    """

    # LLM Provider
    llm_provider: str = LLMProvider.OPENAI
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    google_api_key: str = ""

    # Model: LLM_MODEL > <PROVIDER>_MODEL > provider default
    llm_model: str = ""
    openai_model: str = ""
    anthropic_model: str = ""
    google_model: str = ""

    # Base URL: LLM_BASE_URL > <PROVIDER>_BASE_URL > provider endpoint
    llm_base_url: str = ""
    openai_base_url: str = ""
    anthropic_base_url: str = ""
    google_base_url: str = ""

    llm_timeout_seconds: int = 60

    # Detection
    char_limit: int = DEFAULT_CHAR_LIMIT
    max_tokens_per_batch: int = DEFAULT_MAX_TOKENS_PER_BATCH
    tokenizer: str = "tiktoken"
    tokenizer_model: str = DEFAULT_TOKENIZER_MODEL
    beautify: bool = True
    response_language: str = "Chinese"

    # Logging
    log_level: str = "INFO"

    @field_validator("llm_provider", mode="before")
    @classmethod
    def _normalize_provider(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("tokenizer")
    @classmethod
    def _validate_tokenizer(cls, v: str) -> str:
        if v not in ("tiktoken", "estimate"):
            raise ValueError(
                "tokenizer must be 'tiktoken' or 'estimate'"
            )
        return v

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, v: str) -> str:
        level_from_name(v)
        return v.strip().upper()

    @field_validator("char_limit", "max_tokens_per_batch")
    @classmethod
    def _validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "",
        "extra": "ignore",
    }


@dataclass(frozen=True)
class LLMConfig:
    """Resolved connection details for one provider."""

    provider: LLMProvider
    api_key: str
    model: str
    base_url: str | None = None

    @property
    def litellm_model(self) -> str:
        """Model name in litellm ``route/model`` form."""
        return f"{LITELLM_ROUTE_PREFIX[self.provider]}/{self.model}"


def validate_provider(value: str | None) -> LLMProvider | None:
    """Return the provider for a name, or None if it is not supported."""
    if value is None:
        return None
    try:
        return LLMProvider(value.strip().lower())
    except ValueError:
        return None


def resolve_llm_config(settings: Settings) -> LLMConfig | None:
    """Resolve the active provider's config, or None if unconfigured.

    An unknown provider or a missing API key both mean "not configured";
    the caller decides how to surface that.
    """
    provider = validate_provider(settings.llm_provider)
    if provider is None:
        logger.warning(
            "event=invalid_llm_provider value=%s valid=%s",
            settings.llm_provider,
            ", ".join(p.value for p in LLMProvider),
        )
        return None

    api_key: str = getattr(settings, f"{provider.value}_api_key")
    if not api_key:
        return None

    model = (
        settings.llm_model
        or getattr(settings, f"{provider.value}_model")
        or PROVIDER_DEFAULT_MODELS[provider]
    )
    base_url = settings.llm_base_url or getattr(
        settings, f"{provider.value}_base_url"
    )

    return LLMConfig(
        provider=provider,
        api_key=api_key,
        model=model,
        base_url=base_url or None,
    )


def is_llm_configured(settings: Settings) -> bool:
    """Check whether a usable LLM provider is configured."""
    return resolve_llm_config(settings) is not None

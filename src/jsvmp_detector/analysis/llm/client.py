"""Model capability: turn formatted code into a raw detection response."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from jsvmp_detector.analysis.llm._llm_call import guarded_llm_call
from jsvmp_detector.config import LLMConfig, Settings
from jsvmp_detector.prompts import build_system_prompt, build_user_prompt

logger = logging.getLogger(__name__)

AnalyzeFn = Callable[[str], Awaitable[str]]


class ModelRequestError(RuntimeError):
    """A provider call failed; the message names the provider."""


def create_model_client(config: LLMConfig, settings: Settings) -> AnalyzeFn:
    """Build an ``analyze(formatted_code) -> str`` bound to one provider."""
    system_prompt = build_system_prompt(settings.response_language)
    provider_name = config.provider.value.capitalize()

    async def analyze(formatted_code: str) -> str:
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": build_user_prompt(formatted_code)},
        ]
        try:
            result = await guarded_llm_call(
                config.litellm_model,
                messages,
                settings.llm_timeout_seconds,
                api_key=config.api_key,
                base_url=config.base_url,
            )
        except Exception as exc:
            raise ModelRequestError(
                f"{provider_name} LLM request failed: {exc}"
            ) from exc
        return result.content

    logger.debug(
        "event=model_client_created provider=%s model=%s",
        config.provider.value,
        config.model,
    )
    return analyze

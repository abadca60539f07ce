"""Token counting for batch budgets."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Protocol

import tiktoken

from jsvmp_detector.config import Settings
from jsvmp_detector.constants import (
    CHARS_PER_TOKEN_ESTIMATE,
    DEFAULT_TOKENIZER_MODEL,
)

logger = logging.getLogger(__name__)

_FALLBACK_ENCODING = "cl100k_base"


class Tokenizer(Protocol):
    """Deterministic token counter: same text, same count."""

    def count(self, text: str) -> int: ...


@lru_cache(maxsize=8)
def _encoding_for(model: str) -> tiktoken.Encoding:
    try:
        return tiktoken.encoding_for_model(model)
    except KeyError:
        logger.warning(
            "event=unknown_tokenizer_model model=%s fallback=%s",
            model,
            _FALLBACK_ENCODING,
        )
        return tiktoken.get_encoding(_FALLBACK_ENCODING)


class TiktokenTokenizer:
    """Exact counts with the BPE encoding of an OpenAI model.

    The encoding is loaded on first use, not at construction.
    """

    def __init__(self, model: str = DEFAULT_TOKENIZER_MODEL) -> None:
        self.model = model

    def count(self, text: str) -> int:
        encoding = _encoding_for(self.model)
        return len(encoding.encode(text, disallowed_special=()))


class EstimateTokenizer:
    """Offline chars-per-token estimate, rounded up."""

    def count(self, text: str) -> int:
        return -(-len(text) // CHARS_PER_TOKEN_ESTIMATE)


def get_tokenizer(settings: Settings) -> Tokenizer:
    """Build the tokenizer selected by ``settings.tokenizer``."""
    if settings.tokenizer == "estimate":
        return EstimateTokenizer()
    return TiktokenTokenizer(settings.tokenizer_model)

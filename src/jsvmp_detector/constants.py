"""Shared constants, the single source of truth for cross-module values.

StrEnum members are str-compatible, so values read straight out of a
model's JSON response compare equal to the enum members.
"""

from __future__ import annotations

from enum import StrEnum

# ── String Enums ─────────────────────────────────────────


class DetectionType(StrEnum):
    """Kinds of JSVMP structure a region can claim."""

    IF_ELSE_DISPATCHER = "If-Else Dispatcher"
    SWITCH_DISPATCHER = "Switch Dispatcher"
    INSTRUCTION_ARRAY = "Instruction Array"
    # Only emitted by the legacy flat response schema.
    STACK_OPERATION = "Stack Operation"


class ConfidenceLevel(StrEnum):
    """Qualitative confidence labels from LLM analysis."""

    ULTRA_HIGH = "ultra_high"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class LLMProvider(StrEnum):
    """Model providers the detector can be configured against."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"


class ExportFormat(StrEnum):
    """Output formats for a detection run."""

    TEXT = "text"
    JSON = "json"


class BytecodePatternType(StrEnum):
    """How the master bytecode array is laid out."""

    TWO_D_ARRAY = "2d_array"
    ONE_D_SLICE = "1d_slice"
    UNKNOWN = "unknown"


# Ordinal used as the only tie-breaker during region deduplication.
CONFIDENCE_RANK: dict[ConfidenceLevel, int] = {
    ConfidenceLevel.ULTRA_HIGH: 4,
    ConfidenceLevel.HIGH: 3,
    ConfidenceLevel.MEDIUM: 2,
    ConfidenceLevel.LOW: 1,
}

# ── Provider Defaults ────────────────────────────────────

PROVIDER_DEFAULT_MODELS: dict[LLMProvider, str] = {
    LLMProvider.OPENAI: "gpt-4o-mini",
    LLMProvider.ANTHROPIC: "claude-sonnet-4-20250514",
    LLMProvider.GOOGLE: "gemini-2.0-flash",
}

# litellm routes Google AI Studio models under the "gemini/" prefix.
LITELLM_ROUTE_PREFIX: dict[LLMProvider, str] = {
    LLMProvider.OPENAI: "openai",
    LLMProvider.ANTHROPIC: "anthropic",
    LLMProvider.GOOGLE: "gemini",
}

# ── Detection Defaults ───────────────────────────────────

DEFAULT_CHAR_LIMIT = 300
DEFAULT_MAX_TOKENS_PER_BATCH = 8000
DEFAULT_TOKENIZER_MODEL = "gpt-4o"

FALLBACK_RECOMMENDATION = (
    "Refer to the per-batch analysis results for debugging."
)

# ── Formatted Line Layout ────────────────────────────────

LINE_NUMBER_WIDTH = 5
SOURCE_POS_WIDTH = 10

# ── Circuit Breaker Configuration ────────────────────────

CB_LLM_FAILURE_THRESHOLD = 5
CB_LLM_RECOVERY_TIMEOUT = 30

# ── Rate-Limit Backoff ───────────────────────────────────

RETRY_MAX_ATTEMPTS = 3
RETRY_INITIAL_WAIT = 2
RETRY_MAX_WAIT = 30

# ── LLM Output ───────────────────────────────────────────

LLM_MAX_OUTPUT_TOKENS = 4096
LLM_TEMPERATURE = 0.1

# ── Token Estimation ────────────────────────────────────

CHARS_PER_TOKEN_ESTIMATE = 4

# ── Misc ─────────────────────────────────────────────────

ERROR_TRUNCATION_CHARS = 200
SOURCE_MAP_SUFFIX = ".map"

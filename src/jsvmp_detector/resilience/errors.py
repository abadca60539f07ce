"""Failure classification for batch errors.

Only used to label log lines; a classified failure is still recorded
and skipped like any other.
"""

from __future__ import annotations

import asyncio
from enum import Enum

from circuitbreaker import CircuitBreakerError  # pyright: ignore[reportUnknownVariableType]

from jsvmp_detector.errors import ResponseParseError


class FailureKind(Enum):
    PARSE = "parse"  # response was not valid detection JSON
    RATE_LIMITED = "rate_limited"  # 429 after backoff exhausted
    TIMEOUT = "timeout"
    SERVER = "server"  # 5xx
    CLIENT = "client"  # 4xx other than 429, e.g. bad key
    CIRCUIT_OPEN = "circuit_open"
    UNKNOWN = "unknown"


def _root_causes(error: BaseException) -> list[BaseException]:
    chain: list[BaseException] = []
    current: BaseException | None = error
    while current is not None and current not in chain:
        chain.append(current)
        current = current.__cause__
    return chain


def classify_failure(error: BaseException) -> FailureKind:
    """Classify a batch failure, looking through wrapped causes.

    Structured signals (exception type, ``status_code``) are checked on
    the whole cause chain before falling back to message text.
    """
    chain = _root_causes(error)

    for exc in chain:
        if isinstance(exc, ResponseParseError):
            return FailureKind.PARSE
        if isinstance(exc, CircuitBreakerError):
            return FailureKind.CIRCUIT_OPEN
        if isinstance(exc, (TimeoutError, asyncio.TimeoutError)):
            return FailureKind.TIMEOUT
        status_code = getattr(exc, "status_code", None)
        if isinstance(status_code, int) and not isinstance(status_code, bool):
            if status_code == 429:
                return FailureKind.RATE_LIMITED
            if 400 <= status_code < 500:
                return FailureKind.CLIENT
            if 500 <= status_code < 600:
                return FailureKind.SERVER

    msg = " ".join(str(exc) for exc in chain).lower()
    if "timeout" in msg or "timed out" in msg:
        return FailureKind.TIMEOUT
    if "429" in msg or "rate limit" in msg or "rate_limit" in msg:
        return FailureKind.RATE_LIMITED
    if any(code in msg for code in ("500", "502", "503", "504")):
        return FailureKind.SERVER
    if any(code in msg for code in ("400", "401", "403", "404")):
        return FailureKind.CLIENT

    return FailureKind.UNKNOWN

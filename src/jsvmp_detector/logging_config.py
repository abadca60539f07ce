"""Process-wide logging for the CLI and the MCP server.

Everything goes to stderr: stdout carries the detection report and, for
``jsvmp-detector mcp``, the stdio transport.

Setup is split in two because litellm configures its own loggers at
import time:

1. ``setup_logging()`` runs before litellm is imported. It sets
   ``LITELLM_LOG`` and configures the root logger.
2. ``cleanup_third_party_handlers()`` runs after all imports and strips
   the handlers litellm attached, so its records reach the root handler
   once.

Each step runs at most once per process. ``set_level()`` can be called
any number of times afterwards, e.g. once ``Settings`` or ``--verbose``
is known.
"""

import logging
import os
import sys

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s] - %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"

# Chatty at INFO; kept at WARNING regardless of the root level.
_SUPPRESSED_LOGGERS = (
    "LiteLLM",
    "LiteLLM Router",
    "LiteLLM Proxy",
    "openai._base_client",
    "httpx",
    "httpcore",
    "mcp.server.lowlevel.server",
)

_LITELLM_LOGGERS = ("LiteLLM", "LiteLLM Router", "LiteLLM Proxy")

_phase1_done = False
_phase2_done = False


def level_from_name(level: str) -> int:
    """Map a level name such as ``"debug"`` to its numeric value."""
    number = logging.getLevelNamesMapping().get(level.strip().upper())
    if number is None:
        msg = f"unknown log level: {level!r}"
        raise ValueError(msg)
    return number


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger on stderr. No-op after the first call."""
    global _phase1_done  # noqa: PLW0603
    if _phase1_done:
        return
    _phase1_done = True

    # litellm._logging reads this at import time.
    os.environ.setdefault("LITELLM_LOG", "WARNING")

    logging.basicConfig(
        level=level_from_name(level),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        stream=sys.stderr,
    )

    for name in _SUPPRESSED_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def set_level(level: str) -> None:
    """Change the root level, e.g. to ``settings.log_level``."""
    logging.getLogger().setLevel(level_from_name(level))


def cleanup_third_party_handlers() -> None:
    """Drop litellm's own handlers and let its records propagate.

    No-op after the first call.
    """
    global _phase2_done  # noqa: PLW0603
    if _phase2_done:
        return
    _phase2_done = True

    for name in _LITELLM_LOGGERS:
        lg = logging.getLogger(name)
        lg.handlers.clear()
        lg.propagate = True

"""MCP server: FastMCP instance with configure/run helpers."""

from __future__ import annotations

import logging

from fastmcp import FastMCP

from jsvmp_detector import __version__
from jsvmp_detector.config import Settings, is_llm_configured
from jsvmp_detector.mcp.tools import register_tools

logger = logging.getLogger(__name__)

mcp = FastMCP(
    name="jsvmp-detector",
    version=__version__,
    instructions=(
        "Detects JSVMP (JavaScript Virtual Machine Protection) "
        "dispatchers in JavaScript files and suggests where to "
        "set breakpoints."
    ),
)

_settings: Settings | None = None

register_tools(mcp)


def configure(settings: Settings) -> None:
    """Set the settings MCP tools run with.

    Must be called before serving requests. An unconfigured LLM is
    not fatal here: the server still starts and each tool call reports
    the problem.
    """
    global _settings  # noqa: PLW0603
    _settings = settings
    if not is_llm_configured(settings):
        logger.warning(
            "event=llm_not_configured provider=%s",
            settings.llm_provider,
        )


def get_settings() -> Settings:
    """Get the configured settings."""
    if _settings is None:
        msg = (
            "MCP server not configured. "
            "Call configure(settings) first."
        )
        raise RuntimeError(msg)
    return _settings

"""MCP front-end."""

from jsvmp_detector.mcp.server import configure, get_settings, mcp

__all__ = ["configure", "get_settings", "mcp"]

"""MCP tool definitions."""

# pyright: reportUnusedFunction=false
# All functions are registered via @mcp.tool decorator

from __future__ import annotations

import logging

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from jsvmp_detector.services.detection_service import find_jsvmp_dispatcher

logger = logging.getLogger(__name__)


def register_tools(mcp: FastMCP) -> None:
    """Register the detection tool."""

    @mcp.tool(name="find_jsvmp_dispatcher")
    async def find_jsvmp_dispatcher_tool(
        file_path: str,
        start_line: int | None = None,
        end_line: int | None = None,
        char_limit: int | None = None,
        max_tokens_per_batch: int | None = None,
    ) -> str:
        """Find JSVMP dispatchers in a JavaScript file.

        The file is beautified, split into token-bounded batches and each
        batch is analyzed by the configured LLM. Returns a text report of
        detected regions with confidence levels, VM component variables
        (instruction pointer, stack pointer, virtual stack, bytecode
        array) and suggested loop-entry and breakpoint lines.
        Optionally restrict analysis to lines start_line..end_line.
        """
        from jsvmp_detector.mcp.server import get_settings

        if (
            start_line is not None
            and end_line is not None
            and end_line < start_line
        ):
            msg = "end_line must be greater than or equal to start_line"
            raise ToolError(msg)
        for name, value in (
            ("start_line", start_line),
            ("end_line", end_line),
            ("char_limit", char_limit),
            ("max_tokens_per_batch", max_tokens_per_batch),
        ):
            if value is not None and value < 1:
                msg = f"{name} must be a positive integer"
                raise ToolError(msg)

        run = await find_jsvmp_dispatcher(
            file_path,
            get_settings(),
            start_line=start_line,
            end_line=end_line,
            char_limit=char_limit,
            max_tokens_per_batch=max_tokens_per_batch,
        )
        if not run.success or run.report is None:
            raise ToolError(run.error or "Detection failed")
        if run.partial_errors:
            logger.info(
                "event=tool_partial_success file=%s failed_batches=%d",
                file_path,
                len(run.partial_errors),
            )
        return run.report

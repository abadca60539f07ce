"""CLI entry point: ``jsvmp-detector analyze`` and ``jsvmp-detector mcp``."""

from __future__ import annotations

# Phase 1: Singleton logging, before any transitive litellm imports
from jsvmp_detector.logging_config import setup_logging

setup_logging()

import argparse  # noqa: E402
import asyncio  # noqa: E402
import sys  # noqa: E402
from pathlib import Path  # noqa: E402

from jsvmp_detector import __version__  # noqa: E402
from jsvmp_detector.config import Settings  # noqa: E402
from jsvmp_detector.constants import ExportFormat  # noqa: E402
from jsvmp_detector.logging_config import (  # noqa: E402
    cleanup_third_party_handlers,
    set_level,
)

# Phase 2: Clear litellm's duplicate handlers after all imports
cleanup_third_party_handlers()


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"jsvmp-detector {__version__}")
        return

    if args.command == "analyze":
        _run_analyze(args)
    elif args.command == "mcp":
        _run_mcp(args)
    else:
        parser.print_help()


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        msg = f"invalid integer: {value!r}"
        raise argparse.ArgumentTypeError(msg) from None
    if number < 1:
        msg = f"must be a positive integer: {value}"
        raise argparse.ArgumentTypeError(msg)
    return number


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="jsvmp-detector",
        description=(
            "Detect JSVMP dispatchers in JavaScript files "
            "with LLM-assisted analysis."
        ),
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )

    sub = parser.add_subparsers(dest="command")

    analyze = sub.add_parser(
        "analyze",
        help="Analyze a JavaScript file",
    )
    analyze.add_argument(
        "file_path",
        type=str,
        help="Path to the JavaScript file",
    )
    analyze.add_argument(
        "--start-line",
        type=_positive_int,
        default=None,
        help="First beautified line to analyze (default: 1)",
    )
    analyze.add_argument(
        "--end-line",
        type=_positive_int,
        default=None,
        help="Last beautified line to analyze (default: last line)",
    )
    analyze.add_argument(
        "--char-limit",
        type=_positive_int,
        default=None,
        help="String literal truncation limit (default: from settings)",
    )
    analyze.add_argument(
        "--max-tokens-per-batch",
        type=_positive_int,
        default=None,
        help="Token budget per batch (default: from settings)",
    )
    analyze.add_argument(
        "--format",
        "-f",
        choices=[f.value for f in ExportFormat],
        default=ExportFormat.TEXT.value,
        help="Output format (default: text)",
    )
    analyze.add_argument(
        "--output",
        "-o",
        default=None,
        help="Write the report to this file instead of stdout",
    )
    analyze.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output",
    )

    mcp_parser = sub.add_parser(
        "mcp",
        help="Start MCP server",
    )
    mcp_parser.add_argument(
        "--transport",
        "-t",
        choices=["stdio", "sse"],
        default="stdio",
        help="Transport protocol (default: stdio)",
    )
    mcp_parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Bind address for SSE transport (default: 127.0.0.1)",
    )
    mcp_parser.add_argument(
        "--port",
        type=int,
        default=8001,
        help="Port for SSE transport (default: 8001)",
    )

    return parser


def _run_analyze(args: argparse.Namespace) -> None:
    """Execute the analyze command."""
    from jsvmp_detector.analysis.llm.processor import BatchProgress
    from jsvmp_detector.export import export_run
    from jsvmp_detector.services.detection_service import (
        find_jsvmp_dispatcher,
    )

    if (
        args.start_line is not None
        and args.end_line is not None
        and args.end_line < args.start_line
    ):
        print(
            "Error: --end-line must be >= --start-line",
            file=sys.stderr,
        )
        sys.exit(1)

    settings = Settings()
    set_level("DEBUG" if args.verbose else settings.log_level)

    def on_progress(event: BatchProgress) -> None:
        if args.verbose:
            status = "ok" if event.ok else "FAILED"
            print(
                f"  [{status}] batch {event.index + 1}/{event.total} "
                f"(lines {event.batch.line_range}, "
                f"{event.duration_ms:.0f}ms)",
                file=sys.stderr,
            )

    run = asyncio.run(
        find_jsvmp_dispatcher(
            args.file_path,
            settings,
            start_line=args.start_line,
            end_line=args.end_line,
            char_limit=args.char_limit,
            max_tokens_per_batch=args.max_tokens_per_batch,
            on_progress=on_progress,
        )
    )

    output = export_run(run, args.format)
    if args.output:
        Path(args.output).write_text(output + "\n", encoding="utf-8")
        print(f"Output: {args.output}", file=sys.stderr)
    elif run.success or args.format == ExportFormat.JSON:
        print(output)

    if not run.success:
        print(f"Error: {run.error}", file=sys.stderr)
        sys.exit(1)

    for err in run.partial_errors:
        print(f"Warning: {err}", file=sys.stderr)


def _run_mcp(args: argparse.Namespace) -> None:
    """Start the MCP server."""
    settings = Settings()
    set_level(settings.log_level)
    asyncio.run(_setup_and_run_mcp(settings, args.transport, args.host, args.port))


async def _setup_and_run_mcp(
    settings: Settings,
    transport: str = "stdio",
    host: str = "127.0.0.1",
    port: int = 8001,
) -> None:
    """Configure the MCP server and serve until shutdown."""
    from jsvmp_detector.mcp.server import configure, mcp

    configure(settings)
    if transport == "stdio":
        await mcp.run_async(transport="stdio")
    else:
        await mcp.run_async(transport="sse", host=host, port=port)


if __name__ == "__main__":
    main()

"""Detection orchestration: format, batch, analyze, merge, report."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path

from jsvmp_detector.analysis.llm.client import create_model_client
from jsvmp_detector.analysis.llm.merger import merge_detection_results
from jsvmp_detector.analysis.llm.processor import (
    ProgressCallback,
    process_batches,
)
from jsvmp_detector.analysis.llm.schemas import DetectionResult
from jsvmp_detector.config import Settings, resolve_llm_config
from jsvmp_detector.errors import (
    AllBatchesFailedError,
    ConfigurationError,
    InputFileError,
)
from jsvmp_detector.export.text_report import format_detection_report
from jsvmp_detector.ingestion.batcher import create_batches
from jsvmp_detector.ingestion.beautifier import Beautifier, get_beautifier
from jsvmp_detector.ingestion.formatter import (
    format_entire_file,
    select_line_range,
)
from jsvmp_detector.ingestion.tokenizer import Tokenizer, get_tokenizer

logger = logging.getLogger(__name__)

NOT_CONFIGURED_MESSAGE = (
    "LLM is not configured. Set OPENAI_API_KEY (or LLM_PROVIDER with the "
    "matching ANTHROPIC_API_KEY / GOOGLE_API_KEY) to enable JSVMP "
    "dispatcher detection."
)


@dataclass
class DetectionRunResult:
    """Outcome of one detection run over a file."""

    success: bool
    file_path: str
    total_lines: int = 0
    batch_count: int = 0
    result: DetectionResult | None = None
    report: str | None = None
    error: str | None = None
    partial_errors: list[str] = field(
        default_factory=lambda: list[str]()
    )
    duration_ms: float = 0.0


async def find_jsvmp_dispatcher(
    file_path: str | Path,
    settings: Settings,
    *,
    start_line: int | None = None,
    end_line: int | None = None,
    char_limit: int | None = None,
    max_tokens_per_batch: int | None = None,
    analyze: Callable[[str], Awaitable[str]] | None = None,
    beautifier: Beautifier | None = None,
    tokenizer: Tokenizer | None = None,
    on_progress: ProgressCallback | None = None,
) -> DetectionRunResult:
    """Run the full detection pipeline over one file.

    Never raises for expected failures: configuration, missing input and
    total batch failure all come back as ``success=False`` with an
    ``error`` message. Partial failures are listed in ``partial_errors``
    alongside a successful report.

    ``analyze``, ``beautifier`` and ``tokenizer`` default to the
    implementations selected by ``settings``.
    """
    t0 = time.monotonic()
    path = Path(file_path)
    run = DetectionRunResult(success=False, file_path=str(file_path))

    try:
        if analyze is None:
            analyze = _default_analyze(settings)
        _check_input(path)

        formatted = await asyncio.to_thread(
            format_entire_file,
            path,
            beautifier or get_beautifier(settings),
            char_limit if char_limit is not None else settings.char_limit,
        )
        run.total_lines = formatted.total_lines

        lines = formatted.lines
        if start_line is not None or end_line is not None:
            lines = select_line_range(
                lines,
                start_line if start_line is not None else 1,
                end_line if end_line is not None else formatted.total_lines,
            )

        batches = create_batches(
            [line.render() for line in lines],
            max_tokens_per_batch
            if max_tokens_per_batch is not None
            else settings.max_tokens_per_batch,
            tokenizer or get_tokenizer(settings),
        )
        run.batch_count = len(batches)

        batch_run = await process_batches(analyze, batches, on_progress)
        run.partial_errors = batch_run.errors
        if batches and not batch_run.results:
            raise AllBatchesFailedError(batch_run.errors)

        merged = merge_detection_results(batch_run.results)
        run.result = merged
        run.report = format_detection_report(
            merged, str(file_path), run.total_lines, run.batch_count
        )
        run.success = True
    except (ConfigurationError, InputFileError, AllBatchesFailedError) as exc:
        run.error = str(exc)
        logger.warning(
            "event=detection_failed file=%s error_type=%s error=%s",
            path,
            type(exc).__name__,
            exc,
        )
    except Exception as exc:
        run.error = str(exc)
        logger.exception("event=detection_error file=%s", path)

    run.duration_ms = (time.monotonic() - t0) * 1000
    if run.success:
        logger.info(
            "event=detection_complete file=%s lines=%d batches=%d "
            "regions=%d failed_batches=%d duration_ms=%.0f",
            path,
            run.total_lines,
            run.batch_count,
            len(run.result.regions) if run.result else 0,
            len(run.partial_errors),
            run.duration_ms,
        )
    return run


def _default_analyze(settings: Settings) -> Callable[[str], Awaitable[str]]:
    config = resolve_llm_config(settings)
    if config is None:
        raise ConfigurationError(NOT_CONFIGURED_MESSAGE)
    return create_model_client(config, settings)


def _check_input(path: Path) -> None:
    if not path.is_file():
        raise InputFileError(f"File not found: {path}")

"""Send batches to the model one at a time and collect parsed results."""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from jsvmp_detector.analysis.llm.parser import parse_detection_result
from jsvmp_detector.analysis.llm.schemas import DetectionResult
from jsvmp_detector.constants import ERROR_TRUNCATION_CHARS
from jsvmp_detector.ingestion.schemas import Batch
from jsvmp_detector.resilience.errors import classify_failure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchProgress:
    """Emitted after each batch, whether it succeeded or not."""

    index: int
    total: int
    batch: Batch
    ok: bool
    duration_ms: float
    error: str | None = None

    @property
    def percent(self) -> float:
        return round((self.index + 1) / self.total * 100, 1)


type ProgressCallback = Callable[[BatchProgress], None]


@dataclass
class BatchRunResult:
    """Successful results in batch order, plus one message per failed batch."""

    results: list[DetectionResult] = field(
        default_factory=lambda: list[DetectionResult]()
    )
    errors: list[str] = field(default_factory=lambda: list[str]())


def format_batch_error(index: int, batch: Batch, message: str) -> str:
    return (
        f"Batch {index + 1} (lines {batch.start_line}-{batch.end_line}) "
        f"failed: {message}"
    )


async def process_batches(
    analyze: Callable[[str], Awaitable[str]],
    batches: list[Batch],
    on_progress: ProgressCallback | None = None,
) -> BatchRunResult:
    """Analyze batches strictly in order; a failed batch never stops the run.

    Both a raising ``analyze`` call and an unparseable response count as
    a batch failure. There is no retry at this level.
    """
    run = BatchRunResult()
    total = len(batches)

    for index, batch in enumerate(batches):
        t0 = time.monotonic()
        error: str | None = None
        try:
            raw = await analyze(batch.content)
            run.results.append(parse_detection_result(raw))
        except Exception as exc:
            error = format_batch_error(index, batch, str(exc))
            run.errors.append(error)
            logger.warning(
                "event=batch_failed batch=%d lines=%s kind=%s error=%s",
                index + 1,
                batch.line_range,
                classify_failure(exc).value,
                str(exc)[:ERROR_TRUNCATION_CHARS],
            )
        duration_ms = (time.monotonic() - t0) * 1000

        if error is None:
            logger.info(
                "event=batch_complete batch=%d/%d lines=%s duration_ms=%.0f",
                index + 1,
                total,
                batch.line_range,
                duration_ms,
            )

        if on_progress is not None:
            on_progress(
                BatchProgress(
                    index=index,
                    total=total,
                    batch=batch,
                    ok=error is None,
                    duration_ms=duration_ms,
                    error=error,
                )
            )

    logger.info(
        "event=batches_processed total=%d succeeded=%d failed=%d",
        total,
        len(run.results),
        len(run.errors),
    )
    return run

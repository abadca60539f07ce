"""Merge per-batch detection results into one file-level result."""

from __future__ import annotations

import logging

from jsvmp_detector.analysis.llm.schemas import (
    DetectionRegion,
    DetectionResult,
    DetectionSummary,
    GlobalBytecodeInfo,
)
from jsvmp_detector.constants import CONFIDENCE_RANK, FALLBACK_RECOMMENDATION

logger = logging.getLogger(__name__)


def merge_detection_results(
    results: list[DetectionResult],
) -> DetectionResult:
    """Combine batch results in order.

    Summaries are concatenated with a ``[Batch N]`` prefix, the first
    named global bytecode wins, and regions are sorted by start line and
    deduplicated so that overlapping claims collapse to the most
    confident one.
    """
    if not results:
        return DetectionResult(summary="", regions=[])

    regions = deduplicate_regions(
        [region for result in results for region in result.regions]
    )

    if len(results) == 1:
        only = results[0]
        return DetectionResult(
            summary=only.summary,
            global_bytecode=only.global_bytecode,
            regions=regions,
        )

    overall = "\n".join(
        f"[Batch {i + 1}] {result.summary_text}"
        for i, result in enumerate(results)
    )
    last_summary = results[-1].summary
    recommendation = (
        last_summary.debugging_recommendation
        if isinstance(last_summary, DetectionSummary)
        else FALLBACK_RECOMMENDATION
    )

    merged = DetectionResult(
        summary=DetectionSummary(
            overall_description=overall,
            debugging_recommendation=recommendation,
        ),
        global_bytecode=_first_named_bytecode(results),
        regions=regions,
    )
    logger.debug(
        "event=results_merged batches=%d regions=%d",
        len(results),
        len(regions),
    )
    return merged


def deduplicate_regions(
    regions: list[DetectionRegion],
) -> list[DetectionRegion]:
    """Stable-sort by start, then greedily keep first-seen non-overlapping.

    A later region that overlaps an accepted one replaces it only on
    strictly higher confidence; ties keep the earlier region.
    """
    accepted: list[DetectionRegion] = []
    for region in sorted(regions, key=lambda r: r.start):
        for i, kept in enumerate(accepted):
            if kept.overlaps(region):
                if (
                    CONFIDENCE_RANK[region.confidence]
                    > CONFIDENCE_RANK[kept.confidence]
                ):
                    accepted[i] = region
                break
        else:
            accepted.append(region)
    return accepted


def _first_named_bytecode(
    results: list[DetectionResult],
) -> GlobalBytecodeInfo | None:
    for result in results:
        info = result.global_bytecode
        if info is not None and info.variable_name:
            return info
    return None

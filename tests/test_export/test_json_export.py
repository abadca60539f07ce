"""Tests for JSON export and format dispatch."""

from __future__ import annotations

import json

import pytest

from jsvmp_detector.analysis.llm.schemas import (
    DetectionRegion,
    DetectionResult,
)
from jsvmp_detector.constants import ConfidenceLevel, DetectionType
from jsvmp_detector.export import export_json, export_run
from jsvmp_detector.services.detection_service import DetectionRunResult


def _successful_run() -> DetectionRunResult:
    result = DetectionResult(
        summary="found",
        regions=[
            DetectionRegion(
                start=1,
                end=5,
                type=DetectionType.IF_ELSE_DISPATCHER,
                confidence=ConfidenceLevel.ULTRA_HIGH,
                description="nested ifs",
            )
        ],
    )
    return DetectionRunResult(
        success=True,
        file_path="a.js",
        total_lines=5,
        batch_count=1,
        result=result,
        report="REPORT",
        partial_errors=["Batch 2 (lines 6-9) failed: boom"],
    )


class TestExportJson:
    def test_envelope(self) -> None:
        data = json.loads(export_json(_successful_run()))
        assert data["success"] is True
        assert data["file_path"] == "a.js"
        assert data["batch_count"] == 1
        assert data["partial_errors"] == ["Batch 2 (lines 6-9) failed: boom"]
        assert "generated_at" in data
        region = data["result"]["regions"][0]
        assert region["type"] == "If-Else Dispatcher"
        assert region["confidence"] == "ultra_high"

    def test_failed_run(self) -> None:
        run = DetectionRunResult(
            success=False, file_path="a.js", error="File not found: a.js"
        )
        data = json.loads(export_json(run))
        assert data["result"] is None
        assert data["error"] == "File not found: a.js"


class TestExportRun:
    def test_text_returns_report(self) -> None:
        assert export_run(_successful_run(), "text") == "REPORT"

    def test_text_for_failure(self) -> None:
        run = DetectionRunResult(success=False, file_path="a.js", error="nope")
        assert export_run(run) == "Error: nope"

    def test_json(self) -> None:
        assert json.loads(export_run(_successful_run(), "json"))["success"]

    def test_unknown_format(self) -> None:
        with pytest.raises(ValueError, match="Unsupported format"):
            export_run(_successful_run(), "pdf")

"""Export formats: text report and JSON envelope."""

from __future__ import annotations

from typing import TYPE_CHECKING

from jsvmp_detector.constants import ExportFormat
from jsvmp_detector.export.json_export import export_json
from jsvmp_detector.export.text_report import format_detection_report

if TYPE_CHECKING:
    from jsvmp_detector.services.detection_service import DetectionRunResult

__all__ = [
    "export_json",
    "export_run",
    "format_detection_report",
]


def export_run(run: DetectionRunResult, fmt: str = "text") -> str:
    """Render a run in the requested format.

    Text output for a failed run is its error message.
    """
    if fmt == ExportFormat.JSON:
        return export_json(run)
    if fmt != ExportFormat.TEXT:
        valid = ", ".join(ExportFormat)
        msg = f"Unsupported format: {fmt}. Use: {valid}"
        raise ValueError(msg)
    if run.report is not None:
        return run.report
    return f"Error: {run.error}"

"""JSON export: a structured envelope around a detection run."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from jsvmp_detector.services.detection_service import DetectionRunResult


def export_json(run: DetectionRunResult) -> str:
    """Serialize a run, including the merged result when there is one."""
    payload: dict[str, Any] = {
        "file_path": run.file_path,
        "generated_at": datetime.now(UTC).isoformat(),
        "success": run.success,
        "total_lines": run.total_lines,
        "batch_count": run.batch_count,
        "error": run.error,
        "partial_errors": run.partial_errors,
        "result": (
            run.result.model_dump(mode="json")
            if run.result is not None
            else None
        ),
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)

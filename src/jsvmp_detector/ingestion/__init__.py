"""Ingestion: beautify, truncate, number and batch JavaScript source."""

from jsvmp_detector.ingestion.batcher import (
    create_batches,
    extract_line_number,
    split_by_token_limit,
)
from jsvmp_detector.ingestion.formatter import (
    format_code_for_analysis,
    format_entire_file,
    format_lines,
)
from jsvmp_detector.ingestion.schemas import (
    Batch,
    FormattedCode,
    FormattedFile,
    FormattedLine,
)

__all__ = [
    "Batch",
    "FormattedCode",
    "FormattedFile",
    "FormattedLine",
    "create_batches",
    "extract_line_number",
    "format_code_for_analysis",
    "format_entire_file",
    "format_lines",
    "split_by_token_limit",
]

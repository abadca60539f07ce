"""Turn beautified source into stable, line-addressable model input.

Each output line is ``LineNo SourceLoc Code``: the 1-based beautified line
number, the original ``L{line}:{column}`` when a source map resolves
column 0 of that line, and the code itself.
"""

from __future__ import annotations

from pathlib import Path

from jsvmp_detector.constants import DEFAULT_CHAR_LIMIT
from jsvmp_detector.ingestion.beautifier import Beautifier
from jsvmp_detector.ingestion.schemas import (
    FormattedCode,
    FormattedFile,
    FormattedLine,
)
from jsvmp_detector.ingestion.source_map import SourceMap
from jsvmp_detector.ingestion.truncator import truncate_long_strings


def format_lines(
    code: str, source_map: SourceMap | None = None
) -> list[FormattedLine]:
    """One FormattedLine per ``\\n``-separated line, in order."""
    formatted: list[FormattedLine] = []
    for index, text in enumerate(code.split("\n")):
        line_number = index + 1
        source_line: int | None = None
        source_column: int | None = None
        if source_map is not None:
            original = source_map.original_position_for(line_number, 0)
            if original is not None:
                source_line = original.line
                source_column = original.column
        formatted.append(
            FormattedLine(
                line_number=line_number,
                source_line=source_line,
                source_column=source_column,
                code=text,
            )
        )
    return formatted


def clamp_line_range(
    start_line: int, end_line: int, total_lines: int
) -> tuple[int, int]:
    """Clamp start into [1, total], then end into [start, total]."""
    start = max(1, min(total_lines, start_line))
    end = max(start, min(total_lines, end_line))
    return start, end


def select_line_range(
    lines: list[FormattedLine], start_line: int, end_line: int
) -> list[FormattedLine]:
    """Inclusive, clamped slice of an already formatted file."""
    if not lines:
        return []
    start, end = clamp_line_range(start_line, end_line, len(lines))
    return lines[start - 1 : end]


def format_entire_file(
    file_path: Path,
    beautifier: Beautifier,
    char_limit: int = DEFAULT_CHAR_LIMIT,
) -> FormattedFile:
    """Beautify, truncate long strings, then number every line."""
    result = beautifier.beautify(file_path)
    code = truncate_long_strings(result.code, char_limit)
    lines = format_lines(code, result.source_map)
    return FormattedFile(lines=lines, total_lines=len(lines))


def format_code_for_analysis(
    file_path: Path,
    start_line: int,
    end_line: int,
    beautifier: Beautifier,
    char_limit: int = DEFAULT_CHAR_LIMIT,
) -> FormattedCode:
    """Format only ``[start_line, end_line]`` (clamped) of a file."""
    formatted = format_entire_file(file_path, beautifier, char_limit)
    start, end = clamp_line_range(
        start_line, end_line, formatted.total_lines
    )
    selected = formatted.lines[start - 1 : end]
    return FormattedCode(
        content="\n".join(line.render() for line in selected),
        total_lines=formatted.total_lines,
        start_line=start,
        end_line=end,
    )

"""Value objects for the formatting and batching data flow."""

from __future__ import annotations

from dataclasses import dataclass, field

from jsvmp_detector.constants import LINE_NUMBER_WIDTH, SOURCE_POS_WIDTH


def format_source_position(
    line: int | None, column: int | None
) -> str:
    """``L{line}:{column}`` when both coordinates are known, else ''."""
    if line is not None and column is not None:
        return f"L{line}:{column}"
    return ""


@dataclass(frozen=True, slots=True)
class FormattedLine:
    """One beautified source line, addressed by its 1-based position."""

    line_number: int
    source_line: int | None
    source_column: int | None
    code: str

    def render(self) -> str:
        """Wire form sent to the model: ``LineNo SourceLoc Code``."""
        pos = format_source_position(self.source_line, self.source_column)
        return (
            f"{self.line_number:>{LINE_NUMBER_WIDTH}} "
            f"{pos:<{SOURCE_POS_WIDTH}} {self.code}"
        )


@dataclass(frozen=True)
class FormattedFile:
    """Every formatted line of a file."""

    lines: list[FormattedLine] = field(
        default_factory=lambda: list[FormattedLine]()
    )
    total_lines: int = 0


@dataclass(frozen=True)
class FormattedCode:
    """A clamped line range of a file, already rendered."""

    content: str
    total_lines: int
    start_line: int
    end_line: int


@dataclass(frozen=True)
class Batch:
    """A contiguous, token-bounded slice of the formatted source."""

    start_line: int
    end_line: int
    content: str
    token_count: int

    def __post_init__(self) -> None:
        if self.start_line > self.end_line:
            msg = (
                f"batch start_line {self.start_line} is after "
                f"end_line {self.end_line}"
            )
            raise ValueError(msg)

    @property
    def line_range(self) -> str:
        return f"{self.start_line}-{self.end_line}"

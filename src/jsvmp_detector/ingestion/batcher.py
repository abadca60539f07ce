"""Split formatted lines into contiguous, token-bounded batches."""

from __future__ import annotations

import logging
import re

from jsvmp_detector.ingestion.schemas import Batch
from jsvmp_detector.ingestion.tokenizer import Tokenizer

logger = logging.getLogger(__name__)

_LINE_NUMBER_RE = re.compile(r"^\s*(\d+)")


def extract_line_number(formatted_line: str) -> int:
    """Read the leading line number of a ``LineNo SourceLoc Code`` line."""
    match = _LINE_NUMBER_RE.match(formatted_line)
    if match is None:
        msg = f"formatted line has no line number: {formatted_line[:40]!r}"
        raise ValueError(msg)
    return int(match.group(1))


def split_by_token_limit(
    lines: list[str],
    max_tokens: int,
    tokenizer: Tokenizer,
) -> list[list[str]]:
    """Greedily pack whole lines into groups of at most ``max_tokens``.

    A line is costed together with its newline. A line that alone is over
    budget becomes a singleton group; lines are never split.
    """
    if max_tokens <= 0:
        raise ValueError("max_tokens must be a positive integer")

    groups: list[list[str]] = []
    current: list[str] = []
    current_tokens = 0

    for line in lines:
        line_tokens = tokenizer.count(line + "\n")

        if line_tokens > max_tokens:
            if current:
                groups.append(current)
                current = []
                current_tokens = 0
            groups.append([line])
            logger.debug(
                "event=oversized_line tokens=%d budget=%d",
                line_tokens,
                max_tokens,
            )
            continue

        if current and current_tokens + line_tokens > max_tokens:
            groups.append(current)
            current = []
            current_tokens = 0

        current.append(line)
        current_tokens += line_tokens

    if current:
        groups.append(current)
    return groups


def create_batches(
    formatted_lines: list[str],
    max_tokens_per_batch: int,
    tokenizer: Tokenizer,
) -> list[Batch]:
    """Build Batch records, taking each range from the embedded line numbers."""
    groups = split_by_token_limit(
        formatted_lines, max_tokens_per_batch, tokenizer
    )
    batches: list[Batch] = []
    for group in groups:
        content = "\n".join(group)
        batches.append(
            Batch(
                start_line=extract_line_number(group[0]),
                end_line=extract_line_number(group[-1]),
                content=content,
                token_count=tokenizer.count(content),
            )
        )
    logger.info(
        "event=batches_created lines=%d batches=%d budget=%d",
        len(formatted_lines),
        len(batches),
        max_tokens_per_batch,
    )
    return batches

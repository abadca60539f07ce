"""Bound the length of JavaScript string literals before line numbering.

Obfuscated bundles routinely embed bytecode or lookup tables as huge
string literals; sending them verbatim would blow every token budget.
Truncation is lossy on purpose. Line breaks are never dropped, so the
beautified line numbers (and any source map over them) stay valid.

Literal spans come from the esprima tokenizer, so quotes inside regular
expressions and comments are never mistaken for string delimiters.
"""

from __future__ import annotations

import logging
from typing import Any

import esprima  # pyright: ignore[reportMissingTypeStubs]
from esprima.error_handler import Error as EsprimaError  # pyright: ignore[reportMissingTypeStubs]

logger = logging.getLogger(__name__)

_LITERAL_TOKENS = frozenset({"String", "Template"})


def truncate_long_strings(code: str, char_limit: int) -> str:
    """Shorten every string literal whose body exceeds ``char_limit``.

    The kept prefix is followed by ``...[+N chars]``. Template literals
    are shortened piece by piece between substitutions. Code that does
    not tokenize is returned unchanged.
    """
    if char_limit <= 0:
        raise ValueError("char_limit must be a positive integer")

    try:
        tokens: list[Any] = esprima.tokenize(code, range=True)
    except EsprimaError as exc:
        logger.warning(
            "event=truncation_skipped reason=tokenize_failed error=%s", exc
        )
        return code

    parts: list[str] = []
    pos = 0
    truncated = 0
    for token in tokens:
        if token.type not in _LITERAL_TOKENS:
            continue
        start, end = token.range
        literal = code[start:end]
        shortened = _shorten(literal, char_limit)
        if shortened is literal:
            continue
        parts.append(code[pos:start])
        parts.append(shortened)
        pos = end
        truncated += 1

    if not truncated:
        return code
    parts.append(code[pos:])
    logger.debug("event=strings_truncated count=%d", truncated)
    return "".join(parts)


def _delimiters(literal: str) -> tuple[int, int]:
    """Lengths of the opening and closing delimiters of a literal token.

    Template pieces open with a backtick or ``}`` and close with a
    backtick or ``${``.
    """
    if literal[0] in "'\"":
        return 1, 1
    return 1, 2 if literal.endswith("${") else 1


def _shorten(literal: str, char_limit: int) -> str:
    opening, closing = _delimiters(literal)
    body = literal[opening : len(literal) - closing]
    if len(body) <= char_limit:
        return literal

    kept = body[:char_limit]
    # Don't leave a dangling escape at the cut.
    trailing = len(kept) - len(kept.rstrip("\\"))
    if trailing % 2:
        kept = kept[:-1]
    removed = body[len(kept) :]
    return (
        f"{literal[:opening]}{kept}...[+{len(removed)} chars]"
        f"{literal[len(literal) - closing :]}"
        + "\n" * removed.count("\n")
    )

"""Project beautified lines back to the input through a Source Map v3.

Decoding is done by ``sourcemap``; this module adapts its 0-based token
lookup to the 1-based line numbers the formatter works with.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

import sourcemap  # pyright: ignore[reportMissingTypeStubs]


@dataclass(frozen=True)
class OriginalPosition:
    """Where a generated position came from (line 1-based, column 0-based)."""

    source: str | None
    line: int
    column: int
    name: str | None = None


class SourceMap:
    """A decoded source map answering generated-position lookups."""

    def __init__(self, index: Any) -> None:
        self._index = index

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> SourceMap:
        if "sections" in raw:
            raise ValueError("indexed source maps are not supported")
        if not isinstance(raw.get("mappings"), str):
            raise ValueError("source map has no 'mappings' string")
        # ``names`` and ``sources`` are optional in practice.
        normalized = {"sources": [], "names": [], **raw}
        try:
            index = sourcemap.loads(json.dumps(normalized))
        except (KeyError, TypeError, IndexError) as exc:
            msg = f"malformed source map: {exc!r}"
            raise ValueError(msg) from exc
        return cls(index)

    @classmethod
    def from_json(cls, text: str) -> SourceMap:
        data: Any = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("source map must be a JSON object")
        return cls.from_dict(cast(dict[str, Any], data))

    @classmethod
    def from_file(cls, path: Path) -> SourceMap:
        return cls.from_json(path.read_text(encoding="utf-8"))

    def original_position_for(
        self, line: int, column: int = 0
    ) -> OriginalPosition | None:
        """Resolve a generated (1-based line, 0-based column).

        Picks the closest mapping at or before ``column`` on the same
        generated line; returns None when there is none or it carries no
        source.
        """
        if line < 1 or column < 0:
            return None
        try:
            token = self._index.lookup(line - 1, column)
        except IndexError:
            return None
        if token.src is None:
            return None
        return OriginalPosition(
            source=token.src,
            line=token.src_line + 1,
            column=token.src_col,
            name=token.name,
        )

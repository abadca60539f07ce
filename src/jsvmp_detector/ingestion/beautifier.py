"""Produce the beautified text (and optional source map) the formatter reads."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import jsbeautifier

from jsvmp_detector.config import Settings
from jsvmp_detector.constants import SOURCE_MAP_SUFFIX
from jsvmp_detector.ingestion.source_map import SourceMap

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BeautifyResult:
    """Beautified code plus a map back to the original, if one exists."""

    code: str
    source_map: SourceMap | None = None


class Beautifier(Protocol):
    def beautify(self, file_path: Path) -> BeautifyResult: ...


class JsBeautifier:
    """Re-indent minified JavaScript with jsbeautifier (no source map)."""

    def __init__(self, indent_size: int = 2) -> None:
        self._indent_size = indent_size

    def beautify(self, file_path: Path) -> BeautifyResult:
        source = _read_source(file_path)
        opts = jsbeautifier.default_options()
        opts.indent_size = self._indent_size
        opts.preserve_newlines = True
        code: str = jsbeautifier.beautify(source, opts)
        logger.debug(
            "event=beautified file=%s chars_in=%d chars_out=%d",
            file_path,
            len(source),
            len(code),
        )
        return BeautifyResult(code=code)


class PrebeautifiedSource:
    """Use a file that is already formatted, with its sidecar ``.map``."""

    def beautify(self, file_path: Path) -> BeautifyResult:
        code = _read_source(file_path)
        map_path = file_path.with_name(file_path.name + SOURCE_MAP_SUFFIX)
        if not map_path.is_file():
            return BeautifyResult(code=code)
        try:
            source_map = SourceMap.from_file(map_path)
        except (OSError, ValueError):
            logger.warning(
                "event=source_map_unreadable path=%s",
                map_path,
                exc_info=True,
            )
            return BeautifyResult(code=code)
        return BeautifyResult(code=code, source_map=source_map)


def get_beautifier(settings: Settings) -> Beautifier:
    """Pick the beautifier selected by ``settings.beautify``."""
    if settings.beautify:
        return JsBeautifier()
    return PrebeautifiedSource()


def _read_source(path: Path) -> str:
    with open(path, encoding="utf-8", errors="replace") as f:
        return f.read()

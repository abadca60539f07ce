"""Tests for source map loading and position lookup."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from jsvmp_detector.ingestion.source_map import SourceMap


def _map(mappings: str, **extra: object) -> SourceMap:
    return SourceMap.from_dict(
        {"version": 3, "sources": ["min.js"], "mappings": mappings, **extra}
    )


class TestOriginalPositionFor:
    @pytest.fixture
    def smap(self) -> SourceMap:
        # line 1: col 0 -> (0,0) named "a"; col 4 -> (0,2)
        # line 2: col 0 -> (1,0)
        return _map("AAAAA,IAAE;AACF", names=["a"])

    def test_exact_column(self, smap: SourceMap) -> None:
        pos = smap.original_position_for(1, 0)
        assert pos is not None
        assert (pos.source, pos.line, pos.column, pos.name) == (
            "min.js",
            1,
            0,
            "a",
        )

    def test_greatest_lower_bound(self, smap: SourceMap) -> None:
        pos = smap.original_position_for(1, 6)
        assert pos is not None
        assert (pos.line, pos.column) == (1, 2)

    def test_second_line(self, smap: SourceMap) -> None:
        pos = smap.original_position_for(2)
        assert pos is not None
        assert (pos.line, pos.column) == (2, 0)

    def test_out_of_range_line(self, smap: SourceMap) -> None:
        assert smap.original_position_for(3) is None
        assert smap.original_position_for(0) is None

    def test_column_before_first_mapping(self) -> None:
        assert _map("EAAA").original_position_for(1, 0) is None


class TestLoading:
    def test_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "a.js.map"
        path.write_text(
            json.dumps(
                {"version": 3, "sources": ["a.js"], "mappings": "AAAA"}
            ),
            encoding="utf-8",
        )
        smap = SourceMap.from_file(path)
        assert smap.original_position_for(1) is not None

    def test_rejects_indexed_map(self) -> None:
        with pytest.raises(ValueError, match="indexed"):
            SourceMap.from_dict({"version": 3, "sections": []})

    def test_rejects_missing_mappings(self) -> None:
        with pytest.raises(ValueError, match="mappings"):
            SourceMap.from_dict({"version": 3})

    def test_rejects_non_object(self) -> None:
        with pytest.raises(ValueError, match="object"):
            SourceMap.from_json("[]")

"""Tests for token-bounded batch splitting."""

from __future__ import annotations

import pytest

from jsvmp_detector.ingestion.batcher import (
    create_batches,
    extract_line_number,
    split_by_token_limit,
)
from jsvmp_detector.ingestion.formatter import format_lines
from tests.conftest import FakeTokenizer


class TestExtractLineNumber:
    def test_padded(self) -> None:
        assert extract_line_number("   12 L1:2       code") == 12

    def test_unpadded(self) -> None:
        assert extract_line_number("7 x") == 7

    def test_no_number(self) -> None:
        with pytest.raises(ValueError, match="no line number"):
            extract_line_number("var a = 1;")


class TestSplitByTokenLimit:
    def test_greedy_packing(self) -> None:
        # each line costs 5 (4 chars + newline)
        groups = split_by_token_limit(
            ["aaaa", "bbbb", "cccc"], 10, FakeTokenizer()
        )
        assert groups == [["aaaa", "bbbb"], ["cccc"]]

    def test_oversized_line_is_singleton(self) -> None:
        big = "x" * 20
        groups = split_by_token_limit(["a", big, "b"], 10, FakeTokenizer())
        assert groups == [["a"], [big], ["b"]]

    def test_concatenation_preserves_order(self) -> None:
        lines = [f"line{i}" for i in range(50)]
        groups = split_by_token_limit(lines, 23, FakeTokenizer())
        assert [line for group in groups for line in group] == lines

    def test_groups_respect_budget(self) -> None:
        tok = FakeTokenizer()
        lines = [f"l{i}" * (i % 4 + 1) for i in range(40)]
        for group in split_by_token_limit(lines, 20, tok):
            if len(group) > 1:
                assert sum(tok.count(line + "\n") for line in group) <= 20

    def test_empty_input(self) -> None:
        assert split_by_token_limit([], 10, FakeTokenizer()) == []

    @pytest.mark.parametrize("budget", [0, -5])
    def test_non_positive_budget(self, budget: int) -> None:
        with pytest.raises(ValueError, match="positive"):
            split_by_token_limit(["a"], budget, FakeTokenizer())


class TestCreateBatches:
    def test_ranges_come_from_line_numbers(self) -> None:
        rendered = [line.render() for line in format_lines("a\nb\nc")]
        cost = len(rendered[0]) + 1
        batches = create_batches(rendered, cost * 2, FakeTokenizer())

        assert [(b.start_line, b.end_line) for b in batches] == [
            (1, 2),
            (3, 3),
        ]
        assert batches[0].content == "\n".join(rendered[:2])
        assert batches[0].token_count == len(batches[0].content)
        assert batches[1].line_range == "3-3"

    def test_ranges_are_contiguous(self) -> None:
        rendered = [
            line.render() for line in format_lines("\n".join("x" * 30))
        ]
        batches = create_batches(rendered, 60, FakeTokenizer())
        assert batches[0].start_line == 1
        assert batches[-1].end_line == 30
        for prev, nxt in zip(batches, batches[1:], strict=False):
            assert nxt.start_line == prev.end_line + 1

    def test_absolute_line_numbers_kept(self) -> None:
        rendered = [line.render() for line in format_lines("a\nb\nc\nd")][2:]
        batches = create_batches(rendered, 1000, FakeTokenizer())
        assert [(b.start_line, b.end_line) for b in batches] == [(3, 4)]

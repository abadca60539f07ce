"""Tests for token counting."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from jsvmp_detector.config import Settings
from jsvmp_detector.ingestion.tokenizer import (
    EstimateTokenizer,
    TiktokenTokenizer,
    _encoding_for,
    get_tokenizer,
)


@pytest.fixture(autouse=True)
def _clear_encoding_cache() -> None:
    _encoding_for.cache_clear()


class TestEstimateTokenizer:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [("", 0), ("a", 1), ("abcd", 1), ("abcde", 2)],
    )
    def test_rounds_up(self, text: str, expected: int) -> None:
        assert EstimateTokenizer().count(text) == expected

    def test_deterministic(self) -> None:
        tok = EstimateTokenizer()
        assert tok.count("switch (op) {") == tok.count("switch (op) {")


class TestTiktokenTokenizer:
    def test_encoding_loaded_lazily(self) -> None:
        with patch(
            "jsvmp_detector.ingestion.tokenizer.tiktoken.encoding_for_model"
        ) as mock_for_model:
            tok = TiktokenTokenizer("gpt-4o")
            mock_for_model.assert_not_called()
            mock_for_model.return_value.encode.return_value = [1, 2, 3]
            assert tok.count("abc") == 3
            mock_for_model.assert_called_once_with("gpt-4o")

    def test_special_tokens_counted_as_text(self) -> None:
        encoding = MagicMock()
        encoding.encode.return_value = [1]
        with patch(
            "jsvmp_detector.ingestion.tokenizer.tiktoken.encoding_for_model",
            return_value=encoding,
        ):
            TiktokenTokenizer().count("<|endoftext|>")
        encoding.encode.assert_called_once_with(
            "<|endoftext|>", disallowed_special=()
        )

    def test_unknown_model_falls_back(self) -> None:
        fallback = MagicMock()
        fallback.encode.return_value = [1, 2]
        with (
            patch(
                "jsvmp_detector.ingestion.tokenizer.tiktoken.encoding_for_model",
                side_effect=KeyError("nope"),
            ),
            patch(
                "jsvmp_detector.ingestion.tokenizer.tiktoken.get_encoding",
                return_value=fallback,
            ) as mock_get,
        ):
            assert TiktokenTokenizer("not-a-model").count("ab") == 2
        mock_get.assert_called_once_with("cl100k_base")


class TestGetTokenizer:
    def test_estimate(self) -> None:
        settings = Settings(_env_file=None, tokenizer="estimate")  # type: ignore[call-arg]
        assert isinstance(get_tokenizer(settings), EstimateTokenizer)

    def test_tiktoken_uses_configured_model(self) -> None:
        settings = Settings(  # type: ignore[call-arg]
            _env_file=None, tokenizer="tiktoken", tokenizer_model="gpt-4"
        )
        tok = get_tokenizer(settings)
        assert isinstance(tok, TiktokenTokenizer)
        assert tok.model == "gpt-4"

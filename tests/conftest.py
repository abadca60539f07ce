"""Shared test fixtures: fake keys, fake tokenizer, canned responses."""

import os

# Force demo API keys for all tests; no real LLM calls.
# These are set unconditionally at import time, so even if you have
# real keys in your shell environment, pytest overwrites them before
# any Settings() is created.
os.environ["OPENAI_API_KEY"] = "for-demo-purposes-only"
os.environ["ANTHROPIC_API_KEY"] = "for-demo-purposes-only"
os.environ.pop("LLM_PROVIDER", None)
os.environ.pop("LLM_MODEL", None)
os.environ.pop("LLM_BASE_URL", None)

import json
from pathlib import Path
from typing import Any

import pytest

from jsvmp_detector.config import Settings
from jsvmp_detector.ingestion.beautifier import BeautifyResult
from jsvmp_detector.ingestion.schemas import Batch


class FakeTokenizer:
    """One token per character; deterministic and offline."""

    def count(self, text: str) -> int:
        return len(text)


class FakeBeautifier:
    """Returns the file unchanged, without touching jsbeautifier."""

    def beautify(self, file_path: Path) -> BeautifyResult:
        return BeautifyResult(code=file_path.read_text(encoding="utf-8"))


@pytest.fixture
def fake_tokenizer() -> FakeTokenizer:
    return FakeTokenizer()


@pytest.fixture
def fake_beautifier() -> FakeBeautifier:
    return FakeBeautifier()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        llm_provider="openai",
        openai_api_key="for-demo-purposes-only",
        tokenizer="estimate",
    )


@pytest.fixture
def unconfigured_settings() -> Settings:
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        openai_api_key="",
        anthropic_api_key="",
        google_api_key="",
    )


@pytest.fixture
def js_file(tmp_path: Path) -> Path:
    path = tmp_path / "vm.js"
    path.write_text(
        "\n".join(f"var v{i} = s[p++];" for i in range(1, 31)),
        encoding="utf-8",
    )
    return path


def make_batch(start: int, end: int, content: str = "code") -> Batch:
    return Batch(
        start_line=start,
        end_line=end,
        content=content,
        token_count=len(content),
    )


def region_json(
    start: int,
    end: int,
    confidence: str = "high",
    description: str = "dispatcher",
    type_: str = "Switch Dispatcher",
    **extra: Any,
) -> dict[str, Any]:
    return {
        "start_line": start,
        "end_line": end,
        "type": type_,
        "confidence": confidence,
        "description": description,
        **extra,
    }


def response_json(
    regions: list[dict[str, Any]] | None = None,
    summary: Any = "summary",
    **extra: Any,
) -> str:
    return json.dumps(
        {"summary": summary, "regions": regions or [], **extra}
    )

"""Tests for CLI argument parsing and command dispatch."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from jsvmp_detector import __version__
from jsvmp_detector.cli import _build_parser, main
from jsvmp_detector.services.detection_service import DetectionRunResult

_SERVICE = "jsvmp_detector.services.detection_service.find_jsvmp_dispatcher"


class TestArgParser:
    def test_version_flag(self) -> None:
        args = _build_parser().parse_args(["--version"])
        assert args.version is True

    def test_analyze_defaults(self) -> None:
        args = _build_parser().parse_args(["analyze", "vm.js"])
        assert args.command == "analyze"
        assert args.file_path == "vm.js"
        assert args.start_line is None
        assert args.end_line is None
        assert args.char_limit is None
        assert args.max_tokens_per_batch is None
        assert args.format == "text"
        assert args.output is None
        assert args.verbose is False

    def test_analyze_with_options(self) -> None:
        args = _build_parser().parse_args(
            [
                "analyze",
                "vm.js",
                "--start-line",
                "10",
                "--end-line",
                "200",
                "--char-limit",
                "80",
                "--max-tokens-per-batch",
                "4000",
                "-f",
                "json",
                "-o",
                "out.json",
                "-v",
            ]
        )
        assert (args.start_line, args.end_line) == (10, 200)
        assert args.char_limit == 80
        assert args.max_tokens_per_batch == 4000
        assert args.format == "json"
        assert args.output == "out.json"
        assert args.verbose is True

    @pytest.mark.parametrize("value", ["0", "-3", "abc"])
    def test_rejects_non_positive(self, value: str) -> None:
        with pytest.raises(SystemExit):
            _build_parser().parse_args(
                ["analyze", "vm.js", "--char-limit", value]
            )

    def test_mcp_defaults(self) -> None:
        args = _build_parser().parse_args(["mcp"])
        assert args.command == "mcp"
        assert args.transport == "stdio"
        assert args.host == "127.0.0.1"
        assert args.port == 8001

    def test_mcp_sse(self) -> None:
        args = _build_parser().parse_args(
            ["mcp", "-t", "sse", "--host", "0.0.0.0", "--port", "9000"]
        )
        assert (args.transport, args.host, args.port) == (
            "sse",
            "0.0.0.0",
            9000,
        )

    def test_no_command(self) -> None:
        assert _build_parser().parse_args([]).command is None


class TestMain:
    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["--version"])
        assert capsys.readouterr().out.strip() == (
            f"jsvmp-detector {__version__}"
        )

    def test_analyze_prints_report(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        run = DetectionRunResult(
            success=True,
            file_path="vm.js",
            report="REPORT",
            partial_errors=["Batch 2 (lines 9-12) failed: boom"],
        )
        with patch(_SERVICE, new_callable=AsyncMock, return_value=run):
            main(["analyze", "vm.js", "--start-line", "3"])
        captured = capsys.readouterr()
        assert captured.out.strip() == "REPORT"
        assert "Warning: Batch 2 (lines 9-12) failed: boom" in captured.err

    def test_analyze_passes_options(self) -> None:
        run = DetectionRunResult(success=True, file_path="vm.js", report="R")
        with patch(
            _SERVICE, new_callable=AsyncMock, return_value=run
        ) as mock_find:
            main(
                [
                    "analyze",
                    "vm.js",
                    "--start-line",
                    "3",
                    "--end-line",
                    "9",
                    "--max-tokens-per-batch",
                    "500",
                ]
            )
        kwargs = mock_find.call_args.kwargs
        assert kwargs["start_line"] == 3
        assert kwargs["end_line"] == 9
        assert kwargs["max_tokens_per_batch"] == 500
        assert kwargs["char_limit"] is None

    def test_analyze_writes_json_file(self, tmp_path: Path) -> None:
        out = tmp_path / "result.json"
        run = DetectionRunResult(success=True, file_path="vm.js", report="R")
        with patch(_SERVICE, new_callable=AsyncMock, return_value=run):
            main(["analyze", "vm.js", "-f", "json", "-o", str(out)])
        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["success"] is True

    def test_failed_run_exits_1(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        run = DetectionRunResult(
            success=False, file_path="vm.js", error="File not found: vm.js"
        )
        with patch(_SERVICE, new_callable=AsyncMock, return_value=run):
            with pytest.raises(SystemExit) as exc_info:
                main(["analyze", "vm.js"])
        assert exc_info.value.code == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Error: File not found: vm.js" in captured.err

    def test_end_before_start_exits_1(self) -> None:
        with patch(_SERVICE, new_callable=AsyncMock) as mock_find:
            with pytest.raises(SystemExit) as exc_info:
                main(["analyze", "vm.js", "--start-line", "9", "--end-line", "3"])
        assert exc_info.value.code == 1
        mock_find.assert_not_called()

    def test_mcp_configures_and_runs(self) -> None:
        with (
            patch(
                "jsvmp_detector.mcp.server.mcp.run_async",
                new_callable=AsyncMock,
            ) as mock_run,
            patch("jsvmp_detector.mcp.server.configure") as mock_configure,
        ):
            main(["mcp"])
        mock_configure.assert_called_once()
        mock_run.assert_awaited_once_with(transport="stdio")

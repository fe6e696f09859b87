# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI smoke tests.

CLI tests verify that commands execute, exit codes are correct, and help
text exists. We use subprocess to run the actual entrypoint the way a user
would, which catches broken imports and entrypoint registration that unit
tests miss.
"""

import json
import subprocess
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

KIB = 1024


def _run_cli(*args: str) -> subprocess.CompletedProcess[str]:
    """Run `chunkhash` with the given arguments and capture output."""
    return subprocess.run(
        [sys.executable, "-m", "chunkhash.cli.main", *args],
        capture_output=True,
        text=True,
        timeout=60,
    )


def _log_entries(output: str) -> list[dict[str, object]]:
    return [json.loads(line) for line in output.splitlines() if line.strip()]


class TestHelpTexts:
    @pytest.mark.parametrize("subcommand", ["hash", "status"])
    def test_subcommand_help_exits_zero(self, subcommand: str) -> None:
        result = _run_cli(subcommand, "--help")
        assert result.returncode == 0
        assert "usage" in result.stdout.lower()

    def test_root_help_exits_with_user_error(self) -> None:
        result = _run_cli()
        assert result.returncode == 1


class TestHashCommand:
    def test_hashes_and_logs(self, make_input: Callable[..., Path], tmp_path: Path) -> None:
        input_path = make_input(25 * KIB)
        output = tmp_path / "out.sums"
        state = tmp_path / "state"

        result = _run_cli(
            "hash", "--chunk-size", "10k", "--block-size", "1k", "--hash", "sha1",
            "--state", str(state), str(input_path), str(output),
        )

        assert result.returncode == 0, result.stdout + result.stderr
        lines = output.read_text(encoding="utf-8").splitlines()
        assert [line.split()[2:] for line in lines] == [
            ["0", "+10240"], ["10240", "+10240"], ["20480", "+5120"],
        ]
        assert all(line.startswith("sha1 ") for line in lines)
        assert state.read_text(encoding="utf-8").strip() == str(25 * KIB)
        messages = [entry["msg"] for entry in _log_entries(result.stdout)]
        assert "Loaded progress" in messages
        assert "Run complete" in messages

    def test_stop_after_then_resume(self, make_input: Callable[..., Path], tmp_path: Path) -> None:
        input_path = make_input(25 * KIB)
        output = tmp_path / "out.sums"
        state = tmp_path / "state"
        common = ["--chunk-size", "10k", "--block-size", "1k", "--state", str(state)]

        first = _run_cli("hash", *common, "--stop-after", "1", str(input_path), str(output))
        assert first.returncode == 0
        assert len(output.read_text(encoding="utf-8").splitlines()) == 1
        assert state.read_text(encoding="utf-8").strip() == str(10 * KIB)

        second = _run_cli("hash", *common, str(input_path), str(output))
        assert second.returncode == 0
        assert len(output.read_text(encoding="utf-8").splitlines()) == 3

    def test_chunk_smaller_than_block_is_config_error(
        self, make_input: Callable[..., Path], tmp_path: Path
    ) -> None:
        input_path = make_input(16 * KIB)
        output = tmp_path / "out.sums"

        result = _run_cli(
            "hash", "--chunk-size", "1k", "--block-size", "4k", str(input_path), str(output),
        )

        assert result.returncode == 2
        assert not output.exists()
        errors = [e for e in _log_entries(result.stdout) if e["level"] == "ERROR"]
        assert len(errors) == 1
        assert "smaller than block size" in str(errors[0]["error"])

    def test_missing_input_with_total_size_is_config_error(self, tmp_path: Path) -> None:
        output = tmp_path / "out.sums"
        result = _run_cli(
            "hash", "--total-size", "20k", "--chunk-size", "10k", "--block-size", "1k",
            str(tmp_path / "missing.bin"), str(output),
        )
        assert result.returncode == 2
        assert not output.exists()
        errors = [e for e in _log_entries(result.stdout) if e["level"] == "ERROR"]
        assert len(errors) == 1
        assert "Cannot access input" in str(errors[0]["error"])

    def test_non_ascii_digit_state_is_config_error(
        self, make_input: Callable[..., Path], tmp_path: Path
    ) -> None:
        input_path = make_input(20 * KIB)
        state = tmp_path / "state"
        state.write_text("\u00b2", encoding="utf-8")
        result = _run_cli(
            "hash", "--chunk-size", "10k", "--block-size", "1k", "--state", str(state),
            str(input_path), str(tmp_path / "out.sums"),
        )
        assert result.returncode == 2
        assert "Traceback" not in result.stderr

    def test_zero_stop_after_is_config_error(self, make_input: Callable[..., Path], tmp_path: Path) -> None:
        input_path = make_input(16 * KIB)
        result = _run_cli("hash", "--stop-after", "0", str(input_path), str(tmp_path / "out"))
        assert result.returncode == 2

    def test_bad_size_suffix_is_usage_error(self, make_input: Callable[..., Path], tmp_path: Path) -> None:
        input_path = make_input(16 * KIB)
        result = _run_cli("hash", "--chunk-size", "ten", str(input_path), str(tmp_path / "out"))
        assert result.returncode == 2  # argparse's own usage error code
        assert "Invalid byte size" in result.stderr

    def test_dry_run_writes_nothing(self, make_input: Callable[..., Path], tmp_path: Path) -> None:
        input_path = make_input(25 * KIB)
        output = tmp_path / "out.sums"
        state = tmp_path / "state"

        result = _run_cli(
            "hash", "--dry-run", "--chunk-size", "10k", "--block-size", "1k",
            "--state", str(state), str(input_path), str(output),
        )

        assert result.returncode == 0
        assert not output.exists()
        assert not state.exists()
        planned = [e for e in _log_entries(result.stdout) if e["msg"] == "Would hash chunk"]
        assert [(e["offset"], e["length"]) for e in planned] == [(0, 10240), (10240, 10240), (20480, 5120)]


class TestConfigFile:
    def test_config_file_supplies_defaults(
        self, make_input: Callable[..., Path], tmp_path: Path, tmp_config_file: Path
    ) -> None:
        input_path = make_input(8 * KIB)
        output = tmp_path / "out.sums"

        result = _run_cli("hash", "--config", str(tmp_config_file), str(input_path), str(output))

        assert result.returncode == 0
        lines = output.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        assert lines[0].startswith("sha256 ")

    def test_nonexistent_config_returns_config_error(self, make_input: Callable[..., Path], tmp_path: Path) -> None:
        input_path = make_input(8 * KIB)
        result = _run_cli(
            "hash", "--config", "/nonexistent/path.yaml", str(input_path), str(tmp_path / "out"),
        )
        assert result.returncode == 2


class TestStatusCommand:
    def test_reports_progress(self, make_input: Callable[..., Path], tmp_path: Path) -> None:
        input_path = make_input(25 * KIB)
        state = tmp_path / "state"
        state.write_text(str(10 * KIB), encoding="utf-8")

        result = _run_cli(
            "status", "--chunk-size", "10k", "--block-size", "1k", "--state", str(state), str(input_path),
        )

        assert result.returncode == 0
        progress = [e for e in _log_entries(result.stdout) if e["msg"] == "Progress"][0]
        assert progress["bytes_processed"] == 10 * KIB
        assert progress["completed_chunks"] == 1
        assert progress["total_chunks"] == 3
        assert progress["done"] is False

    def test_requires_state(self, make_input: Callable[..., Path]) -> None:
        result = _run_cli("status", str(make_input(4 * KIB)))
        assert result.returncode == 2

    def test_counts_duplicate_log_lines(self, make_input: Callable[..., Path], tmp_path: Path) -> None:
        input_path = make_input(25 * KIB)
        state = tmp_path / "state"
        state.write_text(str(10 * KIB), encoding="utf-8")
        output = tmp_path / "out.sums"
        # Chunk 2 was logged but never checkpointed, then logged again after resume.
        output.write_text(
            "md5 aa 0 +10240\nmd5 bb 10240 +10240\nmd5 bb 10240 +10240\n",
            encoding="utf-8",
        )

        result = _run_cli(
            "status", "--chunk-size", "10k", "--block-size", "1k", "--state", str(state),
            str(input_path), str(output),
        )

        assert result.returncode == 0
        progress = [e for e in _log_entries(result.stdout) if e["msg"] == "Progress"][0]
        assert progress["logged_lines"] == 3
        assert progress["duplicate_lines"] == 1

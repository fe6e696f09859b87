# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for progress state: loading defaults, rejecting unusable values, and
durable overwrites.
"""

from pathlib import Path

import pytest

from chunkhash.config.exceptions import ConfigError, StateError
from chunkhash.config.schema import JobConfig
from chunkhash.run.state import checkpoint, load_progress, read_progress

MIB = 1024 * 1024


def _config(tmp_path: Path, state_path: Path | None) -> JobConfig:
    return JobConfig(
        input_path=tmp_path / "in",
        output_path=tmp_path / "out",
        chunk_size=10 * MIB,
        block_size=MIB,
        total_size=25 * MIB,
        hash_program="md5",
        state_path=state_path,
    )


class TestReadProgress:
    def test_no_state_path_means_zero(self) -> None:
        assert read_progress(None) == 0

    def test_absent_file_means_zero(self, tmp_path: Path) -> None:
        assert read_progress(tmp_path / "state") == 0

    def test_empty_file_means_zero(self, tmp_path: Path) -> None:
        state = tmp_path / "state"
        state.write_text("", encoding="utf-8")
        assert read_progress(state) == 0

    def test_reads_decimal_with_trailing_newline(self, tmp_path: Path) -> None:
        state = tmp_path / "state"
        state.write_text("10485760\n", encoding="utf-8")
        assert read_progress(state) == 10 * MIB

    @pytest.mark.parametrize("content", ["ten megabytes", "\u00b2", "\u0661\u0662", "1e6", "10 MiB"])
    def test_garbage_is_rejected(self, tmp_path: Path, content: str) -> None:
        state = tmp_path / "state"
        state.write_text(content, encoding="utf-8")
        with pytest.raises(StateError):
            read_progress(state)

    def test_negative_is_rejected(self, tmp_path: Path) -> None:
        state = tmp_path / "state"
        state.write_text("-5", encoding="utf-8")
        with pytest.raises(StateError):
            read_progress(state)


class TestLoadProgress:
    def test_chunk_boundary_is_accepted(self, tmp_path: Path) -> None:
        state = tmp_path / "state"
        state.write_text(str(20 * MIB), encoding="utf-8")
        assert load_progress(state, _config(tmp_path, state)) == 20 * MIB

    def test_total_size_is_accepted(self, tmp_path: Path) -> None:
        state = tmp_path / "state"
        state.write_text(str(25 * MIB), encoding="utf-8")
        assert load_progress(state, _config(tmp_path, state)) == 25 * MIB

    def test_beyond_total_is_rejected(self, tmp_path: Path) -> None:
        state = tmp_path / "state"
        state.write_text(str(30 * MIB), encoding="utf-8")
        with pytest.raises(StateError, match="more than the total size"):
            load_progress(state, _config(tmp_path, state))

    def test_misaligned_is_rejected(self, tmp_path: Path) -> None:
        state = tmp_path / "state"
        state.write_text(str(5 * MIB), encoding="utf-8")
        with pytest.raises(StateError, match="not a chunk boundary"):
            load_progress(state, _config(tmp_path, state))

    def test_state_errors_are_config_errors(self, tmp_path: Path) -> None:
        state = tmp_path / "state"
        state.write_text("junk", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_progress(state, _config(tmp_path, state))


class TestCheckpoint:
    def test_writes_decimal_text(self, tmp_path: Path) -> None:
        state = tmp_path / "state"
        checkpoint(state, 10 * MIB)
        assert state.read_text(encoding="utf-8") == f"{10 * MIB}\n"

    def test_overwrites_rather_than_appends(self, tmp_path: Path) -> None:
        state = tmp_path / "state"
        checkpoint(state, 10 * MIB)
        checkpoint(state, 20 * MIB)
        assert read_progress(state) == 20 * MIB
        assert state.read_text(encoding="utf-8").count("\n") == 1

    def test_none_is_a_noop(self, tmp_path: Path) -> None:
        checkpoint(None, 10 * MIB)
        assert list(tmp_path.iterdir()) == []

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        state = tmp_path / "nested" / "state"
        checkpoint(state, 0)
        assert read_progress(state) == 0

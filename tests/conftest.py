# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for chunkhash tests.

Fixtures here are available to every test file automatically.
We keep them minimal: input files with known content, a config file, and
a logger reset so tests that configure logging don't leak into each other.
"""

import logging
import textwrap
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from chunkhash.logging.logger import ROOT_LOGGER_NAME

MIB = 1024 * 1024


def pattern_bytes(size: int) -> bytes:
    """Deterministic, non-repeating-per-chunk content so every chunk digest differs."""
    block = bytes(range(251))
    repeats = size // len(block) + 1
    return (block * repeats)[:size]


@pytest.fixture(autouse=True)
def _reset_chunkhash_logger() -> Iterator[None]:
    """Undo configure_logging between tests so records reach caplog again."""
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture()
def make_input(tmp_path: Path) -> Callable[[int], Path]:
    """Factory for an input file of the requested size."""

    def _make(size: int, name: str = "input.bin") -> Path:
        path = tmp_path / name
        path.write_bytes(pattern_bytes(size))
        return path

    return _make


@pytest.fixture()
def tmp_config_file(tmp_path: Path) -> Path:
    """
    A small valid config YAML file.

    Sizes are tiny so tests that go through the CLI hash quickly.
    """
    config_content = textwrap.dedent("""\
        global:
          config_version: "1.0.0"
          log_level: "DEBUG"
        hashing:
          chunk_size: 4096
          block_size: 1024
          hash_program: sha256
    """)
    config_file = tmp_path / "test_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def invalid_config_file(tmp_path: Path) -> Path:
    """A config file that's valid YAML but fails schema validation (missing required field)."""
    config_content = textwrap.dedent("""\
        global:
          log_level: "INFO"
    """)
    config_file = tmp_path / "invalid_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def broken_yaml_file(tmp_path: Path) -> Path:
    """A file that isn't valid YAML at all."""
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("{{not: yaml: at: all:::", encoding="utf-8")
    return config_file

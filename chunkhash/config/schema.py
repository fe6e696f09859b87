# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Type-safe configuration schemas for chunkhash.

All models are frozen pydantic models. Frozen means once you create one you
cannot mutate it: a job's parameters are fixed for the whole run, and the run
loop only ever mutates its own progress counter.

The models use pydantic v2's ConfigDict with:
  - frozen=True: immutability after construction
  - extra="forbid": unknown fields cause immediate failure
  - validate_default=True: even defaults get type-checked

There are two layers:
  - ChunkHashConfig is what an optional YAML file holds: logging settings and
    default hashing parameters.
  - JobRequest / JobConfig describe one concrete run. A JobRequest may leave
    total_size unset; the validator probes it and produces a JobConfig.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

MIB = 1024 * 1024

DEFAULT_CHUNK_SIZE = 10 * MIB
DEFAULT_BLOCK_SIZE = 1 * MIB
DEFAULT_HASH_PROGRAM = "md5"


class GlobalConfig(BaseModel):
    """Cross-cutting settings: schema version and logging."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    config_version: str = Field(
        description="Schema version for compatibility tracking, e.g. '1.0.0'"
    )
    log_level: str = Field(
        default="INFO",
        description="One of DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for file-based log output",
    )


class HashingConfig(BaseModel):
    """
    Default hashing parameters. Any of these can be overridden per run from
    the command line.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    chunk_size: int = Field(
        default=DEFAULT_CHUNK_SIZE,
        gt=0,
        description="Bytes covered by one digest (default 10 MiB)",
    )
    block_size: int = Field(
        default=DEFAULT_BLOCK_SIZE,
        gt=0,
        description="Unit the reader operates in (default 1 MiB)",
    )
    hash_program: str = Field(
        default=DEFAULT_HASH_PROGRAM,
        min_length=1,
        description="hashlib algorithm, crc32/adler32, or an external digest program",
    )
    stop_after: Optional[int] = Field(
        default=None,
        ge=1,
        description="Stop after this many chunks in one invocation",
    )
    state_path: Optional[str] = Field(
        default=None,
        description="Where progress is persisted. Unset means the run is not resumable",
    )


class ChunkHashConfig(BaseModel):
    """
    Top-level config file container.

    A YAML file must hold a `global:` section; `hashing:` is optional and
    falls back to the built-in defaults.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    global_config: GlobalConfig = Field(alias="global")
    hashing: HashingConfig = Field(default_factory=HashingConfig)


class JobRequest(BaseModel):
    """Raw parameters for one run, before size resolution and cross-field checks."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    input_path: Path
    output_path: Optional[Path] = None
    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, gt=0)
    block_size: int = Field(default=DEFAULT_BLOCK_SIZE, gt=0)
    total_size: Optional[int] = Field(default=None, gt=0)
    hash_program: str = Field(default=DEFAULT_HASH_PROGRAM, min_length=1)
    stop_after: Optional[int] = Field(default=None, ge=1)
    state_path: Optional[Path] = None


class JobConfig(BaseModel):
    """
    A validated, immutable job.

    Only validate_job should build these: the cross-field invariants
    (chunk_size >= block_size, chunk_size <= total_size, total_size a
    multiple of block_size) are checked there, in a fixed order, so each
    failure gets its own diagnostic.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    input_path: Path
    output_path: Path
    chunk_size: int = Field(gt=0)
    block_size: int = Field(gt=0)
    total_size: int = Field(gt=0)
    hash_program: str = Field(min_length=1)
    stop_after: Optional[int] = Field(default=None, ge=1)
    state_path: Optional[Path] = None
    advisories: tuple[str, ...] = ()

    @property
    def total_chunks(self) -> int:
        return -(-self.total_size // self.chunk_size)

    @property
    def resumable(self) -> bool:
        return self.state_path is not None

# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Run controller: the state machine behind one invocation.

    VALIDATING -> LOADING -> ITERATING -> HASHING -> LOGGING -> CHECKPOINTING
                                 ^                                   |
                                 +-----------------------------------+
    ITERATING -> DONE            (every byte covered)
    CHECKPOINTING -> STOPPED_EARLY (stop_after chunks done this invocation)
    any state -> FAILED          (exception propagates to the caller)

Per chunk the order is fixed: hash, append the log line durably, then
checkpoint durably. A failure while hashing leaves both files untouched. A
crash between the append and the checkpoint leaves the state one chunk
behind the log, so the resumed run re-hashes that chunk and logs it a second
time rather than skipping it.

There is no retry loop. Re-running the command is the retry.
"""

import enum
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from chunkhash.config.schema import JobConfig, JobRequest
from chunkhash.config.validator import validate_job
from chunkhash.logging.logger import get_logger
from chunkhash.run.hasher import hash_range
from chunkhash.run.log_writer import ChunkDescriptor, append_descriptor
from chunkhash.run.planner import ChunkPlan, iter_plans, plan
from chunkhash.run.state import checkpoint, load_progress

logger = get_logger(__name__)

HashFunc = Callable[[Path, int, int, int, str], str]


class RunState(enum.Enum):
    VALIDATING = "validating"
    LOADING = "loading"
    ITERATING = "iterating"
    HASHING = "hashing"
    LOGGING = "logging"
    CHECKPOINTING = "checkpointing"
    DONE = "done"
    STOPPED_EARLY = "stopped_early"
    FAILED = "failed"


TERMINAL_STATES = frozenset({RunState.DONE, RunState.STOPPED_EARLY, RunState.FAILED})


@dataclass
class RunResult:
    """What one invocation did."""

    state: RunState
    bytes_processed: int
    total_size: int
    chunks_written: int = 0
    descriptors: list[ChunkDescriptor] = field(default_factory=list)

    @property
    def completed(self) -> bool:
        return self.bytes_processed == self.total_size


class RunController:
    """
    Drives one job from validation to a terminal state.

    The job's parameters are frozen in a JobConfig; the only mutable value is
    the controller's own bytes_processed counter, which always equals the sum
    of the lengths of descriptors durably logged for this job.
    """

    def __init__(self, request: JobRequest, hash_func: HashFunc = hash_range) -> None:
        self.request = request
        self.hash_func = hash_func
        self.state = RunState.VALIDATING
        self.config: Optional[JobConfig] = None
        self.bytes_processed = 0

    def _transition(self, new_state: RunState) -> None:
        logger.debug(
            "State transition",
            extra={"from_state": self.state.value, "to_state": new_state.value},
        )
        self.state = new_state

    def _validate_and_load(self) -> JobConfig:
        config = validate_job(self.request)
        self.config = config

        self._transition(RunState.LOADING)
        self.bytes_processed = load_progress(config.state_path, config)
        logger.info(
            "Loaded progress",
            extra={
                "bytes_processed": self.bytes_processed,
                "total_size": config.total_size,
                "resumable": config.resumable,
            },
        )
        return config

    def preview(self) -> list[ChunkPlan]:
        """
        Validate, load progress, and return the chunks a run would hash.

        Nothing is read from the input or written anywhere.
        """
        try:
            config = self._validate_and_load()
        except BaseException:
            self._transition(RunState.FAILED)
            raise
        plans = list(iter_plans(config.total_size, config.chunk_size, self.bytes_processed))
        if config.stop_after is not None:
            plans = plans[: config.stop_after]
        return plans

    def run(self) -> RunResult:
        """
        Run the job until every byte is covered or stop_after chunks are done.

        Raises:
            ConfigError: If validation or progress loading fails.
            RuntimeIOError: If reading or hashing a chunk fails.
            OSError: If the log or state file can't be written.
        """
        try:
            return self._run()
        except BaseException:
            self._transition(RunState.FAILED)
            raise

    def _run(self) -> RunResult:
        config = self._validate_and_load()
        result = RunResult(
            state=self.state,
            bytes_processed=self.bytes_processed,
            total_size=config.total_size,
        )
        remaining = config.stop_after

        self._transition(RunState.ITERATING)
        while self.bytes_processed < config.total_size:
            chunk = plan(config.total_size, config.chunk_size, self.bytes_processed)

            self._transition(RunState.HASHING)
            digest = self.hash_func(
                config.input_path,
                chunk.offset,
                chunk.length,
                config.block_size,
                config.hash_program,
            )
            descriptor = ChunkDescriptor(
                algorithm=config.hash_program,
                digest=digest,
                offset=chunk.offset,
                length=chunk.length,
            )

            self._transition(RunState.LOGGING)
            append_descriptor(config.output_path, descriptor)

            self._transition(RunState.CHECKPOINTING)
            checkpoint(config.state_path, chunk.end)

            self.bytes_processed = chunk.end
            result.bytes_processed = self.bytes_processed
            result.chunks_written += 1
            result.descriptors.append(descriptor)
            logger.info(
                "Chunk hashed",
                extra={
                    "chunk_index": chunk.chunk_index,
                    "total_chunks": chunk.total_chunks,
                    "offset": chunk.offset,
                    "length": chunk.length,
                    "digest": digest,
                },
            )

            if remaining is not None:
                remaining -= 1
                if remaining == 0 and not chunk.is_last:
                    self._transition(RunState.STOPPED_EARLY)
                    result.state = self.state
                    logger.info(
                        "Stopped after requested chunk count",
                        extra={
                            "stop_after": config.stop_after,
                            "bytes_processed": self.bytes_processed,
                            "total_size": config.total_size,
                        },
                    )
                    return result

            self._transition(RunState.ITERATING)

        self._transition(RunState.DONE)
        result.state = self.state
        logger.info(
            "All chunks hashed",
            extra={"bytes_processed": self.bytes_processed, "chunks_written": result.chunks_written},
        )
        return result


def run_job(request: JobRequest, hash_func: HashFunc = hash_range) -> RunResult:
    """Convenience wrapper: build a controller and run it."""
    return RunController(request, hash_func=hash_func).run()

# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Progress state: the single durable fact "N bytes have been fully processed".

The state file holds one decimal integer. It is read once when a run starts
and overwritten after every chunk whose log line is already on disk. That
ordering means a crash can only make the state lag behind the log, never run
ahead of it: the worst case is one chunk hashed twice and one duplicate line,
never a byte range that was skipped.

Without a configured state path nothing is persisted and every run starts at 0.
"""

from pathlib import Path
from typing import Optional

from chunkhash.config.exceptions import StateError
from chunkhash.config.schema import JobConfig
from chunkhash.logging.logger import get_logger
from chunkhash.utils.filesystem import atomic_write, safe_read

logger = get_logger(__name__)


def read_progress(state_path: Optional[Path]) -> int:
    """
    Read the raw persisted byte count.

    Returns 0 when no state path is configured or the file doesn't exist yet.

    Raises:
        StateError: If the file exists but doesn't hold a non-negative integer.
    """
    if state_path is None or not state_path.exists():
        return 0

    try:
        text = safe_read(state_path).strip()
    except OSError as err:
        raise StateError(f"Cannot read state file {state_path}: {err}") from err

    if not text:
        return 0
    if not (text.isascii() and text.isdigit()):
        raise StateError(f"State file {state_path} does not hold a byte count: {text[:40]!r}")
    return int(text)


def load_progress(state_path: Optional[Path], config: JobConfig) -> int:
    """
    Read the persisted byte count and check it fits this job.

    A value that isn't a whole number of chunks (and isn't the total size)
    would mean resuming mid-chunk, which the planner doesn't support: such a
    state came from a run with different sizes.

    Raises:
        StateError: If the value is unreadable, beyond the input, or misaligned.
    """
    bytes_processed = read_progress(state_path)

    if bytes_processed > config.total_size:
        raise StateError(
            f"State file {state_path} records {bytes_processed} bytes processed, "
            f"more than the total size {config.total_size}"
        )
    if bytes_processed % config.chunk_size != 0 and bytes_processed != config.total_size:
        raise StateError(
            f"State file {state_path} records {bytes_processed} bytes processed, "
            f"which is not a chunk boundary for chunk size {config.chunk_size}"
        )
    return bytes_processed


def checkpoint(state_path: Optional[Path], bytes_processed: int) -> None:
    """
    Durably record that `bytes_processed` bytes are done.

    Must only be called after the log line covering those bytes is on disk.
    A None state path makes this a no-op.

    Raises:
        OSError: If the state can't be written.
    """
    if state_path is None:
        return
    atomic_write(state_path, f"{bytes_processed}\n")
    logger.debug(
        "Checkpoint written",
        extra={"state_path": str(state_path), "bytes_processed": bytes_processed},
    )

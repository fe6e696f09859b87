# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Chunk planner: where the next chunk starts and how long it is.

Pure arithmetic, no I/O. Progress is always a whole number of completed
chunks, so the next chunk starts exactly at bytes_processed. Every chunk is
chunk_size long except possibly the last one, which is clipped to whatever
is left.
"""

from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(frozen=True)
class ChunkPlan:
    """The byte range of one chunk plus its position, for progress reporting."""

    offset: int
    length: int
    is_last: bool
    chunk_index: int
    total_chunks: int

    @property
    def end(self) -> int:
        return self.offset + self.length


def count_chunks(total_size: int, chunk_size: int) -> int:
    """Number of chunks needed to cover total_size, counting a short final chunk."""
    return -(-total_size // chunk_size)


def plan(total_size: int, chunk_size: int, bytes_processed: int) -> ChunkPlan:
    """
    Plan the chunk that follows `bytes_processed` bytes of completed work.

    Raises:
        ValueError: If sizes aren't positive or there's nothing left to plan.
    """
    if total_size <= 0 or chunk_size <= 0:
        raise ValueError(
            f"Sizes must be positive (total_size={total_size}, chunk_size={chunk_size})"
        )
    if bytes_processed < 0 or bytes_processed >= total_size:
        raise ValueError(
            f"No chunk left to plan: {bytes_processed} of {total_size} bytes processed"
        )

    offset = bytes_processed
    length = min(chunk_size, total_size - offset)
    return ChunkPlan(
        offset=offset,
        length=length,
        is_last=offset + length == total_size,
        chunk_index=offset // chunk_size + 1,
        total_chunks=count_chunks(total_size, chunk_size),
    )


def iter_plans(total_size: int, chunk_size: int, bytes_processed: int = 0) -> Iterator[ChunkPlan]:
    """Yield every remaining chunk plan in order."""
    while bytes_processed < total_size:
        chunk = plan(total_size, chunk_size, bytes_processed)
        yield chunk
        bytes_processed = chunk.end

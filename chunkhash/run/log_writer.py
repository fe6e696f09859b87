# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Output log: one descriptor line per hashed chunk.

Line format:
    <algorithm> <digest> <offset> +<length>

For example:
    md5 9e107d9d372bb6826bd81d3542a419d6 10485760 +10485760

The log is append-only. Resumed runs keep appending to the same file, so the
log of an interrupted-then-resumed job can be read straight through (or
concatenated with `cat`) in chunk order.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from chunkhash.utils.filesystem import durable_append


@dataclass(frozen=True)
class ChunkDescriptor:
    """The digest of one chunk and the byte range it covers."""

    algorithm: str
    digest: str
    offset: int
    length: int

    def to_line(self) -> str:
        return f"{self.algorithm} {self.digest} {self.offset} +{self.length}"


def append_descriptor(output_path: Path, descriptor: ChunkDescriptor) -> None:
    """
    Append one descriptor line and force it to disk before returning.

    Raises:
        OSError: If the append or the sync fails.
    """
    durable_append(output_path, descriptor.to_line() + "\n")


def parse_descriptor_line(line: str) -> ChunkDescriptor:
    """
    Parse one log line back into a descriptor.

    Raises:
        ValueError: If the line doesn't have the four expected fields.
    """
    parts = line.split()
    if len(parts) != 4 or not parts[3].startswith("+"):
        raise ValueError(
            f"Invalid descriptor line: expected '<algorithm> <digest> <offset> +<length>', got: {line!r}"
        )
    algorithm, digest, offset, length = parts
    return ChunkDescriptor(
        algorithm=algorithm,
        digest=digest,
        offset=int(offset),
        length=int(length[1:]),
    )


def read_descriptors(output_path: Path) -> Iterator[ChunkDescriptor]:
    """Yield the descriptors in a log file, skipping blank lines."""
    with open(output_path, encoding="utf-8") as handle:
        for line_num, line in enumerate(handle, start=1):
            if not line.strip():
                continue
            try:
                yield parse_descriptor_line(line)
            except ValueError as err:
                raise ValueError(f"{output_path}:{line_num}: {err}") from err

# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Hash invocation adapter.

Streams one byte range of the input through a named hash primitive and
returns the digest as an opaque string. The name is resolved in this order:

  1. any algorithm hashlib knows about (md5, sha1, sha256, blake2b, ...)
  2. crc32 / adler32 from zlib, rendered as 8 lowercase hex digits
  3. an executable on PATH (xxh64sum, b3sum, ...) that reads stdin and prints
     the digest as the first whitespace-separated token on stdout

Reads happen in block_size units. The last read of a chunk is shorter when
the chunk size isn't a multiple of the block size.
"""

import hashlib
import shutil
import subprocess
import tempfile
import zlib
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import BinaryIO, Protocol

from chunkhash.run.exceptions import RuntimeIOError


class HashPrimitive(Protocol):
    """The interface a digest must offer: feed bytes, then read the result."""

    def update(self, data: bytes) -> None: ...

    def hexdigest(self) -> str: ...


class _ChecksumAdapter:
    """Wraps zlib's running-checksum functions in the hashlib update/hexdigest shape."""

    def __init__(self, func: Callable[[bytes, int], int], initial: int) -> None:
        self._func = func
        self._value = initial

    def update(self, data: bytes) -> None:
        self._value = self._func(data, self._value)

    def hexdigest(self) -> str:
        return f"{self._value & 0xFFFFFFFF:08x}"


_CHECKSUMS: dict[str, tuple[Callable[[bytes, int], int], int]] = {
    "crc32": (zlib.crc32, 0),
    "adler32": (zlib.adler32, 1),
}


def is_builtin_primitive(hash_program: str) -> bool:
    """True if the name resolves without spawning a process."""
    name = hash_program.lower()
    if name in _CHECKSUMS:
        return True
    # shake_* need an explicit output length, so they aren't usable here
    return name in hashlib.algorithms_available and not name.startswith("shake_")


def is_supported(hash_program: str) -> bool:
    """True if hash_program names a builtin primitive or an executable on PATH."""
    return is_builtin_primitive(hash_program) or shutil.which(hash_program) is not None


def new_primitive(hash_program: str) -> HashPrimitive:
    """
    Build a fresh in-process hash object.

    Raises:
        ValueError: If the name isn't a builtin primitive.
    """
    name = hash_program.lower()
    if name in _CHECKSUMS:
        func, initial = _CHECKSUMS[name]
        return _ChecksumAdapter(func, initial)
    if is_builtin_primitive(name):
        return hashlib.new(name)
    raise ValueError(f"Unknown hash primitive: '{hash_program}'")


def iter_blocks(
    handle: BinaryIO,
    offset: int,
    length: int,
    block_size: int,
) -> Iterator[bytes]:
    """
    Yield exactly `length` bytes starting at `offset`, in block_size pieces.

    Raises:
        RuntimeIOError: If the input ends before `length` bytes were read.
    """
    handle.seek(offset)
    remaining = length
    while remaining > 0:
        want = min(block_size, remaining)
        data = handle.read(want)
        if not data:
            raise RuntimeIOError(
                f"Unexpected end of input at byte {offset + length - remaining} "
                f"({remaining} bytes short of chunk end {offset + length})"
            )
        remaining -= len(data)
        yield data


def _hash_in_process(
    input_path: Path,
    offset: int,
    length: int,
    block_size: int,
    hash_program: str,
) -> str:
    hasher = new_primitive(hash_program)
    with open(input_path, "rb") as handle:
        for block in iter_blocks(handle, offset, length, block_size):
            hasher.update(block)
    return hasher.hexdigest()


def _hash_with_program(
    input_path: Path,
    offset: int,
    length: int,
    block_size: int,
    hash_program: str,
) -> str:
    executable = shutil.which(hash_program)
    if executable is None:
        raise RuntimeIOError(f"Hash program not found on PATH: '{hash_program}'")

    # Output goes to temp files, not pipes: nothing reads the child's output
    # while we are still feeding its stdin.
    with open(input_path, "rb") as handle, tempfile.TemporaryFile() as out_file, \
            tempfile.TemporaryFile() as err_file:
        proc = subprocess.Popen(
            [executable],
            stdin=subprocess.PIPE,
            stdout=out_file,
            stderr=err_file,
        )
        stdin = proc.stdin
        try:
            for block in iter_blocks(handle, offset, length, block_size):
                stdin.write(block)  # type: ignore[union-attr]
            stdin.close()  # type: ignore[union-attr]
        except BaseException:
            proc.kill()
            proc.wait()
            raise
        returncode = proc.wait()
        out_file.seek(0)
        stdout = out_file.read()
        err_file.seek(0)
        stderr = err_file.read()

    if returncode != 0:
        raise RuntimeIOError(
            f"Hash program '{hash_program}' exited with status {returncode}: "
            f"{stderr.decode('utf-8', errors='replace').strip()}"
        )
    tokens = stdout.decode("utf-8", errors="replace").split()
    if not tokens:
        raise RuntimeIOError(f"Hash program '{hash_program}' printed no digest")
    return tokens[0]


def hash_range(
    input_path: Path,
    offset: int,
    length: int,
    block_size: int,
    hash_program: str,
) -> str:
    """
    Digest `length` bytes of `input_path` starting at `offset`.

    Args:
        input_path: File or block device to read.
        offset: First byte of the range.
        length: Number of bytes in the range. Must be positive.
        block_size: Read unit in bytes.
        hash_program: Name of the primitive, see module docstring.

    Returns:
        The digest string exactly as the primitive produced it.

    Raises:
        RuntimeIOError: On any read failure, short read, or hash program failure.
    """
    if length <= 0:
        raise ValueError(f"length must be positive, got {length}")

    try:
        if is_builtin_primitive(hash_program):
            return _hash_in_process(input_path, offset, length, block_size, hash_program)
        return _hash_with_program(input_path, offset, length, block_size, hash_program)
    except OSError as err:
        raise RuntimeIOError(
            f"Failed to read {input_path} at offset {offset} (+{length}): {err}"
        ) from err

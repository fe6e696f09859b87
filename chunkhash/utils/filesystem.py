# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Durable filesystem operations for chunkhash.

Two kinds of writes matter for resumability:
  - appends to the output log, which must never truncate existing content
    and must be on disk before the matching checkpoint is written
  - overwrites of the state file, which must never leave a half-written
    number behind

Both end with an fsync. An overwrite goes through a temporary file in the
same directory followed by a rename, which is atomic on POSIX as long as both
names live on the same filesystem. If the process dies mid-write you get a
leftover temp file, never a corrupted target.
"""

import os
import tempfile
from pathlib import Path

TEMP_PREFIX = ".chunkhash_tmp_"


def _fsync_directory(directory: Path) -> None:
    """Flush a directory entry so a rename inside it survives power loss."""
    try:
        dir_fd = os.open(str(directory), os.O_RDONLY)
    except OSError:
        # Some platforms (Windows) can't open directories. The rename is
        # still atomic there, just not guaranteed durable.
        return
    try:
        os.fsync(dir_fd)
    finally:
        os.close(dir_fd)


def durable_append(target_path: Path, content: str, encoding: str = "utf-8") -> None:
    """
    Append text to a file and force it to disk before returning.

    The file is opened in append mode, so existing content is never touched.
    The caller is expected to hand over complete lines.

    Args:
        target_path: File to append to. Created if missing.
        content: Text to append.
        encoding: Text encoding to use.

    Raises:
        OSError: If the write or the sync fails.
    """
    target_path.parent.mkdir(parents=True, exist_ok=True)
    with open(target_path, "a", encoding=encoding) as handle:
        handle.write(content)
        handle.flush()
        os.fsync(handle.fileno())


def atomic_write(target_path: Path, content: str, encoding: str = "utf-8") -> None:
    """
    Replace a file's content atomically and durably.

    We write to a temp file in the same directory, fsync it, rename it over
    the target and then fsync the directory. Readers see either the old
    content or the new content, never a mix.

    Args:
        target_path: Where the final file should end up.
        content: The string content to write.
        encoding: Text encoding to use.

    Raises:
        OSError: If the write or rename fails.
    """
    target_path.parent.mkdir(parents=True, exist_ok=True)

    # delete=False because the file has to survive closing so we can rename it.
    temp_fd = tempfile.NamedTemporaryFile(
        mode="w",
        encoding=encoding,
        dir=str(target_path.parent),
        prefix=TEMP_PREFIX,
        suffix=".tmp",
        delete=False,
    )
    temp_path = Path(temp_fd.name)

    try:
        temp_fd.write(content)
        temp_fd.flush()
        os.fsync(temp_fd.fileno())
        temp_fd.close()
        os.replace(temp_path, target_path)
    except BaseException:
        temp_fd.close()
        if temp_path.exists():
            temp_path.unlink()
        raise

    _fsync_directory(target_path.parent)


def safe_read(file_path: Path, encoding: str = "utf-8") -> str:
    """
    Read a text file with proper error context.

    Raises:
        FileNotFoundError: If the path doesn't exist.
        IsADirectoryError: If the path is a directory.
        OSError: For other I/O errors.
    """
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")
    if not file_path.is_file():
        raise IsADirectoryError(f"Expected a file, got a directory: {file_path}")
    return file_path.read_text(encoding=encoding)

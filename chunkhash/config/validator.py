# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Job validation: turns a JobRequest into a JobConfig or fails with one reason.

Checks run in a fixed order and stop at the first fatal one:
  1. chunk_size >= block_size                  (fatal)
  2. chunk_size is a multiple of block_size    (advisory only)
  3. resolve total_size, probing the input when it wasn't given and
     otherwise checking that the input can be opened
  4. chunk_size <= total_size                  (fatal, nothing to hash)
  5. total_size is a multiple of block_size    (fatal, the reader can't
                                                serve a partial final block)
  6. hash_program resolves to something        (fatal)
  7. an output path is given                   (fatal)

The only side effect is the size probe.
"""

import os
import stat
from pathlib import Path

from chunkhash.config.exceptions import AdvisoryWarning, ConfigValidationError
from chunkhash.config.schema import JobConfig, JobRequest
from chunkhash.logging.logger import get_logger
from chunkhash.run.hasher import is_supported

logger = get_logger(__name__)


def probe_total_size(input_path: Path) -> int:
    """
    Find how many bytes the input holds.

    Block devices report a zero st_size, so for those we open the device and
    seek to the end. Regular files use their metadata size.

    Raises:
        ConfigValidationError: If the input is missing, unreadable, or neither
            a regular file nor a block device.
    """
    try:
        info = input_path.stat()
    except OSError as err:
        raise ConfigValidationError(f"Cannot access input {input_path}: {err}") from err

    if stat.S_ISBLK(info.st_mode):
        try:
            with open(input_path, "rb") as device:
                return device.seek(0, os.SEEK_END)
        except OSError as err:
            raise ConfigValidationError(
                f"Cannot query size of block device {input_path}: {err}"
            ) from err

    if stat.S_ISREG(info.st_mode):
        return info.st_size

    raise ConfigValidationError(
        f"Cannot determine size of {input_path}: not a regular file or block device, "
        "pass the total size explicitly"
    )


def check_input_readable(input_path: Path) -> None:
    """
    Make sure the input can be opened for reading.

    Raises:
        ConfigValidationError: If it is missing or unreadable.
    """
    try:
        with open(input_path, "rb"):
            pass
    except OSError as err:
        raise ConfigValidationError(f"Cannot access input {input_path}: {err}") from err


def validate_job(request: JobRequest) -> JobConfig:
    """
    Validate a job request and resolve its total size.

    Args:
        request: Raw per-run parameters.

    Returns:
        A frozen JobConfig. Non-fatal findings are listed in `advisories`
        and logged at WARNING level.

    Raises:
        ConfigValidationError: On the first fatal check, with a one-line reason.
    """
    chunk_size = request.chunk_size
    block_size = request.block_size
    advisories: list[str] = []

    if chunk_size < block_size:
        raise ConfigValidationError(
            f"Chunk size ({chunk_size}) is smaller than block size ({block_size})"
        )

    if chunk_size % block_size != 0:
        message = (
            f"Chunk size ({chunk_size}) is not a multiple of block size ({block_size}); "
            "chunk reads will end on a partial block"
        )
        advisories.append(message)
        logger.warning(
            message,
            extra={"advisory": AdvisoryWarning.__name__, "chunk_size": chunk_size, "block_size": block_size},
        )

    total_size = request.total_size
    if total_size is None:
        total_size = probe_total_size(request.input_path)
        logger.debug(
            "Probed input size",
            extra={"input": str(request.input_path), "total_size": total_size},
        )
    else:
        check_input_readable(request.input_path)

    if chunk_size > total_size:
        raise ConfigValidationError(
            f"Chunk size ({chunk_size}) is larger than total size ({total_size}), nothing to hash"
        )

    if total_size % block_size != 0:
        raise ConfigValidationError(
            f"Total size ({total_size}) is not a multiple of block size ({block_size})"
        )

    if not is_supported(request.hash_program):
        raise ConfigValidationError(f"Unknown hash program: '{request.hash_program}'")

    if request.output_path is None:
        raise ConfigValidationError("No output path given")

    return JobConfig(
        input_path=request.input_path,
        output_path=request.output_path,
        chunk_size=chunk_size,
        block_size=block_size,
        total_size=total_size,
        hash_program=request.hash_program,
        stop_after=request.stop_after,
        state_path=request.state_path,
        advisories=tuple(advisories),
    )

# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Subcommand handlers for the chunkhash CLI.

Each function here corresponds to one CLI subcommand and returns an exit
code. Errors are reported as one structured log line, never a traceback,
except at DEBUG level where the traceback is attached.

No print() calls. Everything goes through the structured logger.
"""

import argparse
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from chunkhash.cli.exit_codes import CONFIG_ERROR, RUNTIME_ERROR, SUCCESS
from chunkhash.config.exceptions import ConfigError, ConfigValidationError
from chunkhash.config.loader import format_validation_error, load_config
from chunkhash.config.schema import ChunkHashConfig, HashingConfig, JobRequest
from chunkhash.config.validator import probe_total_size
from chunkhash.logging.logger import configure_logging, get_logger
from chunkhash.run.controller import RunController, RunState
from chunkhash.run.exceptions import RuntimeIOError
from chunkhash.run.log_writer import read_descriptors
from chunkhash.run.planner import count_chunks
from chunkhash.run.state import read_progress


def _load_and_configure(
    args: argparse.Namespace,
    command_name: str,
) -> tuple[int, Optional[ChunkHashConfig], logging.Logger]:
    """
    The shared setup every command needs: load the optional config file and
    configure logging.

    Returns a tuple of (exit_code, config, logger). If exit_code is not SUCCESS,
    the caller should return it immediately.
    """
    config = None
    config_error: Optional[ConfigError] = None
    if args.config is not None:
        try:
            config = load_config(Path(args.config))
        except ConfigError as err:
            config_error = err

    log_level = args.log_level
    log_file = None
    if config is not None:
        log_level = log_level or config.global_config.log_level
        if config.global_config.log_file is not None:
            log_file = Path(config.global_config.log_file)
    configure_logging(log_level or "INFO", log_file=log_file)
    logger = get_logger(f"cli.{command_name}")

    if config_error is not None:
        logger.error(
            "Configuration error",
            extra={"command": command_name, "error": str(config_error)},
        )
        return CONFIG_ERROR, None, logger

    return SUCCESS, config, logger


def build_job_request(
    args: argparse.Namespace,
    config: Optional[ChunkHashConfig],
) -> JobRequest:
    """
    Merge command-line options over config file values over built-in defaults.

    Raises:
        ConfigValidationError: If a value is out of range (zero sizes, stop-after < 1, ...).
    """
    defaults = config.hashing if config is not None else HashingConfig()

    def pick(name: str) -> Any:
        value = getattr(args, name, None)
        return value if value is not None else getattr(defaults, name)

    state_path = pick("state_path")
    try:
        return JobRequest(
            input_path=Path(args.input),
            output_path=Path(args.output) if args.output is not None else None,
            chunk_size=pick("chunk_size"),
            block_size=pick("block_size"),
            total_size=args.total_size,
            hash_program=pick("hash_program"),
            stop_after=pick("stop_after"),
            state_path=Path(state_path) if state_path is not None else None,
        )
    except ValidationError as err:
        raise ConfigValidationError(f"Invalid job parameters: {format_validation_error(err)}") from err


def handle_hash(args: argparse.Namespace) -> int:
    """Hash the input chunk by chunk, resuming from the state file when there is one."""
    exit_code, config, logger = _load_and_configure(args, "hash")
    if exit_code != SUCCESS:
        return exit_code

    try:
        request = build_job_request(args, config)
        controller = RunController(request)

        if args.dry_run:
            plans = controller.preview()
            for chunk in plans:
                logger.info(
                    "Would hash chunk",
                    extra={
                        "chunk_index": chunk.chunk_index,
                        "total_chunks": chunk.total_chunks,
                        "offset": chunk.offset,
                        "length": chunk.length,
                    },
                )
            logger.info(
                "Dry run complete",
                extra={"planned_chunks": len(plans), "bytes_processed": controller.bytes_processed},
            )
            return SUCCESS

        result = controller.run()

    except ConfigError as err:
        logger.error("Configuration error", extra={"command": "hash", "error": str(err)})
        return CONFIG_ERROR
    except (RuntimeIOError, OSError) as err:
        logger.error(
            "Hashing failed",
            extra={"command": "hash", "error": str(err)},
            exc_info=logger.isEnabledFor(logging.DEBUG),
        )
        return RUNTIME_ERROR

    if result.state is RunState.STOPPED_EARLY:
        logger.info(
            "Run stopped early",
            extra={
                "chunks_written": result.chunks_written,
                "bytes_processed": result.bytes_processed,
                "total_size": result.total_size,
            },
        )
    else:
        logger.info(
            "Run complete",
            extra={
                "chunks_written": result.chunks_written,
                "bytes_processed": result.bytes_processed,
                "total_size": result.total_size,
            },
        )
    return SUCCESS


def _summarise_log(output_path: Path) -> tuple[int, int]:
    """
    Count descriptor lines and how many of them repeat an already-covered range.

    A repeat is what a crash between log append and checkpoint leaves behind.
    """
    logged = 0
    duplicates = 0
    covered_to = 0
    for descriptor in read_descriptors(output_path):
        logged += 1
        if descriptor.offset < covered_to:
            duplicates += 1
        covered_to = max(covered_to, descriptor.offset + descriptor.length)
    return logged, duplicates


def handle_status(args: argparse.Namespace) -> int:
    """Report progress recorded in a state file against the input's size."""
    exit_code, config, logger = _load_and_configure(args, "status")
    if exit_code != SUCCESS:
        return exit_code

    try:
        request = build_job_request(args, config)
        if request.state_path is None:
            raise ConfigValidationError("No state file configured, nothing to report")

        total_size = request.total_size
        if total_size is None:
            total_size = probe_total_size(request.input_path)
        bytes_processed = read_progress(request.state_path)
        if bytes_processed > total_size:
            raise ConfigValidationError(
                f"State file records {bytes_processed} bytes, more than the total size {total_size}"
            )
    except ConfigError as err:
        logger.error("Configuration error", extra={"command": "status", "error": str(err)})
        return CONFIG_ERROR

    total_chunks = count_chunks(total_size, request.chunk_size)
    completed_chunks = count_chunks(bytes_processed, request.chunk_size) if bytes_processed else 0
    progress: dict[str, object] = {
        "state_path": str(request.state_path),
        "bytes_processed": bytes_processed,
        "total_size": total_size,
        "completed_chunks": completed_chunks,
        "total_chunks": total_chunks,
        "remaining_chunks": total_chunks - completed_chunks,
        "done": bytes_processed == total_size,
    }

    if request.output_path is not None and request.output_path.exists():
        try:
            logged, duplicates = _summarise_log(request.output_path)
        except (ValueError, OSError) as err:
            logger.error("Unreadable output log", extra={"command": "status", "error": str(err)})
            return RUNTIME_ERROR
        progress["logged_lines"] = logged
        progress["duplicate_lines"] = duplicates

    logger.info("Progress", extra=progress)
    return SUCCESS

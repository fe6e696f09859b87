# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI entrypoint for chunkhash.

Every operation is a subcommand of `chunkhash`. The global options
(--config, --log-level, --dry-run) are inherited by every subcommand through
argparse's parent parser mechanism.

Usage:
    chunkhash hash [options] INPUT OUTPUT
    chunkhash hash --state disk.state --chunk-size 64M /dev/sdb disk.sums
    chunkhash status --state disk.state /dev/sdb disk.sums
"""

import argparse
import sys
from typing import Optional

from chunkhash.cli.commands import handle_hash, handle_status
from chunkhash.cli.exit_codes import USER_ERROR
from chunkhash.utils.sizes import parse_size


def _size_arg(text: str) -> int:
    """argparse type for byte sizes like 1048576, 4k or 10MiB."""
    try:
        return parse_size(text)
    except ValueError as err:
        raise argparse.ArgumentTypeError(str(err)) from err


def _build_global_parser() -> argparse.ArgumentParser:
    """
    Build the parent parser with global options.

    A separate parent parser (with add_help=False) keeps the help text from
    colliding between the parent and the subcommand parsers.
    """
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML configuration file with default settings.",
    )
    parent.add_argument(
        "--log-level",
        type=str,
        default=None,
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging verbosity level (default INFO).",
    )
    parent.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        dest="dry_run",
        help="Show the chunks that would be hashed without reading or writing anything.",
    )
    return parent


def _add_job_options(parser: argparse.ArgumentParser) -> None:
    """Options that describe a job. Unset values fall back to the config file, then defaults."""
    parser.add_argument(
        "--state",
        type=str,
        default=None,
        dest="state_path",
        help="File that records progress so an interrupted run can resume.",
    )
    parser.add_argument(
        "--chunk-size",
        type=_size_arg,
        default=None,
        dest="chunk_size",
        help="Bytes per digest (default 10MiB).",
    )
    parser.add_argument(
        "--block-size",
        type=_size_arg,
        default=None,
        dest="block_size",
        help="Read unit in bytes (default 1MiB).",
    )
    parser.add_argument(
        "--total-size",
        type=_size_arg,
        default=None,
        dest="total_size",
        help="Input size in bytes (default: probed from the input).",
    )
    parser.add_argument(
        "--hash",
        type=str,
        default=None,
        dest="hash_program",
        help="Hash primitive: a hashlib name, crc32, adler32, or a program on PATH (default md5).",
    )
    parser.add_argument(
        "--stop-after",
        type=int,
        default=None,
        dest="stop_after",
        help="Stop after hashing this many chunks.",
    )


def _register_subcommands(
    subparsers: argparse._SubParsersAction,  # type: ignore[type-arg]
    parent: argparse.ArgumentParser,
) -> None:
    """Register the subcommands and point each at its handler via set_defaults(func=...)."""
    hash_parser = subparsers.add_parser(
        "hash",
        parents=[parent],
        help="Hash the input chunk by chunk, appending one line per chunk to OUTPUT.",
    )
    _add_job_options(hash_parser)
    hash_parser.add_argument("input", help="File or block device to hash.")
    hash_parser.add_argument("output", help="Log file to append chunk digests to.")
    hash_parser.set_defaults(func=handle_hash)

    status_parser = subparsers.add_parser(
        "status",
        parents=[parent],
        help="Report how far a resumable run has progressed.",
    )
    _add_job_options(status_parser)
    status_parser.add_argument("input", help="File or block device being hashed.")
    status_parser.add_argument(
        "output",
        nargs="?",
        default=None,
        help="Optional log file to summarise alongside the state.",
    )
    status_parser.set_defaults(func=handle_status)


def main(argv: Optional[list[str]] = None) -> None:
    """
    Main CLI entrypoint. This is what pyproject.toml's [project.scripts] points to.

    If no subcommand is given, we show help and exit with USER_ERROR.
    """
    parent = _build_global_parser()

    root_parser = argparse.ArgumentParser(
        prog="chunkhash",
        description="chunkhash: resumable per-chunk digests of large files and block devices.",
        parents=[parent],
    )
    subparsers = root_parser.add_subparsers(dest="command")
    _register_subcommands(subparsers, parent)

    args = root_parser.parse_args(argv)

    if not hasattr(args, "func") or args.func is None:
        root_parser.print_help()
        sys.exit(USER_ERROR)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()

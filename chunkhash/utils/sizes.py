# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Byte-size parsing for command-line options.

Accepts plain integers ("1048576") and binary-suffixed values ("1M", "1MiB",
"4k", "2G"). Suffixes are always powers of 1024, the way dd and friends read
them, so "1MB" and "1MiB" are both 1048576 bytes.
"""

import re

_UNITS: dict[str, int] = {
    "": 1,
    "b": 1,
    "k": 1024,
    "m": 1024**2,
    "g": 1024**3,
    "t": 1024**4,
}

_SIZE_PATTERN = re.compile(r"^\s*(\d+)\s*([kmgt]?)(?:i?b)?\s*$", re.IGNORECASE)


def parse_size(text: str) -> int:
    """
    Parse a byte count.

    Raises:
        ValueError: If the text isn't a non-negative integer with an optional suffix.
    """
    match = _SIZE_PATTERN.match(text)
    if match is None:
        raise ValueError(f"Invalid byte size: {text!r} (expected e.g. 1048576, 4k, 10M, 1GiB)")
    number, unit = match.groups()
    return int(number) * _UNITS[unit.lower()]


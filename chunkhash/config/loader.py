# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Loading of the optional defaults file passed with --config.

The file is YAML with a `global:` section and an optional `hashing:` section.
It only supplies defaults: anything given on the command line wins. A file
that can't be read, parsed, or validated is a configuration error, reported
before the output log or the state file is touched.

Pydantic's multi-line error dumps are flattened into one `field: problem`
list here so every configuration failure fits on a single diagnostic line.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from chunkhash.config.exceptions import ConfigLoadError, ConfigValidationError
from chunkhash.config.schema import ChunkHashConfig

SUPPORTED_CONFIG_MAJOR = 1


def format_validation_error(err: ValidationError) -> str:
    """Render a pydantic ValidationError as 'a.b: msg; c: msg'."""
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}"
        for error in err.errors()
    )


def _parse_yaml(config_path: Path) -> dict[str, Any]:
    """
    Parse the file into a mapping.

    Raises:
        ConfigLoadError: Missing path, a directory, unreadable bytes, bad YAML,
            or a document that isn't a mapping.
    """
    if not config_path.is_file():
        reason = "not a file" if config_path.exists() else "not found"
        raise ConfigLoadError(f"Config file {reason}: {config_path}")

    try:
        document = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except OSError as err:
        raise ConfigLoadError(f"Cannot read config file {config_path}: {err}") from err
    except yaml.YAMLError as err:
        problem = getattr(err, "problem", None) or "parse error"
        mark = getattr(err, "problem_mark", None)
        where = f" (line {mark.line + 1}, column {mark.column + 1})" if mark is not None else ""
        raise ConfigLoadError(f"Invalid YAML in {config_path}{where}: {problem}") from err

    if not isinstance(document, dict):
        raise ConfigLoadError(
            f"Config file {config_path} must hold a YAML mapping, got {type(document).__name__}"
        )
    return document


def _check_version(config: ChunkHashConfig, config_path: Path) -> None:
    version = config.global_config.config_version
    major_text = version.split(".", 1)[0]
    if not (major_text.isascii() and major_text.isdigit()) or int(major_text) != SUPPORTED_CONFIG_MAJOR:
        raise ConfigValidationError(
            f"Config file {config_path} has config_version '{version}', "
            f"only {SUPPORTED_CONFIG_MAJOR}.x is supported"
        )


def load_config(config_path: Path) -> ChunkHashConfig:
    """
    Read a defaults file into a frozen ChunkHashConfig.

    Raises:
        ConfigLoadError: The file can't be read or isn't a YAML mapping.
        ConfigValidationError: Unknown keys, out-of-range values, or an
            unsupported config_version.
    """
    document = _parse_yaml(config_path)

    try:
        config = ChunkHashConfig.model_validate(document)
    except ValidationError as err:
        raise ConfigValidationError(
            f"Config file {config_path} is invalid: {format_validation_error(err)}"
        ) from err

    _check_version(config, config_path)
    return config

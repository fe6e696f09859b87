# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Custom exceptions for the configuration system.

We keep these separate so that the CLI and the run loop can catch
config-specific failures without importing the entire config machinery.
Every ConfigError is raised before any chunk work starts.
"""


class ConfigError(Exception):
    """Base for all configuration errors. The message is the single diagnostic line."""


class ConfigLoadError(ConfigError):
    """Raised when a config file cannot be read from disk or parsed as YAML."""


class ConfigValidationError(ConfigError):
    """
    Raised when job parameters are well-formed but inconsistent: a chunk
    smaller than a block, a chunk larger than the input, an input size that
    is not a whole number of blocks, an unknown hash program, and so on.
    """


class StateError(ConfigError):
    """Raised when a persisted progress value can't be used to resume."""


class AdvisoryWarning(UserWarning):
    """
    A non-fatal observation about the job parameters.

    Never raised. Advisories are logged at WARNING level and listed on the
    validated JobConfig, and the run proceeds unchanged.
    """

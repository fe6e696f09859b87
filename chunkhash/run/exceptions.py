# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Errors raised while chunks are being read and hashed."""


class RuntimeIOError(Exception):
    """
    A read or hash failure in the middle of a chunk.

    Fatal for the run. Nothing is logged or checkpointed for the failing
    chunk, so re-invoking with the same state retries exactly that chunk.
    """

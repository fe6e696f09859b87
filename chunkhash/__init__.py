# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
chunkhash: resumable per-chunk digests of large files and block devices.

The input is split into fixed-size chunks. Each chunk is hashed, logged as
one line to an append-only output log, and then checkpointed, so a killed
run can be restarted and pick up at the last recorded chunk boundary.
"""

__version__ = "1.0.0"

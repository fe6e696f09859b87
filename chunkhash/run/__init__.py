# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
The resumable hashing loop.

Planner, progress state, hash adapter, log writer and controller. The
controller is the only piece that knows the order in which things must hit
the disk; the rest are small, independently testable functions.
"""

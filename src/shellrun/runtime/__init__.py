"""Runtime module for process execution and output capture.

This module launches one child process, drains its stdout and stderr
concurrently and aggregates the result.
"""

from __future__ import annotations

from .line_reader import LineReader
from .process_runner import ProcessRunner

__all__ = [
    "LineReader",
    "ProcessRunner",
]

"""shellrun - run one process and capture its stdout and stderr.

Usage:
    from shellrun import RunConfig, run

    stdout, stderr, err = run(RunConfig(command="echo", args=["1234"]))

Environment variables:
    SHELLRUN_MAX_LINE_SIZE: default maximum output line size (default 65536)
    SHELLRUN_LOG_DEBUG: debug logging to a file (default false)
"""

from __future__ import annotations

__version__ = "0.1.0"

from .commander import Commander
from .errors import ExitError, LaunchError, LineTooLongError, ReadError, RunError
from .runtime import LineReader, ProcessRunner
from .types import RunConfig, RunResult, render_command

__all__ = [
    "__version__",
    "Commander",
    "ProcessRunner",
    "LineReader",
    "RunConfig",
    "RunResult",
    "RunError",
    "LaunchError",
    "ReadError",
    "LineTooLongError",
    "ExitError",
    "render_command",
    "run",
    "describe",
]


def run(config: RunConfig) -> RunResult:
    """Run config with a runner built from the environment settings."""
    return ProcessRunner.from_settings().run(config)


def describe(config: RunConfig) -> str:
    """Render config as a shell line without running it."""
    return render_command(config)

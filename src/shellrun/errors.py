"""shellrun exception types.

shellrun v0.1.0

Every failure of a run is one of three kinds:

- LaunchError: pipes could not be created or the process could not start
- ReadError: a stdout/stderr stream broke or produced an oversized line
- ExitError: the process ran but exited nonzero or was killed by a signal

Errors are returned inside RunResult rather than raised; RunResult.check()
raises them for callers that prefer exceptions.
"""

from __future__ import annotations

import signal as _signal
from typing import Literal

__all__ = [
    "RunError",
    "LaunchError",
    "ReadError",
    "LineTooLongError",
    "ExitError",
    "LaunchStage",
    "StreamName",
]

LaunchStage = Literal["pipes", "start"]
StreamName = Literal["stdout", "stderr"]


class RunError(Exception):
    """Base class for run failures.

    Attributes:
        command: Rendered invocation the error belongs to (may be empty)
    """

    def __init__(self, message: str, command: str = "") -> None:
        self.message = message
        self.command = command
        super().__init__(message)

    def __str__(self) -> str:
        if self.command:
            return f"{self.message} (cmd: {self.command})"
        return self.message


class LaunchError(RunError):
    """Process could not be launched.

    Attributes:
        stage: "pipes" when output pipes could not be set up, "start" otherwise
        cause: Underlying OS error
    """

    def __init__(
        self,
        stage: LaunchStage,
        cause: BaseException,
        command: str = "",
    ) -> None:
        self.stage = stage
        self.cause = cause
        super().__init__(f"launch failed at {stage}: {cause}", command)


class ReadError(RunError):
    """Reading one of the output streams failed.

    Attributes:
        stream: Which stream failed ("stdout" or "stderr")
        cause: Underlying error, if any
    """

    def __init__(
        self,
        stream: StreamName,
        cause: BaseException | None = None,
        command: str = "",
        message: str | None = None,
    ) -> None:
        self.stream = stream
        self.cause = cause
        if message is None:
            message = f"reading {stream} failed: {cause}"
        super().__init__(message, command)


class LineTooLongError(ReadError):
    """A line exceeded the configured maximum line size."""

    def __init__(
        self,
        stream: StreamName,
        limit: int,
        cause: BaseException | None = None,
        command: str = "",
    ) -> None:
        self.limit = limit
        super().__init__(
            stream,
            cause,
            command,
            message=f"reading {stream} failed: line longer than {limit} bytes",
        )


class ExitError(RunError):
    """Process exited unsuccessfully.

    The collected output is kept on the error for diagnostics only; the
    RunResult that carries this error has empty text fields.

    Attributes:
        returncode: Raw return code (negative for signals on POSIX)
        signal: Terminating signal, if any
        stdout: Stdout collected before exit
        stderr: Stderr collected before exit
    """

    def __init__(
        self,
        returncode: int,
        command: str = "",
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        self.returncode = returncode
        self.signal = _signal_from_returncode(returncode)
        self.stdout = stdout
        self.stderr = stderr
        if self.signal is not None:
            message = f"process terminated by {self.signal.name}"
        else:
            message = f"process exited with status {returncode}"
        super().__init__(message, command)


def _signal_from_returncode(returncode: int) -> _signal.Signals | None:
    if returncode >= 0:
        return None
    try:
        return _signal.Signals(-returncode)
    except ValueError:
        return None

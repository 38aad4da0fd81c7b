"""Process runner that captures stdout and stderr concurrently.

shellrun runtime module v0.1.0

This module provides:
- Launching one child process with piped stdout/stderr and no stdin
- Two concurrent LineReaders joined by an anyio task group
- Error precedence: launch, stdout read, stderr read, exit status
- Cleanup of children left running after a read error or interruption

Key design points:
- Both pipes are drained completely before waiting on exit; waiting first
  deadlocks a child that fills a pipe buffer
- Readers record errors instead of raising, so one failing reader never
  cancels the other
- No timeouts: a child that never exits blocks run() forever
"""

from __future__ import annotations

import asyncio
import errno
import logging
import os
import signal
import subprocess
import sys
from dataclasses import dataclass
from typing import Any

import anyio

from ..commander import Commander
from ..config import (
    DEFAULT_KILL_TIMEOUT,
    DEFAULT_MAX_LINE_SIZE,
    DEFAULT_TERM_TIMEOUT,
    Settings,
    get_settings,
)
from ..errors import ExitError, LaunchError, RunError
from ..types import RunConfig, RunResult, render_command
from .line_reader import LineReader

__all__ = [
    "ProcessRunner",
    "IS_WINDOWS",
]

logger = logging.getLogger(__name__)

# Platform detection
IS_WINDOWS = sys.platform == "win32"

# errno values that mean no descriptors were left for the pipes
_PIPE_ERRNOS = frozenset({errno.EMFILE, errno.ENFILE})


@dataclass
class ProcessRunner(Commander):
    """Runs one process and returns its collected stdout and stderr.

    Example:
        runner = ProcessRunner()
        result = runner.run(RunConfig(command="echo", args=["1234"]))
        assert (result.stdout, result.stderr, result.error) == ("1234", "", None)

    Attributes:
        max_line_size: Line limit for configs that leave max_line_size at 0
        term_timeout: Grace period after SIGTERM when cleaning up a child
        kill_timeout: Grace period after SIGKILL
        isolate: Start the child in its own session/process group
    """

    max_line_size: int = DEFAULT_MAX_LINE_SIZE
    term_timeout: float = DEFAULT_TERM_TIMEOUT
    kill_timeout: float = DEFAULT_KILL_TIMEOUT
    isolate: bool = True

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> ProcessRunner:
        settings = settings or get_settings()
        return cls(
            max_line_size=settings.max_line_size,
            term_timeout=settings.term_timeout,
            kill_timeout=settings.kill_timeout,
        )

    def describe(self, config: RunConfig) -> str:
        return render_command(config)

    def run(self, config: RunConfig) -> RunResult:
        """Run the process, blocking until it exits or fails.

        Must not be called from inside a running event loop; use
        run_async() there.
        """
        return anyio.run(self.run_async, config, backend="asyncio")

    async def run_async(self, config: RunConfig) -> RunResult:
        """Run the process and collect its output.

        Failures are returned in RunResult.error, checked in this order:
        launch, stdout read, stderr read, exit status. Any failure leaves
        both output strings empty.

        Args:
            config: What to run

        Returns:
            RunResult with newline-joined stdout/stderr, or an error
        """
        command = self.describe(config)
        limit = self._line_limit(config)

        try:
            process = await self._launch(config, limit)
        except LaunchError as e:
            e.command = command
            logger.debug(f"Launch failed: {e}")
            return RunResult.failure(e)

        stdout_reader = LineReader(process.stdout, "stdout", limit)
        stderr_reader = LineReader(process.stderr, "stderr", limit)
        exited = False

        try:
            # Leaving the task group is the join point for both readers
            async with anyio.create_task_group() as tg:
                tg.start_soon(stdout_reader.read_all)
                tg.start_soon(stderr_reader.read_all)

            for reader in (stdout_reader, stderr_reader):
                if reader.error is not None:
                    reader.error.command = command
                    return RunResult.failure(reader.error)

            returncode = await process.wait()
            exited = True
            logger.debug(
                f"Subprocess completed pid={process.pid} returncode={returncode}"
            )

        finally:
            if not exited:
                await self._safe_cleanup(process)

        stdout = stdout_reader.text()
        stderr = stderr_reader.text()
        if returncode != 0:
            error: RunError = ExitError(
                returncode, command=command, stdout=stdout, stderr=stderr
            )
            return RunResult.failure(error)

        return RunResult(stdout=stdout, stderr=stderr)

    def _line_limit(self, config: RunConfig) -> int:
        if config.max_line_size > 0:
            return config.max_line_size
        return self.max_line_size

    async def _launch(
        self, config: RunConfig, limit: int
    ) -> asyncio.subprocess.Process:
        """Start the child with both output pipes open.

        Raises:
            LaunchError: If the pipes or the process could not be created
        """
        kwargs = self._build_subprocess_kwargs(config)

        try:
            # stdin is DEVNULL so the child never shares the caller's stdin
            process = await asyncio.create_subprocess_exec(
                config.command,
                *config.args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                limit=limit,
                **kwargs,
            )
        except OSError as e:
            stage = "pipes" if e.errno in _PIPE_ERRNOS else "start"
            raise LaunchError(stage, e) from e
        except ValueError as e:
            # e.g. an embedded NUL byte in an argument
            raise LaunchError("start", e) from e

        logger.debug(
            f"Started subprocess pid={process.pid} "
            f"argv={config.command} cwd={config.cwd}"
        )
        return process

    def _build_subprocess_kwargs(self, config: RunConfig) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"cwd": config.cwd}

        env = config.build_env()
        if env is not None:
            kwargs["env"] = env

        if self.isolate:
            if IS_WINDOWS:
                kwargs["creationflags"] = subprocess.CREATE_NEW_PROCESS_GROUP
            else:
                kwargs["start_new_session"] = True

        return kwargs

    async def _safe_cleanup(self, process: asyncio.subprocess.Process) -> None:
        """Reap or terminate the child, shielded from cancellation."""
        with anyio.CancelScope(shield=True):
            if process.returncode is None:
                await self._terminate_process(process)

    async def _terminate_process(self, process: asyncio.subprocess.Process) -> None:
        """Terminate gracefully, then forcefully.

        1. SIGTERM (CTRL_BREAK_EVENT on Windows), wait term_timeout
        2. SIGKILL (kill() on Windows), wait kill_timeout
        """
        pid = process.pid
        logger.debug(f"Terminating subprocess pid={pid}")

        for force, timeout in ((False, self.term_timeout), (True, self.kill_timeout)):
            try:
                self._send_stop_signal(process, force=force)
            except ProcessLookupError:
                logger.debug(f"Subprocess already exited pid={pid}")
                break
            except OSError as e:
                logger.warning(f"Error signalling subprocess pid={pid}: {e}")
                break

            try:
                await asyncio.wait_for(process.wait(), timeout=timeout)
            except asyncio.TimeoutError:
                continue
            logger.debug(
                f"Subprocess stopped pid={pid} returncode={process.returncode}"
            )
            return

        if process.returncode is None:
            # Already-gone children still have to be reaped
            try:
                await asyncio.wait_for(process.wait(), timeout=self.kill_timeout)
            except asyncio.TimeoutError:
                logger.warning(f"Subprocess did not exit after kill pid={pid}")

    def _send_stop_signal(
        self, process: asyncio.subprocess.Process, *, force: bool
    ) -> None:
        """Signal the child's process group, or just the child as fallback.

        Raises:
            ProcessLookupError: If the child no longer exists
        """
        if IS_WINDOWS:
            if force:
                process.kill()
                return
            try:
                # Works because the child got its own process group
                os.kill(process.pid, signal.CTRL_BREAK_EVENT)
            except ProcessLookupError:
                raise
            except OSError as e:
                logger.debug(f"CTRL_BREAK_EVENT failed, falling back: {e}")
                process.terminate()
            return

        sig = signal.SIGKILL if force else signal.SIGTERM
        if not self.isolate:
            process.send_signal(sig)
            return
        try:
            pgid = os.getpgid(process.pid)
            os.killpg(pgid, sig)
            logger.debug(f"Sent {sig.name} to process group pgid={pgid}")
        except PermissionError as e:
            logger.debug(f"killpg failed, signalling pid only: {e}")
            process.send_signal(sig)

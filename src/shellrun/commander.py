"""Commander interface.

Code that runs processes depends on Commander, not on ProcessRunner, so
tests can hand in shellrun.testing.FakeCommander instead.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from .types import RunConfig, RunResult

__all__ = ["Commander"]


class Commander(ABC):
    """Runs one configured process to completion."""

    @abstractmethod
    def run(self, config: RunConfig) -> RunResult:
        """Run the process and block until it exits."""
        ...

    @abstractmethod
    async def run_async(self, config: RunConfig) -> RunResult:
        """Coroutine form of run()."""
        ...

    @abstractmethod
    def describe(self, config: RunConfig) -> str:
        """Render the invocation without executing it."""
        ...

"""Test doubles for code that depends on Commander.

Inject a FakeCommander where production code would receive a
ProcessRunner; nothing is executed and every config is recorded.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .commander import Commander
from .errors import RunError
from .types import RunConfig, RunResult, render_command

__all__ = ["FakeCommander"]


@dataclass
class FakeCommander(Commander):
    """Commander that returns a canned outcome.

    Attributes:
        stdout: Text returned on success
        stderr: Text returned on success
        error: When set, every run fails with this error and empty output
        calls: Configs passed to run()/run_async(), in call order
    """

    stdout: str = ""
    stderr: str = ""
    error: RunError | None = None
    calls: list[RunConfig] = field(default_factory=list)

    def run(self, config: RunConfig) -> RunResult:
        self.calls.append(config)
        if self.error is not None:
            return RunResult.failure(self.error)
        return RunResult(stdout=self.stdout, stderr=self.stderr)

    async def run_async(self, config: RunConfig) -> RunResult:
        return self.run(config)

    def describe(self, config: RunConfig) -> str:
        return render_command(config)

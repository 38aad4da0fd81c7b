"""shellrun data types.

shellrun v0.1.0

RunConfig describes what to execute, RunResult what came back.
"""

from __future__ import annotations

import os
import shlex
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from .errors import RunError

__all__ = [
    "RunConfig",
    "RunResult",
    "render_command",
]


@dataclass(frozen=True)
class RunConfig:
    """Immutable description of one process invocation.

    Attributes:
        command: Executable name or path (resolved through PATH)
        args: Arguments passed after the executable
        working_dir: Working directory ("" = inherit the caller's)
        env: Environment overlay, KEY -> VALUE
        max_line_size: Longest accepted output line in bytes (0 = runner default)
        inherit_env: Merge env over the caller's environment (False = replace it)
    """

    command: str
    args: Sequence[str] = ()
    working_dir: str | Path = ""
    env: Mapping[str, str] = field(default_factory=dict)
    max_line_size: int = 0
    inherit_env: bool = True

    def __post_init__(self) -> None:
        # Freeze containers so a config can be reused across runs safely.
        object.__setattr__(self, "args", tuple(self.args))
        object.__setattr__(self, "env", MappingProxyType(dict(self.env)))
        if self.max_line_size < 0:
            raise ValueError(f"max_line_size must be >= 0, got {self.max_line_size}")

    def __hash__(self) -> int:
        # mappingproxy is unhashable, hash the overlay items instead
        return hash((
            self.command,
            self.args,
            self.working_dir,
            frozenset(self.env.items()),
            self.max_line_size,
            self.inherit_env,
        ))

    @property
    def argv(self) -> list[str]:
        """Executable followed by its arguments."""
        return [self.command, *self.args]

    @property
    def cwd(self) -> Path | None:
        """Working directory for the child, None to inherit."""
        if not self.working_dir:
            return None
        return Path(self.working_dir)

    def env_list(self) -> list[str]:
        """Flatten the overlay into KEY=VALUE strings."""
        return [f"{key}={value}" for key, value in self.env.items()]

    def build_env(self) -> dict[str, str] | None:
        """Effective child environment.

        Returns:
            None when the caller's environment is inherited unchanged,
            otherwise the full mapping to hand to the child.
        """
        if self.inherit_env:
            if not self.env:
                return None
            merged = dict(os.environ)
            merged.update(self.env)
            return merged
        return dict(self.env)


@dataclass(frozen=True)
class RunResult:
    """Outcome of a run.

    If error is set, stdout and stderr are both empty: a failed run never
    returns usable output. Unpacks as (stdout, stderr, error).
    """

    stdout: str = ""
    stderr: str = ""
    error: RunError | None = None

    def __post_init__(self) -> None:
        if self.error is not None and (self.stdout or self.stderr):
            raise ValueError("a failed RunResult must not carry output")

    @classmethod
    def failure(cls, error: RunError) -> RunResult:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def check(self) -> RunResult:
        """Raise the stored error, or return self when the run succeeded."""
        if self.error is not None:
            raise self.error
        return self

    def __iter__(self) -> Iterator[object]:
        yield self.stdout
        yield self.stderr
        yield self.error


def render_command(config: RunConfig) -> str:
    """Render a config as a copy-pasteable shell line.

    Nothing is executed. Example:
        cd /work && FOO=bar echo 1234
    """
    parts: list[str] = []
    if not config.inherit_env:
        parts.extend(["env", "-i"])
    parts.extend(sorted(config.env_list()))
    parts.extend(config.argv)
    line = " ".join(shlex.quote(part) for part in parts)
    if config.working_dir:
        line = f"cd {shlex.quote(str(config.working_dir))} && {line}"
    return line

"""
asgn - external command invocation.

File: src/asgn/engine/commands.py

Purpose
- Describe one build command invocation and run it synchronously.

Functional requirements
- Rule commands inherit the caller's stdio unless the executor is asked to capture stderr.
- An executable that cannot be started yields a result, never an exception.
- Executors are injectable so rule tests need no external tools.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from asgn.constants import BUILD_COMMAND


@dataclass(frozen=True, slots=True)
class CommandSpec:
    """One process invocation: argument vector plus working directory."""

    argv: tuple[str, ...]
    cwd: Path

    def __post_init__(self) -> None:
        argv = tuple(self.argv)
        if not argv or not all(isinstance(part, str) for part in argv):
            raise ValueError("CommandSpec.argv must be a non-empty sequence of strings")
        object.__setattr__(self, "argv", argv)
        object.__setattr__(self, "cwd", Path(self.cwd))

    def display(self) -> str:
        return " ".join(self.argv)


@dataclass(frozen=True, slots=True)
class CommandResult:
    command: CommandSpec
    returncode: int | None
    stderr: str | None = None
    started: bool = True

    @property
    def passed(self) -> bool:
        return self.started and self.returncode == 0


class CommandExecutor(Protocol):
    """Injectable command runner used for deterministic/offline testing."""

    def run(self, command: CommandSpec) -> CommandResult: ...


class LocalSubprocessExecutor:
    """Default executor backed by ``subprocess.run``; blocks until the child exits."""

    def __init__(self, *, capture_stderr: bool = False) -> None:
        self.capture_stderr = capture_stderr

    def run(self, command: CommandSpec) -> CommandResult:
        try:
            completed = subprocess.run(
                list(command.argv),
                cwd=command.cwd,
                check=False,
                stderr=subprocess.PIPE if self.capture_stderr else None,
                text=True,
            )
        except OSError as exc:
            return CommandResult(
                command=command,
                returncode=None,
                stderr=f"could not start '{command.argv[0]}': {exc.strerror or exc}",
                started=False,
            )

        return CommandResult(
            command=command,
            returncode=completed.returncode,
            stderr=completed.stderr if self.capture_stderr else None,
        )


def build_make_command(
    target: str,
    *,
    cwd: Path,
    makefile: Path,
    course_public: Path,
    course_private: Path,
    public: Path,
    private: Path,
    quiet: bool,
) -> CommandSpec:
    """Assemble the ``make`` invocation for one rule target.

    The four directory variables let course Makefiles reach shared and
    assignment-specific public/private material without hard-coded paths.
    """

    argv: list[str] = [BUILD_COMMAND]
    if quiet:
        argv.append("--quiet")
    argv.extend(
        [
            f"COURSE_PUBLIC={course_public}",
            f"COURSE_PRIVATE={course_private}",
            f"PUBLIC={public}",
            f"PRIVATE={private}",
            f"--file={makefile}",
            target,
        ]
    )
    return CommandSpec(argv=tuple(argv), cwd=cwd)


__all__ = [
    "CommandExecutor",
    "CommandResult",
    "CommandSpec",
    "LocalSubprocessExecutor",
    "build_make_command",
]

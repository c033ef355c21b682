"""
asgn - shared test fixtures

File: tests/conftest.py

Purpose
- Build throwaway course trees under ``tmp_path`` and provide a scripted
  command executor so rule execution never needs ``make``.
"""

from __future__ import annotations

import io
import os
from collections.abc import Callable, Iterator, Mapping
from datetime import datetime
from pathlib import Path
from typing import Any

import pytest

from asgn.course.assignment import AssignmentSpec
from asgn.course.context import Context
from asgn.domain.rules import Ruleset
from asgn.engine.commands import CommandResult, CommandSpec
from asgn.observability.logging import LoggingConfig, clear_context, setup_logging, shutdown_logging
from asgn.ui.render import CLIRenderer
from asgn.utils.tomlio import write_toml_file
from asgn.utils.users import current_username

FIXED_NOW = datetime(2026, 3, 10, 12, 0, 0).astimezone()


class FakeExecutor:
    """Scripted executor: return codes and metric file contents keyed by make target."""

    def __init__(
        self,
        returncodes: Mapping[str, int] | None = None,
        outputs: Mapping[str, str] | None = None,
        *,
        default: int = 0,
        unstartable: bool = False,
    ) -> None:
        self.returncodes = dict(returncodes or {})
        self.outputs = dict(outputs or {})
        self.default = default
        self.unstartable = unstartable
        self.calls: list[CommandSpec] = []

    @property
    def targets(self) -> list[str]:
        return [command.argv[-1] for command in self.calls]

    def run(self, command: CommandSpec) -> CommandResult:
        self.calls.append(command)
        if self.unstartable:
            return CommandResult(
                command=command,
                returncode=None,
                stderr="could not start 'make': No such file or directory",
                started=False,
            )
        target = command.argv[-1]
        text = self.outputs.get(target)
        if text is not None:
            (command.cwd / target).write_text(text, encoding="utf-8")
        return CommandResult(command=command, returncode=self.returncodes.get(target, self.default))


@pytest.hookimpl(hookwrapper=True, trylast=True)
def pytest_runtest_call(item: pytest.Item) -> Iterator[None]:
    # pytest closes the capsys stream when the call phase ends; detach handlers
    # bound to it (e.g. run_cli's stderr handler) while it is still open.
    yield
    shutdown_logging()


@pytest.fixture(autouse=True)
def _quiet_logging() -> Iterator[None]:
    setup_logging(LoggingConfig(log_to_stderr=False))
    yield
    shutdown_logging()
    clear_context()


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def instructor() -> str:
    """The OS user running the tests, so files it writes pass the owner check."""

    return current_username()


@pytest.fixture
def out_buffer() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def renderer(out_buffer: io.StringIO) -> CLIRenderer:
    return CLIRenderer(no_color=True, stream=out_buffer)


@pytest.fixture
def course_root(tmp_path: Path, instructor: str) -> Path:
    """A course with two students, one grader and a single blank assignment ``hw1``."""

    root = tmp_path / "course"
    root.mkdir()
    write_toml_file(
        root / ".course.toml",
        {
            "instructor": instructor,
            "manifest": ["hw1"],
            "graders": ["gina"],
            "students": ["alice", "bob"],
            "grace_total": 3,
            "grace_limit": 2,
        },
    )
    AssignmentSpec(
        name="hw1",
        path=root / "hw1",
        active=True,
        visible=True,
        file_list=["main.cpp"],
        due_date=datetime(2026, 3, 9, 23, 59, 59).astimezone(),
    ).sync()
    return root


@pytest.fixture
def make_context(course_root: Path, tmp_path: Path) -> Callable[..., Context]:
    def _make(user: str = "alice", now: datetime = FIXED_NOW, cwd: Path | None = None) -> Context:
        work = cwd if cwd is not None else tmp_path / "work"
        work.mkdir(parents=True, exist_ok=True)
        return Context.load(course_root, user=user, now=now, cwd=work, environ={})

    return _make


@pytest.fixture
def write_spec(course_root: Path) -> Callable[..., AssignmentSpec]:
    """Overwrite ``hw1``'s spec; stage rulesets may be given as plain dicts."""

    def _write(**fields: Any) -> AssignmentSpec:
        for stage in ("build", "check", "score", "grade"):
            value = fields.get(stage)
            if isinstance(value, Mapping):
                fields[stage] = Ruleset.from_dict(value)
        base: dict[str, Any] = {
            "name": "hw1",
            "path": course_root / "hw1",
            "active": True,
            "visible": True,
            "file_list": ["main.cpp"],
        }
        base.update(fields)
        spec = AssignmentSpec(**base)
        spec.sync()
        return spec

    return _write


def submit_files(
    course_root: Path,
    username: str,
    files: Mapping[str, str],
    mtime: datetime | None = None,
) -> Path:
    """Place files in a slot of ``hw1``, optionally stamping them with ``mtime``."""

    slot = course_root / "hw1" / username
    slot.mkdir(parents=True, exist_ok=True)
    for name, text in files.items():
        path = slot / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        if mtime is not None:
            stamp = mtime.timestamp()
            os.utime(path, (stamp, stamp))
    return slot


@pytest.fixture
def submit() -> Callable[..., Path]:
    return submit_files


@pytest.fixture
def fake_executor() -> type[FakeExecutor]:
    return FakeExecutor

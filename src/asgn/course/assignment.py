"""
asgn - assignment specifications.

File: src/asgn/course/assignment.py

Purpose
- Load, validate and persist ``<course>/<assignment>/.info/info.toml`` and expose
  the operations that act on a single assignment: activity checks, submission
  retrieval and rule execution.

Functional requirements
- ``name`` must equal the name of the directory the spec is stored in.
- Load followed by sync is lossless for every field.
- Date-only values mean 23:59:59 local time on that day.
"""

from __future__ import annotations

import shutil
import tomllib
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final

import structlog

from asgn.constants import (
    INFO_DIR_NAME,
    MAKEFILE_NAME,
    PRIVATE_DIR_NAME,
    PUBLIC_DIR_NAME,
    SPEC_FILE_NAME,
)
from asgn.domain.rules import Gate, Ruleset
from asgn.engine.commands import CommandSpec, build_make_command
from asgn.engine.pipeline import PipelineOutcome, run_grade_pipeline, run_submit_pipeline
from asgn.engine.runner import RuleEngine, RulesetReport
from asgn.errors import (
    FilePresenceError,
    FilePresenceKind,
    InactiveError,
    InactiveKind,
    SpecLoadError,
    StatusFileError,
)
from asgn.timing.dates import format_date, now_local, to_local, to_wall_clock
from asgn.timing.lateness import effective_due_date, versus
from asgn.utils.fs import recreate_dir
from asgn.utils.tomlio import load_toml_file, write_toml_file

if TYPE_CHECKING:
    from asgn.course.context import Context
    from asgn.engine.commands import CommandExecutor
    from asgn.ui.render import CLIRenderer

logger = structlog.get_logger(__name__)

_STAGES: Final[tuple[str, ...]] = ("build", "check", "score", "grade")
_DATE_FIELDS: Final[tuple[str, ...]] = ("due_date", "open_date", "close_date")
_SPEC_FIELDS: Final[frozenset[str]] = frozenset(
    {"name", "active", "visible", "file_list", *_DATE_FIELDS, *_STAGES}
)
_OPEN_LEAD_TIME: Final[timedelta] = timedelta(days=1)


@dataclass(slots=True)
class AssignmentSpec:
    name: str
    path: Path
    active: bool = False
    visible: bool = False
    file_list: list[str] = field(default_factory=list)
    due_date: datetime | None = None
    open_date: datetime | None = None
    close_date: datetime | None = None
    build: Ruleset | None = None
    check: Ruleset | None = None
    score: Ruleset | None = None
    grade: Ruleset | None = None

    @property
    def info_path(self) -> Path:
        return self.path / INFO_DIR_NAME

    @property
    def spec_path(self) -> Path:
        return self.info_path / SPEC_FILE_NAME

    @classmethod
    def default_with_name(cls, name: str, path: Path) -> AssignmentSpec:
        """A blank, inactive and unpublished assignment expecting ``<name>.cpp``."""

        return cls(name=name, path=Path(path), file_list=[f"{name}.cpp"])

    @classmethod
    def load(cls, path: Path | str) -> AssignmentSpec:
        root = Path(path)
        spec_path = root / INFO_DIR_NAME / SPEC_FILE_NAME
        try:
            payload = load_toml_file(spec_path)
        except OSError as exc:
            raise SpecLoadError(spec_path, exc.strerror or str(exc), missing=True) from exc
        except tomllib.TOMLDecodeError as exc:
            raise SpecLoadError(spec_path, str(exc)) from exc

        try:
            spec = cls.from_dict(payload, root)
        except ValueError as exc:
            raise SpecLoadError(spec_path, str(exc)) from exc

        if spec.name != root.name:
            raise SpecLoadError(spec_path, "Name field does not match assignment directory name.")
        return spec

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any], path: Path) -> AssignmentSpec:
        unknown = sorted(str(key) for key in payload if key not in _SPEC_FIELDS)
        if unknown:
            raise ValueError(f"unknown field(s): {', '.join(unknown)}")

        name = payload.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError("'name' must be a non-empty string")

        flags: dict[str, bool] = {}
        for key in ("active", "visible"):
            value = payload.get(key, False)
            if not isinstance(value, bool):
                raise ValueError(f"'{key}' must be a boolean")
            flags[key] = value

        raw_files = payload.get("file_list", [])
        if (
            not isinstance(raw_files, Sequence)
            or isinstance(raw_files, str)
            or not all(isinstance(item, str) and item for item in raw_files)
        ):
            raise ValueError("'file_list' must be an array of file names")

        dates: dict[str, datetime | None] = {}
        for key in _DATE_FIELDS:
            value = payload.get(key)
            if value is not None and not isinstance(value, date):
                raise ValueError(f"'{key}' must be a TOML local date or date-time")
            dates[key] = None if value is None else to_local(value)

        rulesets: dict[str, Ruleset | None] = {}
        for key in _STAGES:
            value = payload.get(key)
            if value is not None and not isinstance(value, Mapping):
                raise ValueError(f"'{key}' must be a table")
            rulesets[key] = None if value is None else Ruleset.from_dict(value)

        return cls(
            name=name,
            path=Path(path),
            active=flags["active"],
            visible=flags["visible"],
            file_list=list(raw_files),
            **dates,
            **rulesets,
        )

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": self.name,
            "active": self.active,
            "visible": self.visible,
        }
        for key in _DATE_FIELDS:
            value = getattr(self, key)
            if value is not None:
                payload[key] = to_wall_clock(value)
        payload["file_list"] = list(self.file_list)
        for key in _STAGES:
            ruleset = getattr(self, key)
            if ruleset is not None:
                payload[key] = ruleset.to_dict()
        return payload

    def sync(self) -> None:
        """Write the spec back to its ``info.toml``."""

        try:
            self.info_path.mkdir(parents=True, exist_ok=True)
            write_toml_file(self.spec_path, self.to_dict())
        except OSError as exc:
            raise StatusFileError("Writing specification", self.spec_path, str(exc)) from exc
        logger.info("assignment_synced", assignment=self.name)

    def before_open(self, now: datetime | None = None) -> bool:
        if self.open_date is None:
            return False
        current = now if now is not None else now_local()
        return current + _OPEN_LEAD_TIME < self.open_date

    def after_close(self, now: datetime | None = None) -> bool:
        if self.close_date is None:
            return False
        current = now if now is not None else now_local()
        return current > self.close_date

    def verify_active(self, now: datetime | None = None) -> None:
        if not self.active:
            raise InactiveError(InactiveKind.INACTIVE)
        if self.before_open(now):
            raise InactiveError(InactiveKind.BEFORE_OPEN)
        if self.after_close(now):
            raise InactiveError(InactiveKind.AFTER_CLOSE)

    def retrieve_sub(self, dst_dir: Path, username: str) -> None:
        """Replace ``dst_dir`` with a fresh copy of ``username``'s submitted files."""

        sub_path = self.path / username
        dst_dir = Path(dst_dir)
        try:
            recreate_dir(dst_dir)
        except OSError as exc:
            raise StatusFileError("Creating directory", dst_dir, str(exc)) from exc

        for file_name in self.file_list:
            src = sub_path / file_name
            dst = dst_dir / file_name
            if src.is_dir():
                continue
            if not src.exists():
                raise FilePresenceError(src, FilePresenceKind.NOT_FOUND)
            try:
                dst.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy(src, dst)
            except OSError as exc:
                raise StatusFileError(f"Copying file to {dst}", src, str(exc)) from exc

    def make_command(
        self, target: str, quiet: bool, context: Context, working_dir: Path
    ) -> CommandSpec:
        course_info = context.base_path / INFO_DIR_NAME
        return build_make_command(
            target,
            cwd=working_dir,
            makefile=self.info_path / MAKEFILE_NAME,
            course_public=course_info / PUBLIC_DIR_NAME,
            course_private=course_info / PRIVATE_DIR_NAME,
            public=self.info_path / PUBLIC_DIR_NAME,
            private=self.info_path / PRIVATE_DIR_NAME,
            quiet=quiet,
        )

    def rule_engine(
        self,
        context: Context,
        *,
        executor: CommandExecutor | None = None,
        renderer: CLIRenderer | None = None,
    ) -> RuleEngine:
        """Engine whose commands run this assignment's Makefile with the caller's verbosity."""

        quiet = context.role.quiet_builds

        def factory(target: str, working_dir: Path) -> CommandSpec:
            return self.make_command(target, quiet, context, working_dir)

        return RuleEngine(factory, executor=executor, renderer=renderer)

    def run_ruleset(
        self,
        engine: RuleEngine,
        ruleset: Ruleset | None,
        working_dir: Path,
        *,
        is_metric: bool = False,
    ) -> RulesetReport:
        return engine.run_ruleset(ruleset, working_dir, is_metric=is_metric)

    def run_on_submit(
        self,
        engine: RuleEngine,
        ruleset: Ruleset | None,
        working_dir: Path,
        title: str,
        *,
        is_metric: bool = False,
    ) -> RulesetReport | None:
        """Run ``ruleset`` unless it is absent or its ``on_submit`` flag is false."""

        return engine.run_gated(ruleset, Gate.ON_SUBMIT, working_dir, title, is_metric=is_metric)

    def run_on_grade(
        self,
        engine: RuleEngine,
        ruleset: Ruleset | None,
        working_dir: Path,
        title: str,
        *,
        is_metric: bool = False,
    ) -> RulesetReport | None:
        return engine.run_gated(ruleset, Gate.ON_GRADE, working_dir, title, is_metric=is_metric)

    def submit_pipeline(self, engine: RuleEngine, working_dir: Path) -> PipelineOutcome:
        return run_submit_pipeline(engine, self, working_dir)

    def grade_pipeline(self, engine: RuleEngine, working_dir: Path) -> PipelineOutcome:
        return run_grade_pipeline(engine, self, working_dir)

    def details(self, context: Context, username: str | None = None) -> list[tuple[str, str]]:
        """Property rows describing this assignment, plus the slot of ``username`` if given."""

        rows: list[tuple[str, str]] = [
            ("Name", self.name),
            ("Active", _yes_no(self.active)),
            ("Visible", _yes_no(self.visible)),
            ("Files", ", ".join(self.file_list) or "(none)"),
            ("Due", format_date(self.due_date)),
            ("Open", format_date(self.open_date)),
            ("Close", format_date(self.close_date)),
        ]
        if username is None:
            return rows

        status = context.get_slot(self, username).status()
        rows.append(("Extension", f"{status.extension_days} day(s)"))
        rows.append(("Grace", f"{status.grace_days} day(s)"))
        due = None if self.due_date is None else effective_due_date(status, self.due_date)
        rows.append(("Effective due", format_date(due)))
        rows.append(("Turned in", format_date(status.turn_in_time)))
        rows.append(("Status", versus(status, due, context.time)))
        return rows


def _yes_no(flag: bool) -> str:
    return "yes" if flag else "no"


__all__ = ["AssignmentSpec"]

"""
asgn - course context.

File: src/asgn/course/context.py

Purpose
- Hold everything one invocation knows about its course: who is asking, when,
  from where, the course membership and the catalog of assignment specs.

Functional requirements
- The context is built once per command and passed explicitly to every
  operation; nothing about the course lives in module state.
- Catalog entries are either a loaded spec or the error that prevented loading,
  so one broken assignment never hides the others.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

import structlog

from asgn.config.loader import load_course_config, write_course_config
from asgn.config.schema import CourseConfig
from asgn.constants import INFO_DIR_NAME, SPEC_FILE_NAME
from asgn.course.assignment import AssignmentSpec
from asgn.course.roles import Role
from asgn.course.slot import SubmissionSlot
from asgn.errors import (
    AsgnError,
    ErrorLog,
    InvalidAssignmentError,
    NoSuchMemberError,
    StatusFileError,
)
from asgn.timing.dates import now_local
from asgn.utils.users import current_username, file_owner

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class Context:
    course: str
    instructor: str
    base_path: Path
    user: str
    time: datetime
    cwd: Path
    manifest: list[str] = field(default_factory=list)
    graders: list[str] = field(default_factory=list)
    students: list[str] = field(default_factory=list)
    grace_total: int | None = None
    grace_limit: int | None = None
    config: Mapping[str, Any] = field(default_factory=dict)
    catalog: dict[str, AssignmentSpec | AsgnError] = field(default_factory=dict)

    @classmethod
    def load(
        cls,
        base_path: Path | str,
        *,
        user: str | None = None,
        now: datetime | None = None,
        cwd: Path | None = None,
        cli_overrides: Mapping[str, object] | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> Context:
        root = Path(base_path).expanduser().resolve()
        config = load_course_config(root, cli_overrides=cli_overrides, environ=environ)
        context = cls.from_config(
            root,
            config,
            user=user if user is not None else current_username(),
            now=now if now is not None else now_local(),
            cwd=cwd if cwd is not None else Path.cwd(),
        )
        context.populate_catalog()
        return context

    @classmethod
    def from_config(
        cls,
        base_path: Path,
        config: CourseConfig,
        *,
        user: str,
        now: datetime,
        cwd: Path,
    ) -> Context:
        instructor = config.get("instructor")
        if not instructor:
            try:
                instructor = file_owner(base_path)
            except OSError as exc:
                raise StatusFileError(
                    "Reading owner of course directory", base_path, str(exc)
                ) from exc
        return cls(
            course=base_path.name,
            instructor=instructor,
            base_path=base_path,
            user=user,
            time=now,
            cwd=Path(cwd),
            manifest=list(config["manifest"]),
            graders=list(config["graders"]),
            students=list(config["students"]),
            grace_total=config.get("grace_total"),
            grace_limit=config.get("grace_limit"),
            config=config,
        )

    def populate_catalog(self) -> None:
        self.catalog = {}
        for name in self.manifest:
            try:
                self.catalog[name] = AssignmentSpec.load(self.base_path / name)
            except AsgnError as exc:
                logger.warning("assignment_load_failed", assignment=name, error=str(exc))
                self.catalog[name] = exc

    @property
    def role(self) -> Role:
        if self.user == self.instructor:
            return Role.INSTRUCTOR
        if self.user in self.graders:
            return Role.GRADER
        if self.user in self.students:
            return Role.STUDENT
        return Role.OTHER

    @property
    def members(self) -> list[str]:
        """Users whose submissions are scored and ranked."""

        return list(self.students)

    def require_member(self, username: str) -> None:
        if username not in self.students:
            raise NoSuchMemberError(username)

    def catalog_get(self, name: str) -> AssignmentSpec:
        entry = self.catalog.get(name)
        if entry is None:
            raise InvalidAssignmentError(name)
        if isinstance(entry, AsgnError):
            raise entry
        return entry

    def loaded_assignments(self) -> list[AssignmentSpec]:
        """Successfully loaded specs, in manifest order."""

        return [
            entry
            for name in self.manifest
            if isinstance(entry := self.catalog.get(name), AssignmentSpec)
        ]

    def catalog_errors(self) -> ErrorLog:
        return ErrorLog(
            entry for name in self.manifest if isinstance(entry := self.catalog.get(name), AsgnError)
        )

    def get_slot(self, spec: AssignmentSpec, username: str) -> SubmissionSlot:
        return SubmissionSlot(
            context=self,
            assignment=spec,
            base_path=self.base_path / spec.name / username,
        )

    def grace_spent(self, username: str) -> int:
        """Grace days ``username`` has spent across every loadable assignment.

        Recomputed from the ``.grace`` files on every call.
        """

        return sum(self.get_slot(spec, username).get_grace() for spec in self.loaded_assignments())

    def sync(self) -> None:
        payload: dict[str, Any] = {
            "manifest": self.manifest,
            "graders": self.graders,
            "students": self.students,
            "grace_total": self.grace_total,
            "grace_limit": self.grace_limit,
        }
        if self.config.get("instructor"):
            payload["instructor"] = self.instructor
        try:
            write_course_config(self.base_path, payload)
        except OSError as exc:
            raise StatusFileError("Writing course file", self.base_path, str(exc)) from exc
        logger.info("course_synced", course=self.course)

    def add_students(self, usernames: Iterable[str]) -> None:
        _extend_unique(self.students, usernames)
        self.sync()

    def remove_students(self, usernames: Iterable[str]) -> None:
        _remove_all(self.students, usernames)
        self.sync()

    def add_graders(self, usernames: Iterable[str]) -> None:
        _extend_unique(self.graders, usernames)
        self.sync()

    def remove_graders(self, usernames: Iterable[str]) -> None:
        _remove_all(self.graders, usernames)
        self.sync()

    def add_assignments(self, names: Iterable[str]) -> None:
        """Add names to the manifest, writing a blank spec for any that has none."""

        added = _extend_unique(self.manifest, names)
        for name in added:
            asgn_path = self.base_path / name
            if not (asgn_path / INFO_DIR_NAME / SPEC_FILE_NAME).exists():
                AssignmentSpec.default_with_name(name, asgn_path).sync()
        self.sync()
        self.populate_catalog()

    def remove_assignments(self, names: Iterable[str]) -> None:
        """Drop names from the manifest; their directories are left in place."""

        _remove_all(self.manifest, names)
        self.sync()
        self.populate_catalog()


def _extend_unique(target: list[str], names: Iterable[str]) -> list[str]:
    added: list[str] = []
    for name in names:
        if name not in target:
            target.append(name)
            added.append(name)
    return added


def _remove_all(target: list[str], names: Iterable[str]) -> None:
    doomed = set(names)
    target[:] = [name for name in target if name not in doomed]


__all__ = ["Context"]

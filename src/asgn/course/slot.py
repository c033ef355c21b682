"""
asgn - submission slots.

File: src/asgn/course/slot.py

Purpose
- Represent one user's submission directory for one assignment and derive its
  status (turn-in time, grace days, extension days) from file state.

Functional requirements
- Status is never cached; every call re-reads file metadata.
- ``.grace`` is user-writable and read leniently; ``.extension`` must be a
  regular file authored by the instructor; symlinks and foreign files are rejected.
"""

from __future__ import annotations

import tomllib
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from asgn.constants import EXTENSION_FILE_NAME, GRACE_FILE_NAME
from asgn.errors import StatusFileError, UntrustedFileError
from asgn.timing.dates import local_from_timestamp
from asgn.utils.tomlio import load_toml_file, write_toml_file
from asgn.utils.users import file_owner

if TYPE_CHECKING:
    from asgn.course.assignment import AssignmentSpec
    from asgn.course.context import Context

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class SubmissionStatus:
    turn_in_time: datetime | None
    grace_days: int = 0
    extension_days: int = 0

    @property
    def submitted(self) -> bool:
        return self.turn_in_time is not None


def verify_owner(
    path: Path,
    expected: str,
    owner_of: Callable[[Path], str] = file_owner,
) -> None:
    """Raise ``UntrustedFileError`` unless ``path`` is owned by ``expected``."""

    try:
        owner = owner_of(path)
    except OSError as exc:
        raise StatusFileError("Reading owner of file", path, str(exc)) from exc
    if owner != expected:
        raise UntrustedFileError(path, owner, expected)


def _parse_value_file(path: Path, payload: dict[str, Any]) -> int:
    value = payload.get("value")
    if isinstance(value, bool) or not isinstance(value, int):
        raise StatusFileError("Parsing file", path, "expected an integer 'value' field")
    return value


@dataclass(slots=True)
class SubmissionSlot:
    context: Context
    assignment: AssignmentSpec
    base_path: Path

    @property
    def grace_path(self) -> Path:
        return self.base_path / GRACE_FILE_NAME

    @property
    def extension_path(self) -> Path:
        return self.base_path / EXTENSION_FILE_NAME

    def file_paths(self) -> list[Path]:
        return [self.base_path / name for name in self.assignment.file_list]

    def get_grace(self) -> int:
        """Grace days spent on this slot; an unreadable file counts as none."""

        path = self.grace_path
        try:
            payload = load_toml_file(path)
        except OSError:
            return 0
        except tomllib.TOMLDecodeError as exc:
            raise StatusFileError("Parsing grace file", path, str(exc)) from exc
        return _parse_value_file(path, payload)

    def set_grace(self, value: int) -> None:
        self._write_value(self.grace_path, value, "Writing grace file")

    def get_extension(self) -> int:
        path = self.extension_path
        if path.is_symlink():
            raise UntrustedFileError.symlink(path, self.context.instructor)
        if not path.exists() or path.is_dir():
            return 0

        verify_owner(path, self.context.instructor)

        try:
            payload = load_toml_file(path)
        except OSError as exc:
            raise StatusFileError("Reading extension file", path, str(exc)) from exc
        except tomllib.TOMLDecodeError as exc:
            raise StatusFileError("Parsing extension file", path, str(exc)) from exc
        return _parse_value_file(path, payload)

    def set_extension(self, value: int) -> None:
        self._write_value(self.extension_path, value, "Writing extension file")

    def turn_in_time(self) -> datetime | None:
        """Latest modification time across the file list, if every file is present."""

        paths = self.file_paths()
        if not paths or not all(path.is_file() for path in paths):
            return None
        latest = 0
        for path in paths:
            try:
                latest = max(latest, int(path.stat().st_mtime))
            except OSError as exc:
                raise StatusFileError("Reading metadata", path, str(exc)) from exc
        return local_from_timestamp(latest)

    def status(self) -> SubmissionStatus:
        return SubmissionStatus(
            turn_in_time=self.turn_in_time(),
            grace_days=self.get_grace(),
            extension_days=self.get_extension(),
        )

    def _write_value(self, path: Path, value: int, action: str) -> None:
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
            write_toml_file(path, {"value": int(value)})
        except OSError as exc:
            raise StatusFileError(action, path, str(exc)) from exc
        logger.info("slot_value_written", path=str(path), value=int(value))


__all__ = ["SubmissionSlot", "SubmissionStatus", "verify_owner"]

"""
asgn - typed error taxonomy.

File: src/asgn/errors.py

Purpose
- Give every failure a user-facing description plus a piece of advice so the CLI
  can print targeted guidance instead of a traceback.

Functional requirements
- Fatal rule failures, trust violations, grace-budget rejections and date overflow
  each have their own type.
- Several errors can be collected into one ``ErrorLog`` and raised together.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from enum import StrEnum
from pathlib import Path
from typing import Final

CONTACT_INSTRUCTOR: Final[str] = "Please contact the instructor."
MAYBE_CONTACT_INSTRUCTOR: Final[str] = (
    "If you believe this is an error in the course configuration, contact the instructor."
)
VALID_DATE: Final[str] = "Please enter a valid date (yyyy-mm-dd or yyyy-mm-ddThh:mm:ss)."


class AsgnError(Exception):
    """Base error carrying a description and advice for the person at the terminal."""

    def __init__(self, description: str, advice: str = CONTACT_INSTRUCTOR) -> None:
        super().__init__(description)
        self.description = description
        self.advice = advice

    def __str__(self) -> str:
        return self.description

    def render(self) -> str:
        return f"! {self.description}\n> {self.advice}"


class FatalRuleError(AsgnError):
    """A rule failed without ``fail_okay``; the remainder of its ruleset is abandoned."""

    def __init__(self, target: str) -> None:
        super().__init__(
            f"Rule '{target}' failed.",
            "Execution cannot continue beyond this error.",
        )
        self.target = target


class SpecLoadError(AsgnError):
    """An assignment specification file is missing or malformed."""

    def __init__(self, path: Path | str, detail: str, *, missing: bool = False) -> None:
        if missing:
            description = f"Specification file at {path} could not be read: {detail}"
        else:
            description = f"Specification file at {path} is malformed: {detail}"
        super().__init__(description, CONTACT_INSTRUCTOR)
        self.path = Path(path)
        self.missing = missing


class InvalidAssignmentError(AsgnError):
    def __init__(self, name: str) -> None:
        super().__init__(
            f"Assignment '{name}' is invalid or non-existent.", MAYBE_CONTACT_INSTRUCTOR
        )
        self.name = name


class NoSuchMemberError(AsgnError):
    def __init__(self, username: str) -> None:
        super().__init__(
            f"User '{username}' is not a member of this course.", MAYBE_CONTACT_INSTRUCTOR
        )
        self.username = username


class UnauthorizedError(AsgnError):
    def __init__(self, command: str, role: str) -> None:
        super().__init__(
            f"Command '{command}' is not available to the {role} role.",
            MAYBE_CONTACT_INSTRUCTOR,
        )


class FilePresenceKind(StrEnum):
    NOT_FOUND = "not_found"
    IS_DIR = "is_dir"
    IS_OTHER = "is_other"

    @property
    def description(self) -> str:
        return _FILE_PRESENCE_TEXT[self][0]

    @property
    def advice(self) -> str:
        return _FILE_PRESENCE_TEXT[self][1]


_FILE_PRESENCE_TEXT: Final[dict[FilePresenceKind, tuple[str, str]]] = {
    FilePresenceKind.NOT_FOUND: ("File not found", "Please ensure that the file exists."),
    FilePresenceKind.IS_DIR: (
        "File is actually a directory",
        "Please ensure that the file is not a directory.",
    ),
    FilePresenceKind.IS_OTHER: (
        "File is neither a normal file nor a directory",
        "Please ensure that the file is actually a file.",
    ),
}


class FilePresenceError(AsgnError):
    def __init__(self, path: Path | str, kind: FilePresenceKind) -> None:
        super().__init__(f"{kind.description}: {path}", kind.advice)
        self.path = Path(path)
        self.kind = kind

    @classmethod
    def check(cls, path: Path) -> None:
        """Raise unless ``path`` is an existing plain file."""

        if not path.exists():
            raise cls(path, FilePresenceKind.NOT_FOUND)
        if path.is_dir():
            raise cls(path, FilePresenceKind.IS_DIR)
        if not path.is_file():
            raise cls(path, FilePresenceKind.IS_OTHER)


class InactiveKind(StrEnum):
    BEFORE_OPEN = "before_open"
    AFTER_CLOSE = "after_close"
    INACTIVE = "inactive"


_INACTIVE_TEXT: Final[dict[InactiveKind, str]] = {
    InactiveKind.BEFORE_OPEN: "Assignments cannot be interacted with before their open date.",
    InactiveKind.AFTER_CLOSE: "Assignments cannot be interacted with after their close date.",
    InactiveKind.INACTIVE: "Interaction with this assignment is currently disabled.",
}


class InactiveError(AsgnError):
    def __init__(self, kind: InactiveKind) -> None:
        super().__init__(_INACTIVE_TEXT[kind], MAYBE_CONTACT_INSTRUCTOR)
        self.kind = kind


class GraceError(AsgnError):
    """Base for grace requests rejected before anything is persisted."""


class GraceNotInCourseError(GraceError):
    def __init__(self) -> None:
        super().__init__(
            "This course does not provide grace days.",
            "Assignments should be turned in on-time for full credit.",
        )


class GraceLimitError(GraceError):
    def __init__(self, requested: int, limit: int) -> None:
        super().__init__(
            f"The number of grace days requested ({requested}) exceeds the per-assignment "
            f"grace day limit ({limit}).",
            "Assignments should be turned in before the grace day limit for full credit.",
        )
        self.requested = requested
        self.limit = limit


class GraceInsufficientError(GraceError):
    def __init__(self, requested: int, available: int) -> None:
        super().__init__(
            f"There aren't enough free grace days to provide such an extension "
            f"(requested {requested}, available {available}).",
            "To increase the number of available grace days, remove grace days from other "
            "assignments.",
        )
        self.requested = requested
        self.available = available


class InvalidGraceAmountError(GraceError):
    def __init__(self, requested: int) -> None:
        super().__init__(
            f"Grace day amounts cannot be negative (got {requested}).",
            "Use 0 to remove grace days from an assignment.",
        )
        self.requested = requested


class UntrustedFileError(AsgnError):
    """A file that only the instructor may author is owned by someone else."""

    def __init__(self, path: Path | str, owner: str, expected: str) -> None:
        super().__init__(
            f"File at {path} is owned by '{owner}', not by the instructor '{expected}'.",
            CONTACT_INSTRUCTOR,
        )
        self.path = Path(path)
        self.owner = owner
        self.expected = expected

    @classmethod
    def symlink(cls, path: Path | str, expected: str) -> UntrustedFileError:
        error = cls(path, "", expected)
        error.description = (
            f"File at {path} is a symbolic link; only a regular file written by the "
            f"instructor '{expected}' is trusted."
        )
        error.args = (error.description,)
        return error


class DateOutOfRangeError(AsgnError):
    def __init__(self, detail: str) -> None:
        super().__init__(f"Date out of range: {detail}", VALID_DATE)


class InvalidDateError(AsgnError):
    def __init__(self, text: str) -> None:
        super().__init__(f"Invalid date: {text!r}", VALID_DATE)


class TimeConversionError(AsgnError):
    def __init__(self, seconds: int, detail: str) -> None:
        super().__init__(
            f"Modification time {seconds} cannot be converted to a local timestamp: {detail}",
            CONTACT_INSTRUCTOR,
        )


class StatusFileError(AsgnError):
    """Reading or writing a small per-slot/per-assignment state file failed."""

    def __init__(self, action: str, path: Path | str, detail: str) -> None:
        super().__init__(f"{action} at {path}: {detail}", MAYBE_CONTACT_INSTRUCTOR)
        self.path = Path(path)


class BadStatsError(AsgnError):
    def __init__(self, path: Path | str, detail: str) -> None:
        super().__init__(f"Score file at {path} is malformed: {detail}", CONTACT_INSTRUCTOR)
        self.path = Path(path)


class UnknownMetricError(AsgnError):
    def __init__(self, metric: str, available: Iterable[str]) -> None:
        choices = ", ".join(available) or "none"
        super().__init__(
            f"'{metric}' is not a metric of this assignment (available: {choices}).",
            "Choose one of the metric targets of the score ruleset.",
        )
        self.metric = metric


class ErrorLog(AsgnError):
    """Several independent failures reported together."""

    def __init__(self, errors: Iterable[AsgnError] = ()) -> None:
        self.errors: list[AsgnError] = list(errors)
        summary = f"{len(self.errors)} error(s) occurred."
        super().__init__(summary, MAYBE_CONTACT_INSTRUCTOR)

    def __iter__(self) -> Iterator[AsgnError]:
        return iter(self.errors)

    def __len__(self) -> int:
        return len(self.errors)

    def render(self) -> str:
        return "\n".join(error.render() for error in self.errors)

    def raise_if_any(self) -> None:
        if self.errors:
            raise self


__all__ = [
    "AsgnError",
    "BadStatsError",
    "CONTACT_INSTRUCTOR",
    "DateOutOfRangeError",
    "ErrorLog",
    "FatalRuleError",
    "FilePresenceError",
    "FilePresenceKind",
    "GraceError",
    "GraceInsufficientError",
    "GraceLimitError",
    "GraceNotInCourseError",
    "InactiveError",
    "InactiveKind",
    "InvalidAssignmentError",
    "InvalidDateError",
    "InvalidGraceAmountError",
    "MAYBE_CONTACT_INSTRUCTOR",
    "NoSuchMemberError",
    "SpecLoadError",
    "StatusFileError",
    "TimeConversionError",
    "UnauthorizedError",
    "UnknownMetricError",
    "UntrustedFileError",
    "VALID_DATE",
]

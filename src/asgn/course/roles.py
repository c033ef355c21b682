"""Course roles, ordered by privilege."""

from __future__ import annotations

from enum import StrEnum


class Role(StrEnum):
    INSTRUCTOR = "instructor"
    GRADER = "grader"
    STUDENT = "student"
    OTHER = "other"

    @property
    def level(self) -> int:
        return _LEVELS[self]

    def at_least(self, other: Role) -> bool:
        return self.level >= other.level

    @property
    def quiet_builds(self) -> bool:
        """Students (and outsiders) see build output without make's own chatter."""

        return self in (Role.STUDENT, Role.OTHER)


_LEVELS = {
    Role.OTHER: 0,
    Role.STUDENT: 1,
    Role.GRADER: 2,
    Role.INSTRUCTOR: 3,
}


__all__ = ["Role"]

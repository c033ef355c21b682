"""Course model: assignment specs, submission slots, roles and the course context."""

from asgn.course.assignment import AssignmentSpec
from asgn.course.context import Context
from asgn.course.roles import Role
from asgn.course.slot import SubmissionSlot, SubmissionStatus, verify_owner

__all__ = [
    "AssignmentSpec",
    "Context",
    "Role",
    "SubmissionSlot",
    "SubmissionStatus",
    "verify_owner",
]

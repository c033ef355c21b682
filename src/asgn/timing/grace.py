"""
asgn - grace day budget.

File: src/asgn/timing/grace.py

Purpose
- Validate and record grace-day requests against the course's shared budget.

Functional requirements
- Every check runs before the ``.grace`` file is touched; a rejected request
  leaves the slot unchanged.
- Re-requesting on the same assignment replaces that slot's amount, so the
  slot's current grace is returned to the budget before the new amount is charged.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from asgn.errors import (
    GraceInsufficientError,
    GraceLimitError,
    GraceNotInCourseError,
    InvalidGraceAmountError,
)

if TYPE_CHECKING:
    from asgn.course.assignment import AssignmentSpec
    from asgn.course.context import Context

logger = structlog.get_logger(__name__)


def available_grace(context: Context, username: str) -> int | None:
    """Unspent grace days for ``username``, or ``None`` when the course offers none."""

    if context.grace_total is None:
        return None
    return context.grace_total - context.grace_spent(username)


def check_grace_request(
    context: Context, spec: AssignmentSpec, username: str, amount: int
) -> None:
    if amount < 0:
        raise InvalidGraceAmountError(amount)

    total = context.grace_total
    if total is None:
        raise GraceNotInCourseError()

    limit = context.grace_limit
    if limit is not None and amount > limit:
        raise GraceLimitError(amount, limit)

    current = context.get_slot(spec, username).get_grace()
    spent_elsewhere = context.grace_spent(username) - current
    if spent_elsewhere + amount > total:
        raise GraceInsufficientError(amount, total - spent_elsewhere)


def grant_grace(context: Context, spec: AssignmentSpec, username: str, amount: int) -> None:
    """Set ``username``'s grace days on ``spec`` to ``amount`` if the budget allows it."""

    check_grace_request(context, spec, username, amount)
    context.get_slot(spec, username).set_grace(amount)
    logger.info("grace_granted", assignment=spec.name, user=username, amount=amount)


__all__ = ["available_grace", "check_grace_request", "grant_grace"]

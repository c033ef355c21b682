"""
asgn - unit tests for the grace-day budget

File: tests/unit/timing/test_grace.py

What this test file should cover
- Boundary: a request is accepted iff spent elsewhere + requested <= total.
- Per-assignment limit, courses without grace and negative requests.
- Re-requesting on the same assignment replaces the earlier amount.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st
from structlog.testing import capture_logs

from asgn.course.assignment import AssignmentSpec
from asgn.course.context import Context
from asgn.errors import (
    GraceInsufficientError,
    GraceLimitError,
    GraceNotInCourseError,
    InvalidGraceAmountError,
)
from asgn.timing.grace import available_grace, check_grace_request, grant_grace


def _add_prior_assignment(context: Context, course_root: Path) -> AssignmentSpec:
    AssignmentSpec(
        name="hw0",
        path=course_root / "hw0",
        active=True,
        visible=True,
        file_list=["warmup.cpp"],
    ).sync()
    context.manifest.insert(0, "hw0")
    context.populate_catalog()
    return context.catalog_get("hw0")


def test_scenario_budget_of_five_with_two_spent(make_context, course_root: Path) -> None:
    context = make_context()
    context.grace_total = 5
    context.grace_limit = None
    prior = _add_prior_assignment(context, course_root)
    context.get_slot(prior, "alice").set_grace(2)
    hw1 = context.catalog_get("hw1")

    with pytest.raises(GraceInsufficientError) as excinfo:
        grant_grace(context, hw1, "alice", 4)
    assert excinfo.value.available == 3

    grant_grace(context, hw1, "alice", 3)

    assert context.get_slot(hw1, "alice").get_grace() == 3
    assert available_grace(context, "alice") == 0


def test_limit_is_enforced_per_assignment(make_context) -> None:
    context = make_context()
    hw1 = context.catalog_get("hw1")

    with pytest.raises(GraceLimitError):
        check_grace_request(context, hw1, "alice", 3)
    check_grace_request(context, hw1, "alice", 2)


def test_course_without_grace_rejects_requests(make_context) -> None:
    context = make_context()
    context.grace_total = None

    with pytest.raises(GraceNotInCourseError):
        check_grace_request(context, context.catalog_get("hw1"), "alice", 1)
    assert available_grace(context, "alice") is None


def test_negative_request_is_rejected(make_context) -> None:
    context = make_context()

    with pytest.raises(InvalidGraceAmountError):
        check_grace_request(context, context.catalog_get("hw1"), "alice", -1)


def test_re_request_replaces_current_amount(make_context) -> None:
    context = make_context()
    hw1 = context.catalog_get("hw1")

    grant_grace(context, hw1, "alice", 2)
    grant_grace(context, hw1, "alice", 1)

    assert context.grace_spent("alice") == 1
    assert available_grace(context, "alice") == 2


def test_grant_is_logged(make_context) -> None:
    context = make_context()

    with capture_logs() as logs:
        grant_grace(context, context.catalog_get("hw1"), "bob", 1)

    granted = [entry for entry in logs if entry["event"] == "grace_granted"]
    assert granted and granted[0]["user"] == "bob" and granted[0]["amount"] == 1


@given(
    total=st.integers(min_value=0, max_value=10),
    spent=st.integers(min_value=0, max_value=10),
    requested=st.integers(min_value=0, max_value=12),
)
@settings(
    max_examples=60,
    derandomize=True,
    deadline=None,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)
def test_property_grace_boundary(
    total: int, spent: int, requested: int, make_context, course_root: Path
) -> None:
    context = make_context()
    context.grace_total = total
    context.grace_limit = None
    prior = _add_prior_assignment(context, course_root)
    context.get_slot(prior, "alice").set_grace(spent)
    hw1 = context.catalog_get("hw1")
    context.get_slot(hw1, "alice").set_grace(0)

    if spent + requested <= total:
        check_grace_request(context, hw1, "alice", requested)
    else:
        with pytest.raises(GraceInsufficientError):
            check_grace_request(context, hw1, "alice", requested)

"""
asgn - unit tests for submission slots

File: tests/unit/course/test_slot.py

What this test file should cover
- Turn-in time derivation from file metadata.
- Lenient grace reads, strict extension reads and the owner trust check.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from asgn.course.slot import verify_owner
from asgn.errors import StatusFileError, UntrustedFileError
from asgn.utils.users import current_username, file_owner


def test_turn_in_time_is_latest_mtime(make_context, submit, course_root: Path, write_spec) -> None:
    write_spec(file_list=["a.cpp", "b.cpp"])
    context = make_context()
    early = datetime(2026, 3, 1, 10, 0, 0).astimezone()
    late = early + timedelta(hours=5)
    submit(course_root, "alice", {"a.cpp": "a"}, mtime=early)
    submit(course_root, "alice", {"b.cpp": "b"}, mtime=late)

    slot = context.get_slot(context.catalog_get("hw1"), "alice")

    assert slot.turn_in_time() == late


def test_incomplete_submission_has_no_turn_in_time(
    make_context, submit, course_root: Path, write_spec
) -> None:
    write_spec(file_list=["a.cpp", "b.cpp"])
    context = make_context()
    submit(course_root, "alice", {"a.cpp": "a"})

    status = context.get_slot(context.catalog_get("hw1"), "alice").status()

    assert status.turn_in_time is None
    assert not status.submitted


def test_empty_file_list_is_never_submitted(make_context, course_root: Path, write_spec) -> None:
    write_spec(file_list=[])
    context = make_context()

    assert context.get_slot(context.catalog_get("hw1"), "alice").turn_in_time() is None


def test_grace_defaults_to_zero_and_round_trips(make_context) -> None:
    context = make_context()
    slot = context.get_slot(context.catalog_get("hw1"), "alice")

    assert slot.get_grace() == 0
    slot.set_grace(2)
    assert slot.get_grace() == 2
    assert slot.grace_path.read_text(encoding="utf-8") == "value = 2\n"


def test_malformed_grace_file_is_an_error(make_context, course_root: Path) -> None:
    context = make_context()
    slot = context.get_slot(context.catalog_get("hw1"), "alice")
    slot.base_path.mkdir(parents=True)
    slot.grace_path.write_text('value = "two"\n', encoding="utf-8")

    with pytest.raises(StatusFileError):
        slot.get_grace()


def test_extension_written_by_instructor_is_trusted(make_context) -> None:
    context = make_context()
    slot = context.get_slot(context.catalog_get("hw1"), "alice")

    assert slot.get_extension() == 0
    slot.set_extension(4)
    assert slot.get_extension() == 4
    assert slot.status().extension_days == 4


def test_extension_owned_by_someone_else_is_rejected(make_context) -> None:
    context = make_context()
    context.instructor = "prof-somebody-else"
    slot = context.get_slot(context.catalog_get("hw1"), "alice")
    slot.set_extension(10)

    with pytest.raises(UntrustedFileError) as excinfo:
        slot.get_extension()
    assert excinfo.value.expected == "prof-somebody-else"


def test_verify_owner_uses_injected_lookup(tmp_path: Path) -> None:
    target = tmp_path / ".extension"
    target.write_text("value = 1\n", encoding="utf-8")

    verify_owner(target, "prof", owner_of=lambda path: "prof")
    with pytest.raises(UntrustedFileError) as excinfo:
        verify_owner(target, "prof", owner_of=lambda path: "mallory")
    assert excinfo.value.owner == "mallory"


def test_verify_owner_wraps_lookup_failures(tmp_path: Path) -> None:
    def _broken(path: Path) -> str:
        raise FileNotFoundError(2, "No such file or directory")

    with pytest.raises(StatusFileError):
        verify_owner(tmp_path / "gone", "prof", owner_of=_broken)


def test_symlinked_extension_is_rejected(make_context) -> None:
    context = make_context()
    spec = context.catalog_get("hw1")
    granted = context.get_slot(spec, "bob")
    granted.set_extension(30)
    forged = context.get_slot(spec, "alice")
    forged.base_path.mkdir(parents=True)
    forged.extension_path.symlink_to(granted.extension_path)

    with pytest.raises(UntrustedFileError, match="symbolic link"):
        forged.get_extension()
    with pytest.raises(UntrustedFileError):
        forged.status()
    assert granted.get_extension() == 30


def test_dangling_extension_symlink_is_rejected(make_context, tmp_path: Path) -> None:
    context = make_context()
    slot = context.get_slot(context.catalog_get("hw1"), "alice")
    slot.base_path.mkdir(parents=True)
    slot.extension_path.symlink_to(tmp_path / "nowhere")

    with pytest.raises(UntrustedFileError):
        slot.get_extension()


def test_file_owner_reports_the_link_itself(tmp_path: Path) -> None:
    target = tmp_path / "target"
    target.write_text("x", encoding="utf-8")
    link = tmp_path / "link"
    link.symlink_to(tmp_path / "missing")

    assert file_owner(link) == current_username()
    assert file_owner(target) == current_username()

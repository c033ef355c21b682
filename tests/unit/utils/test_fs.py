"""
asgn - unit tests for filesystem helpers

File: tests/unit/utils/test_fs.py
"""

from __future__ import annotations

import stat
from pathlib import Path

import pytest

from asgn.constants import PUBLIC_FILE_MODE
from asgn.utils.fs import atomic_write, make_fresh_dir, recreate_dir, safe_delete, temp_directory


def test_atomic_write_replaces_and_sets_public_mode(tmp_path: Path) -> None:
    target = tmp_path / "out.txt"
    target.write_text("old", encoding="utf-8")

    atomic_write(target, "new")

    assert target.read_text(encoding="utf-8") == "new"
    assert stat.S_IMODE(target.stat().st_mode) == PUBLIC_FILE_MODE


def test_atomic_write_requires_existing_parent(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        atomic_write(tmp_path / "missing" / "out.txt", b"x")


def test_safe_delete_refuses_paths_outside_root(tmp_path: Path) -> None:
    root = tmp_path / "root"
    root.mkdir()
    outside = tmp_path / "keep.txt"
    outside.write_text("x", encoding="utf-8")

    with pytest.raises(ValueError, match="outside root"):
        safe_delete(outside, root)
    assert outside.exists()


def test_safe_delete_unlinks_symlink_without_following(tmp_path: Path) -> None:
    payload = tmp_path / "payload"
    payload.mkdir()
    (payload / "file").write_text("x", encoding="utf-8")
    link = tmp_path / "link"
    link.symlink_to(payload)

    safe_delete(link, tmp_path)

    assert not link.exists()
    assert (payload / "file").exists()


def test_recreate_dir_empties_existing_directory(tmp_path: Path) -> None:
    target = tmp_path / "slot"
    target.mkdir()
    (target / "stale.o").write_text("x", encoding="utf-8")

    recreate_dir(target)

    assert target.is_dir()
    assert list(target.iterdir()) == []


def test_make_fresh_dir_skips_taken_names(tmp_path: Path) -> None:
    assert make_fresh_dir(tmp_path, "alice") == tmp_path / "alice"

    (tmp_path / "alice").mkdir()
    (tmp_path / "alice.0").mkdir()

    assert make_fresh_dir(tmp_path, "alice") == tmp_path / "alice.1"


def test_temp_directory_is_removed_on_exit(tmp_path: Path) -> None:
    with temp_directory(parent=tmp_path / "scratch") as scratch:
        (scratch / "a").write_text("x", encoding="utf-8")
        assert scratch.parent == tmp_path / "scratch"

    assert not scratch.exists()

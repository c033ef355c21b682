"""
asgn - filesystem utilities

File: src/asgn/utils/fs.py

Purpose
- Provide safe, minimal filesystem helpers for atomic writes, guarded deletion,
  scratch directories and fresh output directories.

Functional requirements
- Atomic writes use temp files in the destination directory and replace in a single step.
- Deletion refuses paths outside the given root.

Non-functional requirements
- Standard library only.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from asgn.constants import PUBLIC_DIR_MODE, PUBLIC_FILE_MODE

if TYPE_CHECKING:
    from collections.abc import Iterator

PathLike = str | os.PathLike[str]

__all__ = [
    "atomic_write",
    "make_fresh_dir",
    "recreate_dir",
    "safe_delete",
    "set_public_mode",
    "temp_directory",
]


def atomic_write(path: PathLike, data: bytes | str, *, encoding: str = "utf-8") -> None:
    """
    Atomically write ``data`` to ``path``.

    The write strategy is:
    1. create temp file in the same directory,
    2. write + flush + fsync file data,
    3. replace target via ``os.replace``.
    """

    target = Path(path)
    target_parent = target.parent.resolve(strict=True)
    if not target_parent.is_dir():
        raise NotADirectoryError(f"{target_parent!s} is not a directory")

    fd, temp_name = tempfile.mkstemp(
        prefix=f".{target.name}.",
        suffix=".tmp",
        dir=str(target_parent),
    )
    temp_path = Path(temp_name)

    try:
        if isinstance(data, bytes):
            with os.fdopen(fd, "wb") as file_handle:
                file_handle.write(data)
                file_handle.flush()
                os.fsync(file_handle.fileno())
        else:
            with os.fdopen(fd, "w", encoding=encoding) as file_handle:
                file_handle.write(data)
                file_handle.flush()
                os.fsync(file_handle.fileno())

        # mkstemp creates 0600 files; course files must stay readable by graders.
        os.chmod(temp_path, PUBLIC_FILE_MODE)
        os.replace(temp_path, target)
    except Exception:
        with contextlib.suppress(OSError):
            temp_path.unlink(missing_ok=True)
        raise


def safe_delete(path: PathLike, root: PathLike) -> None:
    """
    Delete ``path`` only if it is contained within ``root``.

    Symlinks are unlinked without traversing into their targets.
    """

    workspace = Path(root).resolve(strict=True)
    if not workspace.is_dir():
        raise NotADirectoryError(f"{workspace!s} is not a directory")

    target = Path(path)
    candidate = target.parent.resolve(strict=True) / target.name
    if not _is_relative_to(candidate, workspace):
        raise ValueError(f"refusing to delete path outside root: {target!s}")

    if target.is_symlink():
        target.unlink()
        return

    if target.is_dir():
        shutil.rmtree(target)
        return

    target.unlink()


def recreate_dir(path: PathLike) -> Path:
    """Replace whatever is at ``path`` with a new empty directory."""

    target = Path(path)
    if target.exists() or target.is_symlink():
        safe_delete(target, target.parent)
    target.mkdir()
    return target


def make_fresh_dir(parent: PathLike, base_name: str) -> Path:
    """Return ``parent/base_name``, or ``base_name.N`` for the first N not yet taken."""

    root = Path(parent)
    candidate = root / base_name
    index = 0
    while candidate.exists():
        candidate = root / f"{base_name}.{index}"
        index += 1
    return candidate


def set_public_mode(path: PathLike) -> None:
    """Make a rule artifact readable by everyone in the course."""

    target = Path(path)
    mode = PUBLIC_DIR_MODE if target.is_dir() else PUBLIC_FILE_MODE
    os.chmod(target, mode)


@contextmanager
def temp_directory(prefix: str = "asgn-", *, parent: PathLike | None = None) -> Iterator[Path]:
    """Yield a temporary directory path (optionally under ``parent``) and clean it up on exit."""

    if parent is not None:
        Path(parent).mkdir(parents=True, exist_ok=True)
    with tempfile.TemporaryDirectory(
        prefix=prefix, dir=None if parent is None else str(parent)
    ) as tmp:
        yield Path(tmp)


def _is_relative_to(child: Path, parent: Path) -> bool:
    try:
        child.relative_to(parent)
    except ValueError:
        return False
    return True

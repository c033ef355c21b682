"""User identity helpers backed by the POSIX password database."""

from __future__ import annotations

import os
import pwd
from pathlib import Path


def username_for_uid(uid: int) -> str:
    """Return the login name for ``uid``, or the numeric id when it has no entry."""

    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return str(uid)


def current_username() -> str:
    return username_for_uid(os.getuid())


def file_owner(path: Path | str) -> str:
    """Return the login name owning ``path`` itself, not a link target; ``OSError`` propagates."""

    return username_for_uid(os.lstat(path).st_uid)


__all__ = ["current_username", "file_owner", "username_for_uid"]

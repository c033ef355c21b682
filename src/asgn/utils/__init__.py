"""Utility exports for filesystem, TOML and user-identity helpers."""

from asgn.utils.fs import (
    atomic_write,
    make_fresh_dir,
    recreate_dir,
    safe_delete,
    set_public_mode,
    temp_directory,
)
from asgn.utils.tomlio import dumps, load_toml_file, write_toml_file
from asgn.utils.users import current_username, file_owner, username_for_uid

__all__ = [
    "atomic_write",
    "current_username",
    "dumps",
    "file_owner",
    "load_toml_file",
    "make_fresh_dir",
    "recreate_dir",
    "safe_delete",
    "set_public_mode",
    "temp_directory",
    "username_for_uid",
    "write_toml_file",
]

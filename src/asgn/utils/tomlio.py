"""
asgn - TOML reading and deterministic TOML writing.

Reading goes through ``tomllib``. Writing is a small emitter covering the
shapes used by course files: scalars, dates, arrays, nested tables and arrays
of tables. ``None`` values are omitted because TOML has no null.
"""

from __future__ import annotations

import json
import re
import tomllib
from collections.abc import Mapping, Sequence
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Final

from asgn.utils.fs import atomic_write

_BARE_KEY: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9_-]+$")


def load_toml_file(path: Path | str) -> dict[str, Any]:
    """Parse ``path``; ``OSError`` and ``tomllib.TOMLDecodeError`` propagate to the caller."""

    with Path(path).open("rb") as handle:
        return tomllib.load(handle)


def write_toml_file(path: Path | str, payload: Mapping[str, object]) -> None:
    atomic_write(path, dumps(payload))


def dumps(payload: Mapping[str, object]) -> str:
    lines: list[str] = []
    _emit_table(lines, (), payload)
    while lines and not lines[0]:
        lines.pop(0)
    return "\n".join(lines) + "\n"


def _emit_table(lines: list[str], prefix: tuple[str, ...], table: Mapping[str, object]) -> None:
    subtables: list[tuple[str, Mapping[str, object]]] = []
    table_arrays: list[tuple[str, Sequence[Any]]] = []

    for key, value in table.items():
        if value is None:
            continue
        if isinstance(value, Mapping):
            subtables.append((key, value))
        elif _is_table_array(value):
            table_arrays.append((key, value))
        else:
            lines.append(f"{_toml_key(key)} = {_toml_value(value)}")

    for key, value in subtables:
        path = (*prefix, key)
        lines.append("")
        lines.append(f"[{_dotted(path)}]")
        _emit_table(lines, path, value)

    for key, items in table_arrays:
        path = (*prefix, key)
        for item in items:
            lines.append("")
            lines.append(f"[[{_dotted(path)}]]")
            _emit_table(lines, path, item)


def _is_table_array(value: object) -> bool:
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        return False
    return bool(value) and all(isinstance(item, Mapping) for item in value)


def _dotted(path: tuple[str, ...]) -> str:
    return ".".join(_toml_key(part) for part in path)


def _toml_key(value: str) -> str:
    if _BARE_KEY.match(value):
        return value
    return json.dumps(value, ensure_ascii=False)


def _toml_value(value: object) -> str:
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, datetime):
        return value.isoformat(timespec="seconds")
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, Path):
        return json.dumps(value.as_posix(), ensure_ascii=False)
    if isinstance(value, Sequence):
        return "[" + ", ".join(_toml_value(item) for item in value) + "]"
    raise ValueError(f"Unsupported TOML value type: {type(value).__name__}")


__all__ = ["dumps", "load_toml_file", "write_toml_file"]

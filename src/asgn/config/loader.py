"""
asgn - course file loader.

File: src/asgn/config/loader.py

Purpose
- Load the effective course configuration from defaults, ``.course.toml``,
  environment variables and CLI overrides, and write course data back.

Functional requirements
- Precedence: CLI > env (``ASGN_``) > file > defaults.
- Only the ``observability`` section may be overridden from the environment or
  the command line; course membership and grace settings come from the file so
  that a later sync never persists a transient override.
- ``observability.log_file`` is resolved relative to the course root.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final, Literal

from asgn.config.schema import (
    MEMBER_LIST_FIELDS,
    PATH_FIELDS,
    CourseConfig,
    assert_valid_config,
    default_config,
    merge_config,
)
from asgn.constants import COURSE_FILE_NAME, ENV_PREFIX
from asgn.utils.tomlio import write_toml_file


@dataclass(frozen=True, slots=True)
class _Binding:
    path: tuple[str, ...]
    value_type: Literal["str", "level"]


_ENV_BINDINGS: Final[tuple[_Binding, ...]] = (
    _Binding(("observability", "log_level"), "level"),
    _Binding(("observability", "log_file"), "str"),
)


class ConfigLoadError(ValueError):
    """Raised when the course file cannot be read or overrides cannot be applied."""


def course_file_path(course_root: str | Path) -> Path:
    return Path(course_root) / COURSE_FILE_NAME


def load_course_config(
    course_root: str | Path,
    *,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> CourseConfig:
    """Load the effective course configuration for ``course_root``."""

    root = Path(course_root).expanduser().resolve()
    env_map = dict(os.environ if environ is None else environ)

    file_payload = _load_toml_file(course_file_path(root))
    merged = merge_config(default_config(), file_payload)
    assert_valid_config(merged)

    merged = merge_config(merged, _collect_env_overrides(env_map))
    merged = merge_config(merged, _materialize_cli_overrides(cli_overrides or {}))
    validated = assert_valid_config(merged)
    return normalize_paths(validated, base_dir=root)


def write_course_config(course_root: str | Path, config: Mapping[str, Any]) -> None:
    """Persist course data; the ``observability`` table on disk is kept as written."""

    path = course_file_path(course_root)
    payload: dict[str, Any] = {}
    if config.get("instructor"):
        payload["instructor"] = config["instructor"]
    for key in MEMBER_LIST_FIELDS:
        payload[key] = list(config.get(key, []))
    for key in ("grace_total", "grace_limit"):
        if config.get(key) is not None:
            payload[key] = config[key]
    if path.exists():
        observability = _load_toml_file(path).get("observability")
        if isinstance(observability, Mapping):
            payload["observability"] = dict(observability)
    write_toml_file(path, payload)


def normalize_paths(config: CourseConfig, *, base_dir: Path) -> CourseConfig:
    materialized: dict[str, Any] = merge_config({}, config)
    for field_path in PATH_FIELDS:
        value = _get_nested(materialized, field_path)
        if isinstance(value, str):
            _set_nested(materialized, field_path, _normalize_one_path(value, base_dir))
    return materialized  # type: ignore[return-value]


def _load_toml_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigLoadError(f"course file not found: {path}")
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigLoadError(f"unable to read course file {path}: {exc}") from exc


def _collect_env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for binding in _ENV_BINDINGS:
        env_name = _env_name_for_path(binding.path)
        raw = environ.get(env_name)
        if raw is None:
            continue
        value = raw.strip()
        if not value:
            raise ConfigLoadError(f"{env_name} -> {'.'.join(binding.path)} must not be empty")
        if binding.value_type == "level":
            value = value.upper()
        _set_nested(overrides, binding.path, value)
    return overrides


def _materialize_cli_overrides(cli_overrides: Mapping[str, object]) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    allowed = {".".join(binding.path) for binding in _ENV_BINDINGS}
    for key in sorted(cli_overrides):
        value = cli_overrides[key]
        if value is None:
            continue
        if key not in allowed:
            raise ConfigLoadError(f"invalid CLI override key {key!r}")
        _set_nested(payload, tuple(key.split(".")), value)
    return payload


def _set_nested(target: dict[str, Any], path: tuple[str, ...], value: object) -> None:
    cursor = target
    for part in path[:-1]:
        next_node = cursor.get(part)
        if not isinstance(next_node, dict):
            next_node = {}
            cursor[part] = next_node
        cursor = next_node
    cursor[path[-1]] = value


def _get_nested(payload: Mapping[str, object], path: tuple[str, ...]) -> object | None:
    cursor: object = payload
    for part in path:
        if not isinstance(cursor, Mapping) or part not in cursor:
            return None
        cursor = cursor[part]
    return cursor


def _normalize_one_path(raw: str, base_dir: Path) -> str:
    candidate = Path(os.path.expandvars(raw)).expanduser()
    if not candidate.is_absolute():
        candidate = base_dir / candidate
    return Path(os.path.normpath(str(candidate))).as_posix()


def _env_name_for_path(path: tuple[str, ...]) -> str:
    return ENV_PREFIX + "_".join(part.upper() for part in path)


__all__ = [
    "ConfigLoadError",
    "course_file_path",
    "load_course_config",
    "normalize_paths",
    "write_course_config",
]

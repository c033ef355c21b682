"""
asgn - course file schema.

File: src/asgn/config/schema.py

Purpose
- Define the typed shape, defaults and validation rules of ``.course.toml``.

Functional requirements
- Validation reports every issue with a dotted path instead of stopping at the first.
- Membership lists keep their declared order and reject duplicates.
- Unknown keys are rejected so typos do not silently fall back to defaults.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, Literal, NotRequired, TypedDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]

LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR")
MEMBER_LIST_FIELDS: Final[tuple[str, ...]] = ("manifest", "graders", "students")
PATH_FIELDS: Final[tuple[tuple[str, ...], ...]] = (("observability", "log_file"),)


class ObservabilityConfig(TypedDict):
    log_level: LogLevel
    log_file: NotRequired[str]


class CourseConfig(TypedDict):
    instructor: NotRequired[str]
    manifest: list[str]
    graders: list[str]
    students: list[str]
    grace_total: NotRequired[int]
    grace_limit: NotRequired[int]
    observability: ObservabilityConfig


DEFAULT_CONFIG: Final[CourseConfig] = {
    "manifest": [],
    "graders": [],
    "students": [],
    "observability": {"log_level": "WARNING"},
}


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str


class ConfigValidationError(ValueError):
    """Raised when strict config validation fails."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.path}: {item.message}" for item in self.issues)
        super().__init__(f"invalid course file:\n{rendered}")


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ConfigValidationIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(ConfigValidationIssue(path=path, message=message))

    def items(self) -> tuple[ConfigValidationIssue, ...]:
        return tuple(self._items)

    @property
    def has_issues(self) -> bool:
        return bool(self._items)


def default_config() -> CourseConfig:
    """Return a deep copy of the built-in defaults."""

    return copy.deepcopy(DEFAULT_CONFIG)


def merge_config(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Deep-merge ``overlay`` onto ``base``; lists are replaced, not concatenated."""

    merged = copy.deepcopy(dict(base))
    _merge_into(merged, overlay)
    return merged


def validate_config(config: Mapping[str, object] | object) -> tuple[ConfigValidationIssue, ...]:
    issues = _IssueCollector()
    if not isinstance(config, Mapping):
        issues.add("<root>", f"expected table, got {type(config).__name__}")
        return issues.items()

    _reject_unknown_keys(
        config,
        {"instructor", *MEMBER_LIST_FIELDS, "grace_total", "grace_limit", "observability"},
        "",
        issues,
    )
    if "instructor" in config:
        _as_str(config["instructor"], "instructor", issues)
    for key in MEMBER_LIST_FIELDS:
        _as_name_list(config.get(key), key, issues)
    for key in ("grace_total", "grace_limit"):
        if key in config:
            _as_int(config[key], key, issues, minimum=0)

    observability = config.get("observability")
    if not isinstance(observability, Mapping):
        issues.add("observability", "expected table")
    else:
        _reject_unknown_keys(observability, {"log_level", "log_file"}, "observability", issues)
        _as_enum(
            observability.get("log_level"),
            "observability.log_level",
            issues,
            allowed_values=LOG_LEVELS,
        )
        if "log_file" in observability:
            text = _as_str(observability["log_file"], "observability.log_file", issues)
            if text is not None and "\x00" in text:
                issues.add("observability.log_file", "must not contain NUL bytes")

    return issues.items()


def assert_valid_config(config: Mapping[str, object] | object) -> CourseConfig:
    """Validate config and raise ``ConfigValidationError`` on failure."""

    issues = validate_config(config)
    if issues:
        raise ConfigValidationError(issues)
    assert isinstance(config, Mapping)
    return copy.deepcopy(dict(config))  # type: ignore[return-value]


def _as_str(value: object, path: str, issues: _IssueCollector) -> str | None:
    if not isinstance(value, str):
        issues.add(path, f"expected string, got {type(value).__name__}")
        return None
    parsed = value.strip()
    if not parsed:
        issues.add(path, "must not be empty")
        return None
    return parsed


def _as_int(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    minimum: int | None = None,
) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        issues.add(path, f"expected integer, got {type(value).__name__}")
        return None
    if minimum is not None and value < minimum:
        issues.add(path, f"must be >= {minimum}")
        return None
    return value


def _as_enum(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    allowed_values: tuple[str, ...],
) -> str | None:
    parsed = _as_str(value, path, issues)
    if parsed is None:
        return None
    if parsed not in allowed_values:
        expected = ", ".join(sorted(allowed_values))
        issues.add(path, f"invalid value {parsed!r}; expected one of: {expected}")
        return None
    return parsed


def _as_name_list(value: object, path: str, issues: _IssueCollector) -> list[str] | None:
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        issues.add(path, f"expected array of names, got {type(value).__name__}")
        return None
    seen: set[str] = set()
    names: list[str] = []
    for index, item in enumerate(value):
        item_path = f"{path}[{index}]"
        name = _as_str(item, item_path, issues)
        if name is None:
            continue
        if "/" in name or name in (".", ".."):
            issues.add(item_path, "must be a plain name, not a path")
            continue
        if name in seen:
            issues.add(item_path, f"duplicate entry {name!r}")
            continue
        seen.add(name)
        names.append(name)
    return names


def _reject_unknown_keys(
    payload: Mapping[str, object],
    allowed: set[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(payload):
        if key not in allowed:
            issues.add(_join(path, key), "unknown field")


def _join(path: str, key: str) -> str:
    if not path:
        return key
    return f"{path}.{key}"


def _merge_into(target: dict[str, Any], overlay: Mapping[str, object]) -> None:
    for key, value in overlay.items():
        if isinstance(value, Mapping):
            existing = target.get(key)
            nested = dict(existing) if isinstance(existing, Mapping) else {}
            _merge_into(nested, value)
            target[key] = nested
        else:
            target[key] = copy.deepcopy(value)


__all__ = [
    "ConfigValidationError",
    "ConfigValidationIssue",
    "CourseConfig",
    "DEFAULT_CONFIG",
    "LOG_LEVELS",
    "LogLevel",
    "MEMBER_LIST_FIELDS",
    "ObservabilityConfig",
    "PATH_FIELDS",
    "assert_valid_config",
    "default_config",
    "merge_config",
    "validate_config",
]

"""Structured logging setup: structlog routed through stdlib handlers.

Diagnostics go to stderr as ``key=value`` lines and, when configured, to a
JSON-lines file. User-facing output is the renderer's job, not the logger's.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Final

import structlog

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

_DEFAULT_LOGGER_NAME: Final[str] = "asgn"

_STANDARD_LOG_RECORD_FIELDS: Final[frozenset[str]] = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "thread",
        "threadName",
        "taskName",
    }
)


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    level: int | str = "WARNING"
    log_file: Path | str | None = None
    logger_name: str = _DEFAULT_LOGGER_NAME
    log_to_stderr: bool = True


def config_from_observability(observability: Mapping[str, object] | None) -> LoggingConfig:
    """Build a ``LoggingConfig`` from the ``[observability]`` table of the course file."""

    cfg = dict(observability or {})
    raw_level = cfg.get("log_level", "WARNING")
    raw_file = cfg.get("log_file")
    return LoggingConfig(
        level=raw_level if isinstance(raw_level, (int, str)) else "WARNING",
        log_file=raw_file if isinstance(raw_file, (str, Path)) else None,
    )


class _JsonLineFormatter(logging.Formatter):
    """Formatter that emits canonical JSON objects per log line."""

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, JSONValue] = {
            "timestamp": _iso8601z_from_epoch(record.created),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        extras = _extract_extra_fields(record)
        if extras:
            event["fields"] = extras
        if record.exc_info is not None:
            event["exception"] = self.formatException(record.exc_info)
        return json.dumps(event, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


class _KeyValueFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        parts = [f"[{record.levelname.lower()}]", record.getMessage()]
        for key, value in sorted(_extract_extra_fields(record).items()):
            parts.append(f"{key}={_render_value(value)}")
        line = " ".join(parts)
        if record.exc_info is not None:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(config: LoggingConfig | None = None) -> logging.Logger:
    """Configure structlog and the ``asgn`` stdlib logger; safe to call repeatedly."""

    cfg = config or LoggingConfig()
    level = _parse_log_level(cfg.level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.render_to_log_kwargs,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    logger = logging.getLogger(cfg.logger_name)
    shutdown_logging(logger)
    logger.setLevel(level)
    logger.propagate = False

    if cfg.log_to_stderr:
        stderr_handler = logging.StreamHandler()
        stderr_handler.setFormatter(_KeyValueFormatter())
        logger.addHandler(stderr_handler)

    if cfg.log_file is not None:
        log_path = Path(cfg.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(_JsonLineFormatter())
        logger.addHandler(file_handler)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    return logger


def shutdown_logging(logger: logging.Logger | None = None) -> None:
    """Detach and close every handler installed on the ``asgn`` logger."""

    target = logger if logger is not None else logging.getLogger(_DEFAULT_LOGGER_NAME)
    for handler in list(target.handlers):
        target.removeHandler(handler)
        handler.flush()
        handler.close()


def bind_context(**fields: str | None) -> None:
    """Bind correlation fields (course, user, assignment) to every later log event."""

    structlog.contextvars.bind_contextvars(
        **{key: value for key, value in fields.items() if value}
    )


@contextmanager
def context_scope(**fields: str | None) -> Iterator[None]:
    present = {key: value for key, value in fields.items() if value}
    with structlog.contextvars.bound_contextvars(**present):
        yield


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


def _parse_log_level(value: int | str) -> int:
    if isinstance(value, int):
        return value
    normalized = value.strip().upper()
    parsed = logging.getLevelName(normalized)
    if isinstance(parsed, int):
        return parsed
    raise ValueError(f"unsupported logging level {value!r}")


def _iso8601z_from_epoch(epoch_seconds: float) -> str:
    timestamp = datetime.fromtimestamp(epoch_seconds, tz=UTC)
    return timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _extract_extra_fields(record: logging.LogRecord) -> dict[str, JSONValue]:
    fields: dict[str, JSONValue] = {}
    for key, value in record.__dict__.items():
        if key in _STANDARD_LOG_RECORD_FIELDS or key.startswith("_"):
            continue
        fields[key] = _normalize_json_value(value)
    return fields


def _normalize_json_value(value: object) -> JSONValue:
    if value is None or isinstance(value, (str, bool, int)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else str(value)
    if isinstance(value, Mapping):
        return {str(key): _normalize_json_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize_json_value(item) for item in value]
    return str(value)


def _render_value(value: JSONValue) -> str:
    if isinstance(value, str):
        return value if value and " " not in value else json.dumps(value, ensure_ascii=False)
    return json.dumps(value, sort_keys=True, ensure_ascii=False)


__all__ = [
    "LoggingConfig",
    "bind_context",
    "clear_context",
    "config_from_observability",
    "context_scope",
    "setup_logging",
    "shutdown_logging",
]

"""Stable constants shared across the course tree layout."""

from __future__ import annotations

from datetime import time
from typing import Final

# Course tree layout (relative to the course root).
COURSE_FILE_NAME: Final[str] = ".course.toml"
INFO_DIR_NAME: Final[str] = ".info"
SPEC_FILE_NAME: Final[str] = "info.toml"
SCORE_FILE_NAME: Final[str] = "score.toml"
MAKEFILE_NAME: Final[str] = "Makefile"
PUBLIC_DIR_NAME: Final[str] = "public"
PRIVATE_DIR_NAME: Final[str] = "private"
INTERNAL_DIR_NAME: Final[str] = ".internal"
SCORE_BUILD_DIR_NAME: Final[str] = "score_build"

# Per-slot state files (relative to a submission directory).
GRACE_FILE_NAME: Final[str] = ".grace"
EXTENSION_FILE_NAME: Final[str] = ".extension"

# Rule artifacts are reset to these modes so graders and later stages can read them.
PUBLIC_FILE_MODE: Final[int] = 0o644
PUBLIC_DIR_MODE: Final[int] = 0o755

# Date-only TOML values mean "end of that day".
DEFAULT_DUE_TIME: Final[time] = time(23, 59, 59)

# Cached stat blocks within this many seconds of the live turn-in time are reused.
STAT_STALENESS_TOLERANCE_SECONDS: Final[int] = 1

BUILD_COMMAND: Final[str] = "make"
ENV_PREFIX: Final[str] = "ASGN_"
NONE_PLACEHOLDER: Final[str] = "NONE"

__all__ = [
    "BUILD_COMMAND",
    "COURSE_FILE_NAME",
    "DEFAULT_DUE_TIME",
    "ENV_PREFIX",
    "EXTENSION_FILE_NAME",
    "GRACE_FILE_NAME",
    "INFO_DIR_NAME",
    "INTERNAL_DIR_NAME",
    "MAKEFILE_NAME",
    "NONE_PLACEHOLDER",
    "PRIVATE_DIR_NAME",
    "PUBLIC_DIR_MODE",
    "PUBLIC_FILE_MODE",
    "PUBLIC_DIR_NAME",
    "SCORE_BUILD_DIR_NAME",
    "SCORE_FILE_NAME",
    "SPEC_FILE_NAME",
    "STAT_STALENESS_TOLERANCE_SECONDS",
]

"""
asgn - course assignment manager.

File: src/asgn/__init__.py

Purpose
- Package root. Students submit files into per-user slots of a shared course
  directory; graders and instructors build, check, grade and rank those
  submissions by running Makefile targets described in each assignment's
  ``.info/info.toml``.

Functional requirements
- Must not have side effects at import time (no config loading, no logging init).
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]

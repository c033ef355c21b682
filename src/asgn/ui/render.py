"""Output rendering for asgn terminal commands.

File: src/asgn/ui/render.py

Purpose
- Provide a thin rendering layer for command and rule output.
- Respect the NO_COLOR environment variable and the --no-color CLI flag.

Functional requirements
- Plain-text rendering must always work; color is an optional decoration.
- Every line is flushed immediately so it interleaves correctly with child
  process output sharing the same terminal.
"""

from __future__ import annotations

import os
import shutil
import sys
from typing import TYPE_CHECKING, Final, TextIO

if TYPE_CHECKING:
    from collections.abc import Sequence

_RESET: Final[str] = "\033[0m"
_BOLD: Final[str] = "\033[1m"
_RED: Final[str] = "\033[31m"
_GREEN: Final[str] = "\033[32m"
_YELLOW: Final[str] = "\033[33m"
_CYAN: Final[str] = "\033[36m"

_DEFAULT_WIDTH: Final[int] = 80


def _color_allowed(no_color_flag: bool, stream: TextIO | None) -> bool:
    """Check whether color output should be attempted."""

    if no_color_flag:
        return False
    if os.environ.get("NO_COLOR", ""):
        return False
    target = stream if stream is not None else sys.stdout
    return hasattr(target, "isatty") and target.isatty()


class CLIRenderer:
    """Thin CLI output renderer.

    Status lines use the ``! `` prefix and advice lines use ``> ``, matching the
    way errors are rendered.
    """

    def __init__(
        self,
        *,
        no_color: bool = False,
        verbose: bool = False,
        stream: TextIO | None = None,
    ) -> None:
        self.verbose = verbose
        self._stream = stream
        self._color = _color_allowed(no_color, stream)

    def _emit(self, line: str = "") -> None:
        print(line, file=self._stream if self._stream is not None else sys.stdout, flush=True)

    def _paint(self, text: str, code: str) -> str:
        if not self._color:
            return text
        return f"{code}{text}{_RESET}"

    def text(self, line: str) -> None:
        self._emit(line)

    def blank(self) -> None:
        self._emit()

    def heading(self, text: str) -> None:
        self._emit(self._paint(text, _BOLD))

    def section(self, title: str) -> None:
        """Print a section header with a preceding blank line."""

        self._emit()
        self._emit(self._paint(title, _BOLD))

    def detail(self, line: str) -> None:
        """Print a line only in verbose mode."""

        if self.verbose:
            self._emit(line)

    def kv(self, key: str, value: object) -> None:
        self._emit(f"{key}: {value}")

    def hline(self, *, bold: bool = False) -> None:
        """Print a horizontal rule across the terminal."""

        width = shutil.get_terminal_size((_DEFAULT_WIDTH, 24)).columns or _DEFAULT_WIDTH
        if bold:
            self._emit(self._paint("=" * width, _BOLD))
        else:
            self._emit("-" * width)

    def status(self, text: str) -> None:
        self._emit(self._paint(text, _CYAN))

    def ok(self, text: str) -> None:
        """Print a passing status line."""

        self._emit(self._paint(f"! {text}", _GREEN))

    def fail(self, text: str) -> None:
        """Print a failing status line."""

        self._emit(self._paint(f"! {text}", _RED))

    def notice(self, text: str) -> None:
        self._emit(f"! {text}")

    def advice(self, text: str) -> None:
        self._emit(self._paint(f"> {text}", _YELLOW))

    def warning(self, text: str) -> None:
        self._emit(self._paint(f"Warning: {text}", _YELLOW))

    def error(self, rendered: str) -> None:
        """Print a pre-rendered error block (``! description`` / ``> advice``)."""

        for line in rendered.splitlines():
            if line.startswith("! "):
                self._emit(self._paint(line, _RED))
            else:
                self._emit(line)

    def items(self, entries: Sequence[str], *, prefix: str = "- ") -> None:
        for entry in entries:
            self._emit(f"  {prefix}{entry}")

    def table(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[str]],
        *,
        title: str | None = None,
    ) -> None:
        """Print a formatted ASCII table."""

        if title:
            self.section(title)
        if not rows:
            self._emit("  (none)")
            return

        col_count = len(headers)
        widths = [len(h) for h in headers]
        for row in rows:
            for i in range(min(len(row), col_count)):
                widths[i] = max(widths[i], len(str(row[i])))

        def _pad(cells: Sequence[str]) -> str:
            parts: list[str] = []
            for i in range(col_count):
                cell = str(cells[i]) if i < len(cells) else ""
                parts.append(cell.ljust(widths[i]))
            return "  ".join(parts).rstrip()

        self._emit(f"  {_pad(list(headers))}")
        self._emit(f"  {'  '.join('-' * w for w in widths)}")
        for row in rows:
            self._emit(f"  {_pad(list(row))}")


def create_renderer(*, no_color: bool = False, verbose: bool = False) -> CLIRenderer:
    """Create a CLI renderer with the given settings."""

    return CLIRenderer(no_color=no_color, verbose=verbose)


__all__ = ["CLIRenderer", "create_renderer"]

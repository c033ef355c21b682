"""
asgn - unit tests for terminal rendering

File: tests/unit/ui/test_render.py
"""

from __future__ import annotations

import io

import pytest

from asgn.errors import InvalidAssignmentError
from asgn.ui.render import CLIRenderer


def test_plain_output_has_no_escape_codes(renderer: CLIRenderer, out_buffer: io.StringIO) -> None:
    renderer.ok("done")
    renderer.fail("broken")
    renderer.advice("try again")

    assert out_buffer.getvalue() == "! done\n! broken\n> try again\n"


def test_error_block_keeps_description_and_advice(renderer: CLIRenderer, out_buffer: io.StringIO) -> None:
    renderer.error(InvalidAssignmentError("hw9").render())

    lines = out_buffer.getvalue().splitlines()
    assert lines[0] == "! Assignment 'hw9' is invalid or non-existent."
    assert lines[1].startswith("> ")


def test_table_pads_columns(renderer: CLIRenderer, out_buffer: io.StringIO) -> None:
    renderer.table(["user", "score"], [["alice", "10"], ["bo", "7"]])

    assert out_buffer.getvalue().splitlines() == [
        "  user   score",
        "  -----  -----",
        "  alice  10",
        "  bo     7",
    ]


def test_empty_table_with_title(renderer: CLIRenderer, out_buffer: io.StringIO) -> None:
    renderer.table(["a"], [], title="Submissions")

    assert out_buffer.getvalue() == "\nSubmissions\n  (none)\n"


def test_no_color_env_disables_color(monkeypatch: pytest.MonkeyPatch) -> None:
    class _Tty(io.StringIO):
        def isatty(self) -> bool:
            return True

    monkeypatch.delenv("NO_COLOR", raising=False)
    stream = _Tty()
    CLIRenderer(stream=stream).ok("x")
    assert "\033[" in stream.getvalue()

    monkeypatch.setenv("NO_COLOR", "1")
    quiet = _Tty()
    CLIRenderer(stream=quiet).ok("x")
    assert quiet.getvalue() == "! x\n"


def test_detail_lines_only_in_verbose_mode(out_buffer: io.StringIO) -> None:
    CLIRenderer(no_color=True, stream=out_buffer).detail("hidden")
    CLIRenderer(no_color=True, verbose=True, stream=out_buffer).detail("shown")

    assert out_buffer.getvalue() == "shown\n"

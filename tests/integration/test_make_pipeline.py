"""
asgn - integration tests for rule execution through real ``make``

File: tests/integration/test_make_pipeline.py

Purpose
- Run submit and score stages against a real course Makefile.

What this test file should cover
- Passing and failing targets map to rule outcomes.
- Metric targets write files that are harvested into ``score.toml``.
- The Makefile sees the PUBLIC/PRIVATE directory variables.
"""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from asgn.scoring.refresh import load_stats, refresh_scores

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(shutil.which("make") is None, reason="make is not installed"),
]

MAKEFILE = (
    ".PHONY: compile broken runtime passes where\n"
    "compile:\n"
    "\ttest -f main.cpp\n"
    "broken:\n"
    "\texit 3\n"
    "runtime:\n"
    "\t@echo 1.5 > $@\n"
    "passes:\n"
    "\t@grep -c PASS main.cpp > $@\n"
    "where:\n"
    "\t@echo $(PUBLIC) > public_dir\n"
)


def _install_makefile(course_root: Path) -> None:
    (course_root / "hw1" / ".info" / "Makefile").write_text(MAKEFILE, encoding="utf-8")


def test_submit_pipeline_with_real_make(
    make_context, write_spec, submit, course_root: Path, renderer, out_buffer
) -> None:
    spec = write_spec(
        build={"rules": [{"target": "compile"}, {"target": "where"}]},
        check={"rules": [{"target": "broken", "fail_text": "Broken on purpose."}]},
    )
    _install_makefile(course_root)
    slot = submit(course_root, "alice", {"main.cpp": "PASS\n"})
    context = make_context(user="alice")

    outcome = spec.submit_pipeline(spec.rule_engine(context, renderer=renderer), slot)

    assert not outcome.ok
    assert "Broken on purpose." in out_buffer.getvalue()
    public_dir = (slot / "public_dir").read_text(encoding="utf-8").strip()
    assert public_dir == str(spec.info_path / "public")


def test_refresh_scores_with_real_make(
    make_context, write_spec, submit, course_root: Path, renderer, instructor
) -> None:
    write_spec(
        build={"rules": [{"target": "compile"}]},
        score={"rules": [{"target": "runtime", "kind": "float"}, {"target": "passes", "kind": "int"}]},
    )
    _install_makefile(course_root)
    submit(course_root, "alice", {"main.cpp": "PASS\nPASS\nFAIL\n"})
    context = make_context(user=instructor)
    spec = context.catalog_get("hw1")

    stats = refresh_scores(context, spec, renderer=renderer)

    block = stats.get_block("alice")
    assert block is not None
    assert block.scores == {"runtime": 1.5, "passes": 2}
    assert stats.get_block("bob") is None
    assert load_stats(spec) == stats
    assert list((spec.info_path / ".internal" / "score_build").iterdir()) == []

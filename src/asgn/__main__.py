"""Module entrypoint for ``python -m asgn``."""

from __future__ import annotations

from asgn.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())

"""Terminal rendering for asgn commands."""

from asgn.ui.render import CLIRenderer, create_renderer

__all__ = ["CLIRenderer", "create_renderer"]

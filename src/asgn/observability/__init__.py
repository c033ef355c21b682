"""Logging configuration for asgn."""

from asgn.observability.logging import (
    LoggingConfig,
    bind_context,
    clear_context,
    config_from_observability,
    context_scope,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    "LoggingConfig",
    "bind_context",
    "clear_context",
    "config_from_observability",
    "context_scope",
    "setup_logging",
    "shutdown_logging",
]

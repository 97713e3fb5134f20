"""Observability helpers for cloudgroups."""

from .logging import (
    CONSOLE_FORMAT,
    FILE_FORMAT,
    LOG_LEVELS,
    LogConfig,
    LogLevel,
    group_context,
    setup_logging,
    teardown_logging,
)

__all__ = [
    "CONSOLE_FORMAT",
    "FILE_FORMAT",
    "LogConfig",
    "LOG_LEVELS",
    "LogLevel",
    "group_context",
    "setup_logging",
    "teardown_logging",
]

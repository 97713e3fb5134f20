"""Logging configuration for cloudgroups.

Structured logging via loguru. Library logging is disabled by default and
enabled when the embedding tool calls setup_logging with a LogConfig.

Records carry their reconciliation context (cluster, zone, managed group,
template, instance) as bound extras; both sinks render it after the
source location.

Example:
    from cloudgroups.observability.logging import LogConfig, setup_logging, teardown_logging

    handler_ids = setup_logging(LogConfig(level="DEBUG", console=True))
    try:
        groups = await discoverer.discover(...)
    finally:
        teardown_logging(handler_ids)
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal, get_args

from loguru import logger

if TYPE_CHECKING:
    from cloudgroups.api import ManagedGroup

type LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"]

LOG_LEVELS: tuple[str, ...] = get_args(LogLevel.__value__)

_LIBRARY = "cloudgroups"

_CONTEXT_KEYS = (
    "component", "provider", "cluster", "zone", "group", "template", "instance_id",
)

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>"
    "<dim>{extra[_ctx]}</dim> - "
    "<level>{message}</level>"
)

FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{name}:{function}:{line}{extra[_ctx]} - {message}"
)


def group_context(group: ManagedGroup) -> dict[str, str]:
    """Bindable context naming a managed group, its zone and its template."""
    return {"zone": group.zone, "group": group.name, "template": group.template.name}


def _format_context(extra: dict[str, Any]) -> str:
    parts = [f"{k}={extra[k]}" for k in _CONTEXT_KEYS if extra.get(k) is not None]
    return f" [{' '.join(parts)}]" if parts else ""


def _attach_context(record: Any) -> None:
    record["extra"]["_ctx"] = _format_context(record["extra"])


@dataclass(frozen=True, slots=True)
class LogConfig:
    """Logging configuration.

    Attributes:
        level: Minimum log level for the console sink. The file sink always
            records DEBUG and above.
        file: Path to log file. None disables file output.
        console: Whether to log to stderr.
        rotation: File rotation policy (e.g., "50 MB", "1 day").
        retention: Number of old log files to keep.
    """

    level: LogLevel = "INFO"
    file: str | None = ".cloudgroups/cloudgroups.log"
    console: bool = False
    rotation: str = "50 MB"
    retention: int = 10


def _sinks(config: LogConfig) -> Iterator[dict[str, Any]]:
    if config.console:
        yield {
            "sink": sys.stderr,
            "level": config.level,
            "format": CONSOLE_FORMAT,
            "colorize": True,
        }
    if config.file:
        path = Path(config.file)
        path.parent.mkdir(parents=True, exist_ok=True)
        yield {
            "sink": str(path),
            "level": "DEBUG",
            "format": FILE_FORMAT,
            "rotation": config.rotation,
            "retention": config.retention,
            "compression": "zip",
            "diagnose": False,
        }


def setup_logging(config: LogConfig) -> list[int]:
    """Route cloudgroups records to the configured sinks.

    Replaces any existing handlers. Returns the handler IDs to pass to
    teardown_logging.
    """
    logger.remove()
    logger.enable(_LIBRARY)
    logger.configure(patcher=_attach_context)
    return [logger.add(filter=_LIBRARY, **sink) for sink in _sinks(config)]


def teardown_logging(handler_ids: list[int]) -> None:
    """Remove handlers and disable library logging again."""
    for hid in handler_ids:
        logger.remove(hid)
    logger.disable(_LIBRARY)

"""User-facing activity log for a deploy session."""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeAlias

from autodeploy.logging_config import get_logger
from autodeploy.models.events import LogEntry, LogLevel

ProgressSink: TypeAlias = Callable[[str, LogLevel], None]

logger = get_logger(__name__)

_STRUCTLOG_METHOD = {
    LogLevel.INFO: "info",
    LogLevel.SUCCESS: "info",
    LogLevel.WARNING: "warning",
    LogLevel.ERROR: "error",
}


class ActivityLog:
    """Ordered list of log entries, mirrored to structured logging."""

    def __init__(self) -> None:
        self._entries: list[LogEntry] = []

    def add(self, message: str, level: LogLevel = LogLevel.INFO) -> LogEntry:
        entry = LogEntry(message=message, level=level)
        self._entries.append(entry)
        getattr(logger, _STRUCTLOG_METHOD[level])("activity", message=message, level=level.value)
        return entry

    __call__ = add

    def entries(self) -> list[LogEntry]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

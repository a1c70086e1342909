"""Activity log models."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field


class LogLevel(str, Enum):
    """Severity of a user-facing log entry."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class LogEntry(BaseModel):
    """Append-only entry in the session activity log."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    message: str
    level: LogLevel = LogLevel.INFO
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

"""Project domain models."""

from __future__ import annotations

import time
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GenerationMode(str, Enum):
    """How a prompt is turned into a project."""

    GENERATE = "generate"
    PASTE = "paste"


class FileEntry(BaseModel):
    """One source file of a generated project."""

    path: str
    content: str


class Project(BaseModel):
    """Generated or pasted project ready for deployment."""

    name: str
    description: str = ""
    files: list[FileEntry] = Field(default_factory=list)

    @field_validator("files")
    @classmethod
    def validate_unique_paths(cls, files: list[FileEntry]) -> list[FileEntry]:
        seen: set[str] = set()
        for entry in files:
            if entry.path in seen:
                msg = f"Duplicate file path: {entry.path}"
                raise ValueError(msg)
            seen.add(entry.path)
        return files


def _record_id() -> str:
    return uuid4().hex[:12]


def _now_millis() -> int:
    return int(time.time() * 1000)


class SavedProjectRecord(BaseModel):
    """Snapshot of a project and the prompt that produced it."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_record_id)
    timestamp: int = Field(default_factory=_now_millis)
    prompt: str
    project: Project

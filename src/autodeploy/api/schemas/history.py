"""History API schemas."""

from __future__ import annotations

from pydantic import BaseModel

from autodeploy.models.project import SavedProjectRecord


class HistoryResponse(BaseModel):
    """Saved projects, newest first."""

    items: list[SavedProjectRecord]


class SaveProjectResponse(BaseModel):
    """Outcome of saving the current project."""

    duplicate: bool
    items: list[SavedProjectRecord]

"""Capability protocols for remote services used by the core."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from autodeploy.models.project import GenerationMode, Project, SavedProjectRecord


@dataclass(slots=True)
class CreatedRepository:
    """Repository returned by the source-control host."""

    url: str
    full_name: str


@dataclass(slots=True)
class HostedProject:
    """Hosting project returned by the hosting provider."""

    name: str
    url: str


class SourceControlAdapter(Protocol):
    """Repository host operations."""

    async def verify(self, token: str) -> str:
        """Return the username owning ``token`` or raise ``AuthError``."""

    async def create_repository(
        self, token: str, name: str, description: str
    ) -> CreatedRepository:
        """Create a public repository for the token owner."""

    async def get_file_revision(
        self, token: str, owner: str, repo: str, path: str
    ) -> str | None:
        """Return the current revision marker of ``path`` or None if absent."""

    async def put_file(
        self,
        token: str,
        owner: str,
        repo: str,
        path: str,
        content: str,
        revision: str | None = None,
    ) -> None:
        """Create or replace ``path`` with ``content``."""


class CodeGenAdapter(Protocol):
    """Turns a prompt into a project."""

    async def generate(self, prompt: str, mode: GenerationMode) -> Project:
        """Generate a project from a description or pasted code."""


class HostingAdapter(Protocol):
    """Hosting provider operations."""

    async def provision(
        self, token: str, project_name: str, repo_identifier: str
    ) -> HostedProject:
        """Create a hosting project linked to ``owner/repo``."""


class RemoteHistoryStore(Protocol):
    """Remote copy of the saved project history."""

    async def load(self, token: str) -> list[SavedProjectRecord] | None:
        """Return the remote history, or None when no remote record exists.

        Raises ServiceError when the remote copy cannot be read.
        """

    async def save(self, token: str, history: Sequence[SavedProjectRecord]) -> None:
        """Replace the remote history."""

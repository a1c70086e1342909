"""Session API schemas."""

from __future__ import annotations

from pydantic import BaseModel

from autodeploy.core.session import DeploySession, SessionAction
from autodeploy.models.events import LogEntry
from autodeploy.models.project import GenerationMode, Project
from autodeploy.models.session import Credentials, Phase, PipelineResult


class LoginRequest(BaseModel):
    """Credentials submitted from the configuration form."""

    source_control_token: str
    hosting_token: str | None = None
    auto_hosting_enabled: bool = False

    def to_credentials(self) -> Credentials:
        return Credentials(
            source_control_token=self.source_control_token,
            hosting_token=self.hosting_token or None,
            auto_hosting_enabled=self.auto_hosting_enabled,
        )


class GenerateRequest(BaseModel):
    """Prompt payload."""

    prompt: str
    mode: GenerationMode = GenerationMode.GENERATE


class SessionStateResponse(BaseModel):
    """Current position of the session."""

    phase: Phase
    username: str
    prompt: str
    mode: GenerationMode
    project: Project | None
    result: PipelineResult | None
    allowed_actions: list[SessionAction]

    @classmethod
    def from_session(cls, session: DeploySession) -> SessionStateResponse:
        return cls(
            phase=session.phase,
            username=session.credentials.username,
            prompt=session.prompt,
            mode=session.mode,
            project=session.project,
            result=session.result,
            allowed_actions=sorted(session.allowed_actions()),
        )


class LogsResponse(BaseModel):
    """Activity log entries in insertion order."""

    items: list[LogEntry]


class TemplateItem(BaseModel):
    name: str
    title: str


class TemplatesResponse(BaseModel):
    """Built-in paste-mode inputs."""

    items: list[TemplateItem]

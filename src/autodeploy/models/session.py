"""Session-level models: credentials, phases and deployment results."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class Phase(StrEnum):
    """Position of the end-to-end flow."""

    CONFIGURING = "configuring"
    AWAITING_PROMPT = "awaiting_prompt"
    GENERATING = "generating"
    REVIEWING_PROJECT = "reviewing_project"
    DEPLOYING = "deploying"
    SUCCEEDED = "succeeded"


class Credentials(BaseModel):
    """Authorization bundle supplied by the user."""

    source_control_token: str = ""
    hosting_token: str | None = None
    username: str = ""
    auto_hosting_enabled: bool = False

    @property
    def has_source_control_token(self) -> bool:
        return bool(self.source_control_token)

    @property
    def can_provision_hosting(self) -> bool:
        return self.auto_hosting_enabled and bool(self.hosting_token)


class PipelineResult(BaseModel):
    """Outcome of one successful pipeline run."""

    repository_url: str
    hosting_url: str | None = None
    hosting_provisioned: bool = False

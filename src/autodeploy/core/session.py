"""Orchestration state machine for one user session."""

from __future__ import annotations

from enum import StrEnum
from typing import NoReturn, assert_never

from autodeploy.adapters.base import CodeGenAdapter, SourceControlAdapter
from autodeploy.core.activity_log import ActivityLog
from autodeploy.core.errors import (
    AuthError,
    PhaseError,
    RecordNotFoundError,
    ServiceError,
    ValidationError,
)
from autodeploy.core.history import CreateOutcome, HistoryReconciler, SyncStatus
from autodeploy.core.pipeline import DeploymentPipeline
from autodeploy.core.templates import TEMPLATES, render_template
from autodeploy.db.store import SQLiteStore
from autodeploy.logging_config import get_logger
from autodeploy.models.events import LogEntry, LogLevel
from autodeploy.models.project import GenerationMode, Project, SavedProjectRecord
from autodeploy.models.session import Credentials, Phase, PipelineResult

logger = get_logger(__name__)


class SessionAction(StrEnum):
    """User actions gated by the current phase."""

    LOGIN = "login"
    GENERATE = "generate"
    DEPLOY = "deploy"
    SAVE_PROJECT = "save_project"
    LOAD_PROJECT = "load_project"
    BACK = "back"
    RESTART = "restart"


class SessionEvent(StrEnum):
    """Events that move the session between phases."""

    CREDENTIALS_VERIFIED = "credentials_verified"
    GENERATE_REQUESTED = "generate_requested"
    GENERATION_SUCCEEDED = "generation_succeeded"
    GENERATION_FAILED = "generation_failed"
    DEPLOY_REQUESTED = "deploy_requested"
    PIPELINE_SUCCEEDED = "pipeline_succeeded"
    PIPELINE_FAILED = "pipeline_failed"
    NAVIGATE_BACK = "navigate_back"
    RESTART = "restart"
    PROJECT_LOADED = "project_loaded"
    AUTH_REJECTED = "auth_rejected"


TRANSITIONS: dict[tuple[Phase, SessionEvent], Phase] = {
    (Phase.CONFIGURING, SessionEvent.CREDENTIALS_VERIFIED): Phase.AWAITING_PROMPT,
    (Phase.AWAITING_PROMPT, SessionEvent.GENERATE_REQUESTED): Phase.GENERATING,
    (Phase.GENERATING, SessionEvent.GENERATION_SUCCEEDED): Phase.REVIEWING_PROJECT,
    (Phase.GENERATING, SessionEvent.GENERATION_FAILED): Phase.AWAITING_PROMPT,
    (Phase.REVIEWING_PROJECT, SessionEvent.DEPLOY_REQUESTED): Phase.DEPLOYING,
    (Phase.DEPLOYING, SessionEvent.PIPELINE_SUCCEEDED): Phase.SUCCEEDED,
    (Phase.DEPLOYING, SessionEvent.PIPELINE_FAILED): Phase.REVIEWING_PROJECT,
    (Phase.REVIEWING_PROJECT, SessionEvent.NAVIGATE_BACK): Phase.AWAITING_PROMPT,
    (Phase.SUCCEEDED, SessionEvent.NAVIGATE_BACK): Phase.REVIEWING_PROJECT,
    (Phase.SUCCEEDED, SessionEvent.RESTART): Phase.AWAITING_PROMPT,
    (Phase.AWAITING_PROMPT, SessionEvent.PROJECT_LOADED): Phase.REVIEWING_PROJECT,
    (Phase.REVIEWING_PROJECT, SessionEvent.PROJECT_LOADED): Phase.REVIEWING_PROJECT,
    (Phase.SUCCEEDED, SessionEvent.PROJECT_LOADED): Phase.REVIEWING_PROJECT,
    **{(phase, SessionEvent.AUTH_REJECTED): Phase.CONFIGURING for phase in Phase},
}


def allowed_actions(phase: Phase) -> frozenset[SessionAction]:
    """Actions a user may trigger in ``phase``."""
    match phase:
        case Phase.CONFIGURING:
            return frozenset({SessionAction.LOGIN})
        case Phase.AWAITING_PROMPT:
            return frozenset({SessionAction.GENERATE, SessionAction.LOAD_PROJECT})
        case Phase.GENERATING | Phase.DEPLOYING:
            return frozenset()
        case Phase.REVIEWING_PROJECT:
            return frozenset(
                {
                    SessionAction.DEPLOY,
                    SessionAction.SAVE_PROJECT,
                    SessionAction.LOAD_PROJECT,
                    SessionAction.BACK,
                }
            )
        case Phase.SUCCEEDED:
            return frozenset(
                {
                    SessionAction.SAVE_PROJECT,
                    SessionAction.LOAD_PROJECT,
                    SessionAction.BACK,
                    SessionAction.RESTART,
                }
            )
        case _:
            assert_never(phase)


class DeploySession:
    """Drive one user from credentials to a deployed project.

    Entering ``GENERATING`` or ``DEPLOYING`` acts as a run lock: every other
    trigger is rejected with ``PhaseError`` until the run leaves that phase.
    Failures write exactly one activity log entry and are re-raised after the
    matching back-edge has been taken.
    """

    def __init__(
        self,
        *,
        store: SQLiteStore,
        source_control: SourceControlAdapter,
        code_gen: CodeGenAdapter,
        pipeline: DeploymentPipeline,
        history: HistoryReconciler,
    ) -> None:
        self._store = store
        self._source_control = source_control
        self._code_gen = code_gen
        self._pipeline = pipeline
        self._history = history
        self._log = ActivityLog()
        self.phase = Phase.CONFIGURING
        self.credentials = Credentials()
        self.prompt = ""
        self.mode = GenerationMode.GENERATE
        self.project: Project | None = None
        self.result: PipelineResult | None = None

    @property
    def logs(self) -> list[LogEntry]:
        return self._log.entries()

    @property
    def history(self) -> list[SavedProjectRecord]:
        return self._history.history

    def allowed_actions(self) -> frozenset[SessionAction]:
        return allowed_actions(self.phase)

    async def initialize(self) -> None:
        """Load local state and restore a previously verified login."""
        await self._history.load()
        self.credentials = await self._store.load_credentials()
        if not self.credentials.has_source_control_token:
            return
        try:
            username = await self._source_control.verify(self.credentials.source_control_token)
        except (AuthError, ServiceError):
            self._log.add("Saved token expired or invalid. Please login again.", LogLevel.WARNING)
            return
        self.credentials = self.credentials.model_copy(update={"username": username})
        self._transition(SessionEvent.CREDENTIALS_VERIFIED)
        self._log.add(f"Welcome back, {username}. Session restored.", LogLevel.SUCCESS)
        await self.sync_history(silent=True)

    async def login(self, credentials: Credentials) -> str:
        self._require(SessionAction.LOGIN)
        if not credentials.has_source_control_token:
            self._reject("A source-control token is required.")
        self._log.add("Verifying GitHub credentials...")
        try:
            username = await self._source_control.verify(credentials.source_control_token)
        except (AuthError, ServiceError) as exc:
            self._log.add(str(exc), LogLevel.ERROR)
            raise
        self.credentials = credentials.model_copy(update={"username": username})
        await self._store.save_credentials(self.credentials)
        self._transition(SessionEvent.CREDENTIALS_VERIFIED)
        self._log.add(f"Hello, {username}! Login successful.", LogLevel.SUCCESS)
        await self.sync_history()
        return username

    async def sync_history(self, *, silent: bool = False) -> list[SavedProjectRecord]:
        token = self.credentials.source_control_token
        if not token:
            return self.history
        if not silent:
            self._log.add("Syncing projects with GitHub...")
        outcome = await self._history.sync(token)
        match outcome.status:
            case SyncStatus.FAILED:
                self._log.add(f"Failed to sync history: {outcome.error}", LogLevel.ERROR)
            case SyncStatus.MERGED if not silent:
                self._log.add(
                    f"History synced ({len(outcome.history)} projects).", LogLevel.SUCCESS
                )
            case SyncStatus.ABSENT if not silent:
                self._log.add("No cloud history found. It will be created on the next save.")
        return outcome.history

    async def generate(
        self, prompt: str, mode: GenerationMode = GenerationMode.GENERATE
    ) -> Project:
        self._require(SessionAction.GENERATE)
        if not prompt.strip():
            self._reject("Describe a project or paste code before generating.")

        self.prompt = prompt
        self.mode = mode
        self._transition(SessionEvent.GENERATE_REQUESTED)
        if mode is GenerationMode.GENERATE:
            self._log.add(f'Brainstorming code for: "{prompt[:30]}..."')
        else:
            self._log.add("Analyzing code structure...")

        try:
            project = await self._code_gen.generate(prompt, mode)
        except AuthError as exc:
            self._log.add(str(exc), LogLevel.ERROR)
            self._transition(SessionEvent.AUTH_REJECTED)
            raise
        except ServiceError as exc:
            self._log.add(str(exc), LogLevel.ERROR)
            self._transition(SessionEvent.GENERATION_FAILED)
            raise
        except Exception as exc:
            self._log.add(f"Generation failed unexpectedly: {exc}", LogLevel.ERROR)
            self._transition(SessionEvent.GENERATION_FAILED)
            raise

        self.project = project
        self.result = None
        self._transition(SessionEvent.GENERATION_SUCCEEDED)
        self._log.add(
            f'Prepared "{project.name}" with {len(project.files)} files.', LogLevel.SUCCESS
        )
        await self._record(project)
        return project

    async def deploy(self) -> PipelineResult:
        self._require(SessionAction.DEPLOY)
        if self.project is None:
            self._reject("There is no project to deploy.")
        if not self.credentials.username:
            self._reject("The source-control username is unknown. Please login again.")

        self._transition(SessionEvent.DEPLOY_REQUESTED)
        self._log.add("Initiating deployment sequence...", LogLevel.WARNING)
        try:
            result = await self._pipeline.deploy(self.project, self.credentials, self._log.add)
        except AuthError as exc:
            self._log.add(str(exc), LogLevel.ERROR)
            self._transition(SessionEvent.AUTH_REJECTED)
            raise
        except ServiceError as exc:
            self._log.add(str(exc), LogLevel.ERROR)
            self._transition(SessionEvent.PIPELINE_FAILED)
            raise
        except Exception as exc:
            self._log.add(f"Deployment failed unexpectedly: {exc}", LogLevel.ERROR)
            self._transition(SessionEvent.PIPELINE_FAILED)
            raise

        self.result = result
        self._transition(SessionEvent.PIPELINE_SUCCEEDED)
        self._log.add(f"Deployed to {result.repository_url}", LogLevel.SUCCESS)
        return result

    async def save_current_project(self) -> CreateOutcome:
        self._require(SessionAction.SAVE_PROJECT)
        if self.project is None:
            self._reject("There is no project to save.")
        return await self._record(self.project)

    async def load_project(self, record_id: str) -> SavedProjectRecord:
        self._require(SessionAction.LOAD_PROJECT)
        record = self._history.get(record_id)
        if record is None:
            raise RecordNotFoundError(f"Saved project not found: {record_id}")
        self.prompt = record.prompt
        self.project = record.project
        self.result = None
        self._transition(SessionEvent.PROJECT_LOADED)
        self._log.add(f'Loaded project "{record.project.name}" from history.')
        return record

    def load_template(self, name: str) -> str:
        """Fill the prompt with a built-in paste-mode input."""
        self._require(SessionAction.GENERATE)
        prompt = render_template(name)
        if prompt is None:
            raise RecordNotFoundError(f"Unknown template: {name}")
        self.prompt = prompt
        self.mode = GenerationMode.PASTE
        self._log.add(TEMPLATES[name].loaded_message, LogLevel.SUCCESS)
        return prompt

    async def delete_project(self, record_id: str) -> list[SavedProjectRecord]:
        return await self._history.record_delete(
            record_id, self.credentials.source_control_token
        )

    def back(self) -> Phase:
        self._require(SessionAction.BACK)
        self._transition(SessionEvent.NAVIGATE_BACK)
        return self.phase

    def restart(self) -> Phase:
        self._require(SessionAction.RESTART)
        self.prompt = ""
        self.project = None
        self.result = None
        self._log.clear()
        self._transition(SessionEvent.RESTART)
        return self.phase

    async def _record(self, project: Project) -> CreateOutcome:
        outcome = await self._history.record_create(
            SavedProjectRecord(prompt=self.prompt, project=project),
            self.credentials.source_control_token,
        )
        if outcome.duplicate:
            self._log.add(f'Project "{project.name}" is already saved.', LogLevel.WARNING)
        else:
            self._log.add(f'Project "{project.name}" saved to history.', LogLevel.SUCCESS)
        return outcome

    def _require(self, action: SessionAction) -> None:
        if action in allowed_actions(self.phase):
            return
        if self.phase in {Phase.GENERATING, Phase.DEPLOYING}:
            msg = f"Cannot {action.value} while {self.phase.value}: a run is already in progress"
        else:
            msg = f"Cannot {action.value} while {self.phase.value}"
        logger.debug("action_rejected", action=action.value, phase=self.phase.value)
        raise PhaseError(msg)

    def _reject(self, message: str) -> NoReturn:
        self._log.add(message, LogLevel.WARNING)
        raise ValidationError(message)

    def _transition(self, event: SessionEvent) -> None:
        target = TRANSITIONS.get((self.phase, event))
        if target is None:
            msg = f"No transition for {event.value} from {self.phase.value}"
            raise PhaseError(msg)
        logger.info(
            "phase_changed", trigger=event.value, source=self.phase.value, target=target.value
        )
        self.phase = target

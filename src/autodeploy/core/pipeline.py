"""Deployment pipeline: repository creation, file upload and hosting."""

from __future__ import annotations

import random

from autodeploy.adapters.base import HostingAdapter, SourceControlAdapter
from autodeploy.core.activity_log import ProgressSink
from autodeploy.core.errors import AuthError, DeploymentError, ServiceError
from autodeploy.logging_config import get_logger
from autodeploy.models.events import LogLevel
from autodeploy.models.project import Project
from autodeploy.models.session import Credentials, PipelineResult

logger = get_logger(__name__)

REPO_SUFFIX_LIMIT = 1000


def _discard(message: str, level: LogLevel) -> None:
    return None


class DeploymentPipeline:
    """Publish a project to the source-control host and optionally to hosting.

    Repository creation and file uploads are fatal on failure. Hosting
    provisioning is an enhancement: its failure is reported through the
    progress sink and the run still succeeds without a hosting URL. Files that
    were uploaded before a failure stay on the remote repository.
    """

    def __init__(
        self,
        source_control: SourceControlAdapter,
        hosting: HostingAdapter | None = None,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self._source_control = source_control
        self._hosting = hosting
        self._rng = rng or random.Random()

    def repository_name(self, project: Project) -> str:
        """Project name plus a random numeric suffix; collisions are not checked."""
        return f"{project.name}-{self._rng.randrange(REPO_SUFFIX_LIMIT)}"

    async def deploy(
        self,
        project: Project,
        credentials: Credentials,
        progress: ProgressSink | None = None,
    ) -> PipelineResult:
        emit = progress or _discard
        token = credentials.source_control_token
        owner = credentials.username
        repo_name = self.repository_name(project)

        emit(f"1. Creating repository '{repo_name}'...", LogLevel.INFO)
        repository = await self._source_control.create_repository(
            token, repo_name, project.description
        )
        emit("Repository created successfully.", LogLevel.SUCCESS)

        emit("2. Uploading source code...", LogLevel.INFO)
        for entry in project.files:
            emit(f"Pushing {entry.path}...", LogLevel.INFO)
            revision = await self._probe_revision(token, owner, repo_name, entry.path)
            try:
                await self._source_control.put_file(
                    token, owner, repo_name, entry.path, entry.content, revision
                )
            except AuthError as exc:
                msg = f"Failed to upload {entry.path}: {exc}"
                raise AuthError(msg) from exc
            except ServiceError as exc:
                msg = f"Failed to upload {entry.path}: {exc}"
                raise DeploymentError(msg, path=entry.path, cause=exc) from exc
        emit("Source code uploaded.", LogLevel.SUCCESS)

        hosting_url = await self._provision_hosting(credentials, repo_name, emit)

        logger.info(
            "pipeline_completed",
            repository=repository.full_name,
            files=len(project.files),
            hosting_provisioned=hosting_url is not None,
        )
        return PipelineResult(
            repository_url=repository.url,
            hosting_url=hosting_url,
            hosting_provisioned=hosting_url is not None,
        )

    async def _probe_revision(self, token: str, owner: str, repo: str, path: str) -> str | None:
        try:
            return await self._source_control.get_file_revision(token, owner, repo, path)
        except Exception as exc:  # noqa: BLE001
            logger.debug("revision_probe_failed", repo=repo, path=path, error=str(exc))
            return None

    async def _provision_hosting(
        self,
        credentials: Credentials,
        repo_name: str,
        emit: ProgressSink,
    ) -> str | None:
        if self._hosting is None or not credentials.can_provision_hosting:
            emit("3. Skipping auto-hosting (disabled or no token).", LogLevel.INFO)
            return None

        emit("3. Creating hosting project...", LogLevel.INFO)
        try:
            hosted = await self._hosting.provision(
                credentials.hosting_token or "",
                repo_name,
                f"{credentials.username}/{repo_name}",
            )
        except (AuthError, ServiceError) as exc:
            logger.warning("hosting_provision_failed", repo=repo_name, error=str(exc))
            emit(
                f"Auto-hosting failed ({exc}). Falling back to manual import.",
                LogLevel.WARNING,
            )
            return None
        emit("Hosting project created. Build triggered.", LogLevel.SUCCESS)
        return hosted.url

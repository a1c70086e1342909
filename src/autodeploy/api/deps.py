"""Shared API dependency providers."""

from __future__ import annotations

import asyncio

from autodeploy.adapters.gemini import GeminiAdapter
from autodeploy.adapters.github import GistHistoryStore, GitHubAdapter
from autodeploy.adapters.vercel import VercelAdapter
from autodeploy.core.history import HistoryReconciler
from autodeploy.core.pipeline import DeploymentPipeline
from autodeploy.core.session import DeploySession
from autodeploy.db.store import SQLiteStore
from autodeploy.settings import AutoDeploySettings

_SETTINGS = AutoDeploySettings()
_SESSION: DeploySession | None = None
_SESSION_LOCK = asyncio.Lock()


def get_settings() -> AutoDeploySettings:
    return _SETTINGS


def get_store() -> SQLiteStore:
    _SETTINGS.db_path.parent.mkdir(parents=True, exist_ok=True)
    return SQLiteStore(db_path=_SETTINGS.db_path)


def build_session(settings: AutoDeploySettings, store: SQLiteStore) -> DeploySession:
    """Wire the session with the HTTP adapters described by ``settings``."""
    timeout = settings.request_timeout_seconds
    github = GitHubAdapter(base_url=settings.github_api_base, timeout=timeout)
    gist = GistHistoryStore(
        base_url=settings.github_api_base,
        timeout=timeout,
        filename=settings.history_gist_filename,
        description=settings.history_gist_description,
    )
    vercel = VercelAdapter(base_url=settings.vercel_api_base, timeout=timeout)
    gemini = GeminiAdapter(
        api_key=settings.gemini_api_key,
        model=settings.gemini_model,
        temperature=settings.gemini_temperature,
        base_url=settings.gemini_api_base,
    )
    return DeploySession(
        store=store,
        source_control=github,
        code_gen=gemini,
        pipeline=DeploymentPipeline(github, vercel),
        history=HistoryReconciler(store, gist),
    )


async def get_session() -> DeploySession:
    global _SESSION
    if _SESSION is not None:
        return _SESSION
    async with _SESSION_LOCK:
        if _SESSION is None:
            session = build_session(_SETTINGS, get_store())
            await session.initialize()
            _SESSION = session
    return _SESSION

"""GitHub REST adapters: repositories, file contents and gist-backed history."""

from __future__ import annotations

import base64
import json
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError as PydanticValidationError

from autodeploy.adapters.base import CreatedRepository
from autodeploy.core.errors import AuthError, ServiceError
from autodeploy.logging_config import get_logger
from autodeploy.models.project import SavedProjectRecord

logger = get_logger(__name__)

GITHUB_API_BASE = "https://api.github.com"
COMMIT_MESSAGE_TEMPLATE = "Add {path} via AutoDeploy Agent"


def _headers(token: str) -> dict[str, str]:
    return {
        "Authorization": f"token {token}",
        "Accept": "application/vnd.github.v3+json",
    }


def _error_message(resp: httpx.Response) -> str:
    try:
        payload = resp.json()
    except ValueError:
        return resp.text or resp.reason_phrase
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return resp.reason_phrase


class _GitHubClientMixin:
    def __init__(
        self,
        *,
        base_url: str = GITHUB_API_BASE,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        async with httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            yield client


class GitHubAdapter(_GitHubClientMixin):
    """Source-control operations backed by the GitHub REST API."""

    async def verify(self, token: str) -> str:
        try:
            async with self._client() as client:
                resp = await client.get("/user", headers=_headers(token))
        except httpx.HTTPError as exc:
            msg = f"GitHub verification failed: {exc}"
            raise ServiceError(msg) from exc
        if not resp.is_success:
            raise AuthError("Invalid GitHub Token")
        return str(resp.json()["login"])

    async def create_repository(
        self, token: str, name: str, description: str
    ) -> CreatedRepository:
        payload = {
            "name": name,
            "description": description,
            "private": False,
            "auto_init": True,
        }
        try:
            async with self._client() as client:
                resp = await client.post("/user/repos", headers=_headers(token), json=payload)
        except httpx.HTTPError as exc:
            msg = f"GitHub Create Repo Error: {exc}"
            raise ServiceError(msg) from exc

        if resp.status_code == httpx.codes.UNAUTHORIZED:
            raise AuthError("GitHub token was rejected")
        if not resp.is_success:
            msg = f"GitHub Create Repo Error: {_error_message(resp)}"
            raise ServiceError(msg, status_code=resp.status_code)

        data = resp.json()
        logger.info("github_repo_created", name=name, repo_url=data.get("html_url"))
        return CreatedRepository(url=str(data["html_url"]), full_name=str(data["full_name"]))

    async def get_file_revision(
        self, token: str, owner: str, repo: str, path: str
    ) -> str | None:
        try:
            async with self._client() as client:
                resp = await client.get(
                    f"/repos/{owner}/{repo}/contents/{quote(path)}",
                    headers=_headers(token),
                )
        except httpx.HTTPError as exc:
            msg = f"Failed to probe {path}: {exc}"
            raise ServiceError(msg) from exc
        if resp.status_code == httpx.codes.NOT_FOUND:
            return None
        if not resp.is_success:
            msg = f"Failed to probe {path}: {_error_message(resp)}"
            raise ServiceError(msg, status_code=resp.status_code)
        payload = resp.json()
        # A directory path answers with a listing instead of a file object.
        if not isinstance(payload, dict):
            return None
        sha = payload.get("sha")
        return str(sha) if sha else None

    async def put_file(
        self,
        token: str,
        owner: str,
        repo: str,
        path: str,
        content: str,
        revision: str | None = None,
    ) -> None:
        payload: dict[str, Any] = {
            "message": COMMIT_MESSAGE_TEMPLATE.format(path=path),
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
        }
        if revision:
            payload["sha"] = revision

        try:
            async with self._client() as client:
                resp = await client.put(
                    f"/repos/{owner}/{repo}/contents/{quote(path)}",
                    headers=_headers(token),
                    json=payload,
                )
        except httpx.HTTPError as exc:
            msg = f"GitHub upload error: {exc}"
            raise ServiceError(msg) from exc

        if resp.status_code == httpx.codes.UNAUTHORIZED:
            raise AuthError("GitHub token was rejected")
        if not resp.is_success:
            msg = f"GitHub upload error: {_error_message(resp)}"
            raise ServiceError(msg, status_code=resp.status_code)

        logger.debug(
            "github_file_uploaded",
            owner=owner,
            repo=repo,
            path=path,
            action="update" if revision else "create",
        )


class GistHistoryStore(_GitHubClientMixin):
    """Stores the project history as a JSON file inside a private gist."""

    def __init__(
        self,
        *,
        base_url: str = GITHUB_API_BASE,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
        filename: str = "autodeploy-data.json",
        description: str = "autodeploy-sync",
    ) -> None:
        super().__init__(base_url=base_url, timeout=timeout, transport=transport)
        self._filename = filename
        self._description = description

    async def load(self, token: str) -> list[SavedProjectRecord] | None:
        try:
            async with self._client() as client:
                gist = await self._find_gist(client, token)
                if gist is None:
                    return None
                file_info = gist.get("files", {}).get(self._filename)
                if not file_info or not file_info.get("raw_url"):
                    return None
                resp = await client.get(str(file_info["raw_url"]), headers=_headers(token))
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("history_gist_load_failed", error=str(exc))
            msg = f"Failed to load history gist: {exc}"
            raise ServiceError(msg) from exc

        items = data.get("history") if isinstance(data, dict) else None
        try:
            return [SavedProjectRecord.model_validate(item) for item in items or []]
        except PydanticValidationError as exc:
            logger.warning("history_gist_invalid", error=str(exc))
            msg = "History gist content is not a valid project history"
            raise ServiceError(msg) from exc

    async def save(self, token: str, history: Sequence[SavedProjectRecord]) -> None:
        body = {
            "history": [record.model_dump(mode="json") for record in history],
            "lastUpdated": datetime.now(UTC).isoformat(),
        }
        payload = {
            "description": self._description,
            "public": False,
            "files": {self._filename: {"content": json.dumps(body, separators=(",", ":"))}},
        }
        try:
            async with self._client() as client:
                gist = await self._find_gist(client, token)
                if gist is not None:
                    resp = await client.patch(
                        f"/gists/{gist['id']}", headers=_headers(token), json=payload
                    )
                else:
                    resp = await client.post("/gists", headers=_headers(token), json=payload)
                resp.raise_for_status()
        except httpx.HTTPError as exc:
            msg = f"Gist sync failed: {exc}"
            raise ServiceError(msg) from exc
        logger.info("history_gist_saved", records=len(history), created=gist is None)

    async def _find_gist(self, client: httpx.AsyncClient, token: str) -> dict[str, Any] | None:
        resp = await client.get("/gists", headers=_headers(token))
        resp.raise_for_status()
        for gist in resp.json():
            if isinstance(gist, dict) and gist.get("description") == self._description:
                return gist
        return None

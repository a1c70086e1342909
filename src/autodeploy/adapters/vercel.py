"""Vercel hosting adapter."""

from __future__ import annotations

import httpx

from autodeploy.adapters.base import HostedProject
from autodeploy.core.errors import AuthError, ServiceError
from autodeploy.logging_config import get_logger

logger = get_logger(__name__)

VERCEL_API_BASE = "https://api.vercel.com"
VERCEL_DASHBOARD_BASE = "https://vercel.com"
PROJECT_ALREADY_EXISTS = "PROJECT_ALREADY_EXISTS"


def dashboard_url(repo_identifier: str, project_name: str) -> str:
    """Dashboard URL of ``project_name`` under the repository owner's scope."""
    owner = repo_identifier.split("/")[0]
    return f"{VERCEL_DASHBOARD_BASE}/{owner}/{project_name}"


class VercelAdapter:
    """Create Vercel projects linked to a GitHub repository."""

    def __init__(
        self,
        *,
        base_url: str = VERCEL_API_BASE,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
        git_provider: str = "github",
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._git_provider = git_provider

    async def provision(
        self, token: str, project_name: str, repo_identifier: str
    ) -> HostedProject:
        payload = {
            "name": project_name,
            "gitRepository": {"type": self._git_provider, "repo": repo_identifier},
            "framework": "vite",
            "buildCommand": "npm run build",
            "outputDirectory": "dist",
            "serverlessFunctionRegion": "iad1",
        }
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                resp = await client.post(
                    "/v9/projects",
                    headers={"Authorization": f"Bearer {token}"},
                    json=payload,
                )
        except httpx.HTTPError as exc:
            msg = f"Failed to create Vercel project: {exc}"
            raise ServiceError(msg) from exc

        if resp.is_success:
            name = str(resp.json().get("name") or project_name)
            logger.info("vercel_project_created", name=name, repo=repo_identifier)
            return HostedProject(name=name, url=dashboard_url(repo_identifier, name))

        error = self._error_payload(resp)
        if error.get("code") == PROJECT_ALREADY_EXISTS:
            logger.info("vercel_project_exists", name=project_name, repo=repo_identifier)
            return HostedProject(
                name=project_name,
                url=dashboard_url(repo_identifier, project_name),
            )
        if resp.status_code in {httpx.codes.UNAUTHORIZED, httpx.codes.FORBIDDEN}:
            raise AuthError(str(error.get("message") or "Vercel token was rejected"))
        raise ServiceError(
            str(error.get("message") or "Failed to create Vercel project"),
            status_code=resp.status_code,
        )

    @staticmethod
    def _error_payload(resp: httpx.Response) -> dict[str, object]:
        try:
            body = resp.json()
        except ValueError:
            return {}
        if not isinstance(body, dict):
            return {}
        error = body.get("error", body)
        return error if isinstance(error, dict) else {}

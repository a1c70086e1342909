from __future__ import annotations

import json

import httpx
import pytest

from autodeploy.adapters.vercel import VercelAdapter, dashboard_url
from autodeploy.core.errors import ServiceError


def test_dashboard_url_uses_repository_owner() -> None:
    assert dashboard_url("octo/demo-1", "demo-1") == "https://vercel.com/octo/demo-1"


@pytest.mark.asyncio
async def test_provision_creates_vite_project() -> None:
    seen: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"name": "demo-1"})

    adapter = VercelAdapter(transport=httpx.MockTransport(handler))
    hosted = await adapter.provision("vtok", "demo-1", "octo/demo-1")

    body = seen["body"]
    assert isinstance(body, dict)
    assert seen["auth"] == "Bearer vtok"
    assert body["gitRepository"] == {"type": "github", "repo": "octo/demo-1"}
    assert body["framework"] == "vite"
    assert body["outputDirectory"] == "dist"
    assert hosted.url == "https://vercel.com/octo/demo-1"


@pytest.mark.asyncio
async def test_provision_already_exists_is_success() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            409,
            json={"error": {"code": "PROJECT_ALREADY_EXISTS", "message": "exists"}},
        )

    adapter = VercelAdapter(transport=httpx.MockTransport(handler))
    hosted = await adapter.provision("vtok", "demo-1", "octo/demo-1")

    assert hosted.name == "demo-1"
    assert hosted.url == "https://vercel.com/octo/demo-1"


@pytest.mark.asyncio
async def test_provision_failure_raises_service_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": {"code": "bad_request", "message": "Invalid"}})

    adapter = VercelAdapter(transport=httpx.MockTransport(handler))

    with pytest.raises(ServiceError, match="Invalid"):
        await adapter.provision("vtok", "demo-1", "octo/demo-1")

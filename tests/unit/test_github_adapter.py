from __future__ import annotations

import base64
import json

import httpx
import pytest

from autodeploy.adapters.github import GistHistoryStore, GitHubAdapter
from autodeploy.core.errors import AuthError, ServiceError
from tests.support.fakes import make_record


def _adapter(handler) -> GitHubAdapter:
    return GitHubAdapter(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_verify_returns_login() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/user"
        assert request.headers["Authorization"] == "token tok"
        return httpx.Response(200, json={"login": "octo"})

    assert await _adapter(handler).verify("tok") == "octo"


@pytest.mark.asyncio
async def test_verify_rejects_bad_token() -> None:
    adapter = _adapter(lambda request: httpx.Response(401, json={"message": "Bad credentials"}))

    with pytest.raises(AuthError, match="Invalid GitHub Token"):
        await adapter.verify("bad")


@pytest.mark.asyncio
async def test_create_repository_posts_public_auto_init() -> None:
    seen: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            201,
            json={"html_url": "https://github.com/octo/demo-1", "full_name": "octo/demo-1"},
        )

    repo = await _adapter(handler).create_repository("tok", "demo-1", "Demo")

    assert seen["path"] == "/user/repos"
    assert seen["body"] == {
        "name": "demo-1",
        "description": "Demo",
        "private": False,
        "auto_init": True,
    }
    assert repo.url == "https://github.com/octo/demo-1"
    assert repo.full_name == "octo/demo-1"


@pytest.mark.asyncio
async def test_create_repository_surfaces_message() -> None:
    adapter = _adapter(
        lambda request: httpx.Response(422, json={"message": "name already exists"})
    )

    with pytest.raises(ServiceError) as excinfo:
        await adapter.create_repository("tok", "demo-1", "Demo")

    assert str(excinfo.value) == "GitHub Create Repo Error: name already exists"
    assert excinfo.value.status_code == 422


@pytest.mark.asyncio
async def test_get_file_revision() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/contents/src/main.ts"):
            return httpx.Response(200, json={"sha": "abc"})
        return httpx.Response(404, json={"message": "Not Found"})

    adapter = _adapter(handler)

    assert await adapter.get_file_revision("tok", "octo", "demo-1", "src/main.ts") == "abc"
    assert await adapter.get_file_revision("tok", "octo", "demo-1", "index.html") is None


@pytest.mark.asyncio
async def test_get_file_revision_of_directory_is_absent() -> None:
    adapter = _adapter(
        lambda request: httpx.Response(200, json=[{"name": "main.ts", "sha": "abc"}])
    )

    assert await adapter.get_file_revision("tok", "octo", "demo-1", "src") is None


@pytest.mark.asyncio
async def test_put_file_encodes_content_and_revision() -> None:
    seen: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"content": {"sha": "def"}})

    await _adapter(handler).put_file("tok", "octo", "demo-1", "index.html", "héllo", "abc")

    body = seen["body"]
    assert seen["method"] == "PUT"
    assert seen["path"] == "/repos/octo/demo-1/contents/index.html"
    assert isinstance(body, dict)
    assert base64.b64decode(body["content"]).decode("utf-8") == "héllo"
    assert body["sha"] == "abc"
    assert body["message"] == "Add index.html via AutoDeploy Agent"


@pytest.mark.asyncio
async def test_put_file_failure_raises_service_error() -> None:
    adapter = _adapter(lambda request: httpx.Response(409, json={"message": "sha mismatch"}))

    with pytest.raises(ServiceError, match="sha mismatch"):
        await adapter.put_file("tok", "octo", "demo-1", "index.html", "x")


def _gist_handler(state: dict[str, object]):
    def handler(request: httpx.Request) -> httpx.Response:
        state.setdefault("requests", []).append((request.method, str(request.url)))  # type: ignore[union-attr]
        if request.method == "GET" and request.url.path == "/gists":
            return httpx.Response(200, json=state.get("gists", []))
        if request.url.host == "gist.githubusercontent.com":
            return httpx.Response(200, json=state["raw"])
        if request.method in {"POST", "PATCH"}:
            state["written"] = json.loads(request.content)
            return httpx.Response(200, json={"id": "g1"})
        return httpx.Response(404)

    return handler


@pytest.mark.asyncio
async def test_gist_load_returns_none_without_sync_gist() -> None:
    state: dict[str, object] = {"gists": [{"id": "x", "description": "other", "files": {}}]}
    store = GistHistoryStore(transport=httpx.MockTransport(_gist_handler(state)))

    assert await store.load("tok") is None


@pytest.mark.asyncio
async def test_gist_load_reads_history() -> None:
    record = make_record("a", 5)
    state: dict[str, object] = {
        "gists": [
            {
                "id": "g1",
                "description": "autodeploy-sync",
                "files": {
                    "autodeploy-data.json": {
                        "raw_url": "https://gist.githubusercontent.com/octo/g1/raw"
                    }
                },
            }
        ],
        "raw": {"history": [record.model_dump(mode="json")], "lastUpdated": "now"},
    }
    store = GistHistoryStore(transport=httpx.MockTransport(_gist_handler(state)))

    assert await store.load("tok") == [record]


@pytest.mark.asyncio
async def test_gist_load_failure_raises_service_error() -> None:
    store = GistHistoryStore(
        transport=httpx.MockTransport(lambda request: httpx.Response(500))
    )

    with pytest.raises(ServiceError, match="Failed to load history gist"):
        await store.load("tok")


@pytest.mark.asyncio
async def test_gist_save_creates_then_updates() -> None:
    state: dict[str, object] = {"gists": []}
    store = GistHistoryStore(transport=httpx.MockTransport(_gist_handler(state)))

    await store.save("tok", [make_record("a", 5)])

    written = state["written"]
    assert isinstance(written, dict)
    assert written["description"] == "autodeploy-sync"
    assert written["public"] is False
    content = json.loads(written["files"]["autodeploy-data.json"]["content"])
    assert [item["id"] for item in content["history"]] == ["a"]
    assert ("POST", "https://api.github.com/gists") in state["requests"]  # type: ignore[operator]

    state["gists"] = [{"id": "g1", "description": "autodeploy-sync", "files": {}}]
    await store.save("tok", [])
    assert ("PATCH", "https://api.github.com/gists/g1") in state["requests"]  # type: ignore[operator]
